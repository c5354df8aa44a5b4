"""Tests for allocation_engine.metrics."""

from datetime import date

from allocation_engine.metrics import (
    active_project_count,
    completed_projects,
    dashboard_overview,
    project_total_days,
    span_days,
    upcoming_deadlines,
    utilization,
)

TALENTS = [{"id": "t1"}, {"id": "t2"}]

PROJECTS = [
    {"id": "p1", "name": "Relaunch", "status": "in_progress", "end_date": "2024-02-20"},
    {"id": "p2", "name": "Campaign", "status": "upcoming", "end_date": "2024-02-10"},
    {"id": "p3", "name": "Audit", "status": "completed", "end_date": "2024-02-05", "is_paid": True},
    {"id": "p4", "name": "Later", "status": "in_progress", "end_date": "2024-06-01"},
    {"id": "p5", "name": "Old", "status": "completed", "is_paid": False},
]


class TestUtilization:
    def test_no_talents(self):
        assert utilization([], [], 2024, 2) == 0

    def test_days_clipped_to_month(self):
        allocations = [
            {"start_date": "2024-01-25", "end_date": "2024-02-10"},
            {"start_date": "2024-02-20", "end_date": "2024-03-05"},
        ]
        # 10 + 10 allocated days of 2 * 29 talent-days.
        assert utilization(TALENTS, allocations, 2024, 2) == round(20 / 58 * 100)


class TestProjects:
    def test_active_count(self):
        assert active_project_count(PROJECTS) == 2

    def test_upcoming_deadlines_sorted_and_open_only(self):
        rows = upcoming_deadlines(PROJECTS, date(2024, 2, 1))
        assert [p["id"] for p in rows] == ["p2", "p1"]

    def test_completed_filter(self):
        assert [p["id"] for p in completed_projects(PROJECTS)] == ["p3", "p5"]
        assert [p["id"] for p in completed_projects(PROJECTS, is_paid=True)] == ["p3"]
        assert [p["id"] for p in completed_projects(PROJECTS, is_paid=False)] == ["p5"]


class TestDashboard:
    def test_overview(self):
        overview = dashboard_overview(TALENTS, PROJECTS, [], date(2024, 2, 1))
        assert overview["talent_count"] == 2
        assert overview["active_projects"] == 2
        assert overview["utilization_pct"] == 0
        assert [d["name"] for d in overview["upcoming_deadlines"]] == ["Campaign", "Relaunch"]


class TestProjectDays:
    def test_span_days(self):
        assert span_days("2024-02-01", "2024-02-01") == 1
        assert span_days("2024-02-27", "2024-03-01") == 4
        assert span_days("2024-02-01", None) is None

    def test_batches_take_precedence(self):
        project = {
            "start_date": "2024-01-01",
            "end_date": "2024-03-31",
            "batches": [
                {"start_date": "2024-01-08", "end_date": "2024-01-12"},
                {"start_date": "2024-02-05", "end_date": "2024-02-06"},
            ],
        }
        assert project_total_days(project) == 7

    def test_falls_back_to_project_window(self):
        assert project_total_days({"start_date": "2024-01-01", "end_date": "2024-01-31", "batches": []}) == 31
        assert project_total_days({"name": "Undated"}) is None
