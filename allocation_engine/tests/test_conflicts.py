"""Tests for allocation_engine.conflicts."""

from allocation_engine.conflicts import (
    UNKNOWN_PROJECT,
    allocations_for_project,
    allocations_for_talent,
    allocations_in_range,
    check_conflicts,
    conflict_summary,
)
from allocation_engine.dates import ranges_overlap

PROJECTS = [
    {"id": "p1", "name": "Website Relaunch"},
    {"id": "p2", "name": "Brand Campaign"},
]


def _alloc(alloc_id, talent_id, project_id, start, end):
    return {
        "id": alloc_id,
        "talent_id": talent_id,
        "project_id": project_id,
        "start_date": start,
        "end_date": end,
    }


ALLOCATIONS = [
    _alloc("a1", "t1", "p1", "2024-01-05", "2024-01-07"),
    _alloc("a2", "t1", "p2", "2024-01-10", "2024-01-12"),
    _alloc("a3", "t1", "p2", "2024-02-01", "2024-02-03"),
    _alloc("a4", "t2", "p1", "2024-01-05", "2024-01-20"),
]


class TestCheckConflicts:
    def test_overlapping_allocation_found(self):
        conflicts = check_conflicts(ALLOCATIONS, PROJECTS, "t1", "2024-01-06", "2024-01-08")
        assert [c["id"] for c in conflicts] == ["a1"]
        assert conflicts[0]["project_name"] == "Website Relaunch"

    def test_returns_exactly_the_overlapping_subset(self):
        conflicts = check_conflicts(ALLOCATIONS, PROJECTS, "t1", "2024-01-07", "2024-01-31")
        assert sorted(c["id"] for c in conflicts) == ["a1", "a2"]

    def test_other_talents_ignored(self):
        conflicts = check_conflicts(ALLOCATIONS, PROJECTS, "t2", "2024-01-10", "2024-01-10")
        assert [c["id"] for c in conflicts] == ["a4"]

    def test_touching_endpoint_is_conflict(self):
        conflicts = check_conflicts(ALLOCATIONS, PROJECTS, "t1", "2024-01-12", "2024-01-15")
        assert [c["id"] for c in conflicts] == ["a2"]

    def test_exclude_removes_only_that_allocation(self):
        conflicts = check_conflicts(
            ALLOCATIONS, PROJECTS, "t1", "2024-01-01", "2024-01-31", exclude_allocation_id="a1"
        )
        assert [c["id"] for c in conflicts] == ["a2"]

    def test_no_conflicts(self):
        assert check_conflicts(ALLOCATIONS, PROJECTS, "t1", "2024-03-01", "2024-03-31") == []

    def test_unknown_project_name(self):
        allocations = [_alloc("x", "t9", "gone", "2024-01-01", "2024-01-02")]
        conflicts = check_conflicts(allocations, PROJECTS, "t9", "2024-01-01", "2024-01-01")
        assert conflicts[0]["project_name"] == UNKNOWN_PROJECT

    def test_unparseable_rows_skipped(self):
        allocations = [_alloc("bad", "t1", "p1", "", "2024-01-02")]
        assert check_conflicts(allocations, PROJECTS, "t1", "2024-01-01", "2024-01-05") == []

    def test_input_rows_not_mutated(self):
        rows = [dict(a) for a in ALLOCATIONS]
        check_conflicts(rows, PROJECTS, "t1", "2024-01-01", "2024-01-31")
        assert all("project_name" not in r for r in rows)


class TestConflictSummary:
    def test_empty(self):
        assert conflict_summary([]) == ""

    def test_names_projects(self):
        conflicts = check_conflicts(ALLOCATIONS, PROJECTS, "t1", "2024-01-01", "2024-01-31")
        assert conflict_summary(conflicts) == "Scheduling conflict with: Website Relaunch, Brand Campaign"


class TestFilters:
    def test_in_range(self):
        rows = allocations_in_range(ALLOCATIONS, "2024-02-01", "2024-02-29")
        assert [r["id"] for r in rows] == ["a3"]

    def test_for_talent_and_project(self):
        assert [a["id"] for a in allocations_for_talent(ALLOCATIONS, "t2")] == ["a4"]
        assert [a["id"] for a in allocations_for_project(ALLOCATIONS, "p1")] == ["a1", "a4"]


class TestOverlapConsistency:
    def test_agrees_with_ranges_overlap(self):
        windows = [
            ("2024-01-01", "2024-01-04"),
            ("2024-01-01", "2024-01-05"),
            ("2024-01-07", "2024-01-10"),
            ("2024-01-08", "2024-01-09"),
            ("2024-01-12", "2024-02-01"),
        ]
        for start, end in windows:
            found = {c["id"] for c in check_conflicts(ALLOCATIONS, PROJECTS, "t1", start, end)}
            expected = {
                a["id"]
                for a in ALLOCATIONS
                if a["talent_id"] == "t1" and ranges_overlap(a["start_date"], a["end_date"], start, end)
            }
            assert found == expected
            assert {a["id"] for a in allocations_in_range(ALLOCATIONS, start, end)} == {
                a["id"] for a in ALLOCATIONS if ranges_overlap(a["start_date"], a["end_date"], start, end)
            }
