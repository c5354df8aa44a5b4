"""Tests for the MCP tool functions, run against an in-memory context."""

import pytest

from talent_allocator import mcp_server


@pytest.fixture
def server(seeded, monkeypatch):
    monkeypatch.setattr(mcp_server, "_CONTEXT", seeded)
    return mcp_server


class TestTools:
    def test_listing(self, server):
        assert len(server.list_talents()) == 3
        assert [p["id"] for p in server.list_projects(status="completed")] == ["p3"]
        assert [a["id"] for a in server.list_allocations("2024-03-01", "2024-03-31")] == ["a3"]

    def test_allocate_returns_warning(self, server):
        result = server.allocate("2024-01-06", "t1", "p2", end_date="2024-01-08")
        assert result["allocation"]["talent_id"] == "t1"
        assert result["warning"] == "Scheduling conflict with: Website Relaunch"

    def test_allocate_invalid_range_returns_error_payload(self, server):
        result = server.allocate("2024-01-08", "t1", "p2", end_date="2024-01-06")
        assert result["error"] == "validation"
        assert result["retryable"] is False

    def test_availability(self, server):
        single = server.talent_availability("2024-02-05", talent_id="t2")
        assert single["available"] is False
        assert single["assignment"]["project_name"] == "Brand Campaign"
        everyone = server.talent_availability("2024-02-05")
        assert len(everyone["available"]) == 2

    def test_bad_date_returns_error_payload(self, server):
        assert server.check_conflicts("t1", "soon", "later")["error"] == "validation"

    def test_reschedule_and_delete(self, server):
        result = server.reschedule_allocation("a1", end="2024-01-09")
        assert result["allocation"]["end_date"] == "2024-01-09"
        assert result["warning"] is None
        assert server.delete_allocation("a1") == {"deleted": "a1"}

    def test_project_and_area_cascades(self, server):
        project = server.create_project("Pitch", start_date="2024-05-01", end_date="2024-05-31")
        server.assign_talent(project["id"], "t1")
        assert server.talent_availability("2024-05-10", talent_id="t1")["available"] is False

        deleted = server.delete_project("p1")
        assert deleted["found"] is True
        assert sorted(deleted["removed_allocations"]) == ["a1", "a2"]

        area = server.create_area("Strategy")
        assert server.delete_area(area["id"])["updated_talents"] == []
        assert server.delete_area("ar2")["updated_talents"] == ["t1", "t2"]

    def test_dashboard_and_activity(self, server):
        assert server.dashboard()["talent_count"] == 3
        server.create_area("Strategy")
        assert server.recent_activity(1)[0]["entity_name"] == "Strategy"

    def test_project_batches(self, server):
        batch = server.add_project_batch("p2", "2024-02-01", "2024-02-03", notes="pilot")
        assert server.project_days("p2")["total_days"] == 3
        assert server.add_project_batch("p2", "2024-02-05", "2024-02-01")["error"] == "validation"

        deleted = server.delete_project("p2")
        assert deleted["removed_batches"] == [batch["id"]]
        assert server.project_days("p2")["total_days"] is None
