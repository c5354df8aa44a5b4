"""Tests for EngineContext wiring and its read-side helpers."""

from datetime import date

from talent_allocator.backends import MemoryBackend
from talent_allocator.config import local_settings
from talent_allocator.context import EngineContext
from talent_allocator.state import StateStore


class TestEngineContext:
    def test_local_mode_from_settings(self):
        ctx = EngineContext.from_settings(local_settings("reject"))
        assert isinstance(ctx.backend, MemoryBackend)
        assert ctx.allocations.conflict_policy == "reject"

    def test_contexts_do_not_share_state(self):
        a, b = EngineContext.in_memory(), EngineContext.in_memory()
        a.talents.create({"name": "Ana"})
        assert b.talents.cached() == []

    def test_injected_state(self):
        state = StateStore()
        ctx = EngineContext.build(local_settings(), MemoryBackend(), state=state)
        ctx.areas.create({"name": "Design"})
        assert state.get("areas")[0]["name"] == "Design"

    def test_availability(self, seeded):
        overview = seeded.availability("2024-02-05")
        assert overview["date"] == "2024-02-05"
        assert sorted(t["id"] for t in overview["available"]) == ["t1", "t3"]
        assert [t["id"] for t in overview["unavailable"]] == ["t2"]

    def test_dashboard(self, seeded):
        overview = seeded.dashboard(today=date(2024, 1, 15))
        assert overview["talent_count"] == 3
        assert overview["active_projects"] == 2
        # a1 covers 3 days and a2 covers 31 of 3 * 31 talent-days.
        assert overview["utilization_pct"] == round(34 / 93 * 100)
        assert [d["id"] for d in overview["upcoming_deadlines"]] == ["p2"]
