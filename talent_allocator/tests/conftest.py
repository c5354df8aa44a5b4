import pytest

from talent_allocator.context import EngineContext


@pytest.fixture
def ctx():
    context = EngineContext.in_memory()
    yield context
    context.close()


@pytest.fixture
def seeded(ctx):
    """Two talents, three projects, two areas and a handful of allocations."""
    ctx.areas.create({"id": "ar1", "name": "Design"})
    ctx.areas.create({"id": "ar2", "name": "Engineering"})
    ctx.talents.create({"id": "t1", "name": "Ana", "skills": ["figma"], "areas": ["ar1", "ar2"]})
    ctx.talents.create({"id": "t2", "name": "Ben", "areas": ["ar2"]})
    ctx.talents.create({"id": "t3", "name": "Cleo", "areas": ["ar1"]})
    ctx.projects.create({"id": "p1", "name": "Website Relaunch"})
    ctx.projects.create(
        {
            "id": "p2",
            "name": "Brand Campaign",
            "assigned_talents": ["t2"],
            "start_date": "2024-02-01",
            "end_date": "2024-02-10",
        }
    )
    ctx.projects.create({"id": "p3", "name": "Audit", "status": "completed", "is_paid": True})
    ctx.allocations.create(
        {"id": "a1", "talent_id": "t1", "project_id": "p1", "start_date": "2024-01-05", "end_date": "2024-01-07"}
    )
    ctx.allocations.create(
        {"id": "a2", "talent_id": "t3", "project_id": "p1", "start_date": "2024-01-01", "end_date": "2024-01-31"}
    )
    ctx.allocations.create(
        {"id": "a3", "talent_id": "t1", "project_id": "p3", "start_date": "2024-03-01", "end_date": "2024-03-04"}
    )
    return ctx
