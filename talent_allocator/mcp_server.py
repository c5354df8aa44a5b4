"""talent-allocator MCP server.

Exposes tools for staffing talent onto projects: roster and project
listing, conflict checks, availability, allocation booking and editing,
and the cascading project/area deletes.
"""
from __future__ import annotations

import argparse
import hmac
import logging
import os
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP

from .config import load_env, load_settings
from .context import EngineContext
from .errors import AllocatorError, error_payload

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "talent-allocator",
    host=os.getenv("HOST", "127.0.0.1"),
    port=int(os.getenv("PORT", "8000")),
    instructions=(
        "Staffing engine for assigning talent to projects over date ranges. "
        "Checks scheduling conflicts and availability, books allocations, "
        "and keeps allocations and area memberships consistent when projects "
        "or areas are deleted. Conflicts are reported as warnings unless the "
        "server runs with TALENT_CONFLICT_POLICY=reject."
    ),
)

_ENV_FILE: str | None = None
_CONTEXT: EngineContext | None = None


def _context() -> EngineContext:
    global _CONTEXT
    if _CONTEXT is None:
        load_env(_ENV_FILE or os.getenv("TALENT_ENV_FILE"))
        ctx = EngineContext.from_settings(load_settings())
        result = ctx.loader.load_all()
        for err in result.errors:
            logger.error(err.message)
        _CONTEXT = ctx
    return _CONTEXT


def _guard(context: str, fn: Callable[[], Any]) -> Any:
    try:
        return fn()
    except (AllocatorError, ValueError) as exc:
        logger.warning("%s failed: %s", context, exc)
        return error_payload(exc, context)


def _outcome(outcome) -> dict[str, Any]:
    return {
        "allocation": outcome.allocation,
        "conflicts": outcome.conflicts,
        "warning": outcome.warning or None,
    }


# -- Listing --

@mcp.tool()
def list_talents() -> list[dict[str, Any]]:
    """List all talents with their skills and area memberships."""
    return _context().talents.cached()


@mcp.tool()
def list_projects(status: str | None = None) -> list[dict[str, Any]]:
    """List projects, optionally filtered by status (upcoming, in_progress, completed)."""
    projects = _context().projects
    return projects.get_by_status(status) if status else projects.cached()


@mcp.tool()
def list_allocations(start: str | None = None, end: str | None = None) -> Any:
    """List allocations, optionally only those intersecting [start, end]."""
    allocations = _context().allocations
    if start and end:
        return _guard("List allocations", lambda: allocations.get_by_date_range(start, end))
    return allocations.cached()


@mcp.tool()
def reload_data() -> dict[str, Any]:
    """Re-read every collection from the record store."""
    result = _context().loader.load_all()
    return {
        "counts": {name: len(rows) for name, rows in result.data.items()},
        "errors": [err.message for err in result.errors],
    }


# -- Conflicts and availability --

@mcp.tool()
def check_conflicts(
    talent_id: str,
    start: str,
    end: str,
    exclude_allocation_id: str | None = None,
) -> Any:
    """List the talent's allocations overlapping [start, end] (inclusive)."""
    return _guard(
        "Check conflicts",
        lambda: _context().allocations.check_conflicts(talent_id, start, end, exclude_allocation_id),
    )


@mcp.tool()
def talent_availability(date: str, talent_id: str | None = None) -> Any:
    """Availability on a date: one talent (with the blocking assignment) or all talents."""
    ctx = _context()
    if talent_id:
        return _guard(
            "Check availability",
            lambda: {
                "talent_id": talent_id,
                "date": date,
                "available": ctx.allocations.is_talent_available(talent_id, date),
                "assignment": ctx.allocations.describe_assignment(talent_id, date),
            },
        )
    return _guard("Check availability", lambda: ctx.availability(date))


# -- Allocations --

@mcp.tool()
def allocate(
    date: str,
    talent_id: str,
    project_id: str,
    end_date: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Book a talent onto a project starting at date (single day unless end_date is given).

    The allocation is created even when it overlaps existing ones; the
    overlaps are returned as a warning.
    """
    return _guard(
        "Create allocation",
        lambda: _outcome(_context().allocations.allocate(talent_id, project_id, date, end_date, notes)),
    )


@mcp.tool()
def reschedule_allocation(
    allocation_id: str,
    start: str | None = None,
    end: str | None = None,
    project_id: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Change dates, project or notes of an existing allocation."""
    changes: dict[str, Any] = {}
    if start is not None:
        changes["start_date"] = start
    if end is not None:
        changes["end_date"] = end
    if project_id is not None:
        changes["project_id"] = project_id
    if notes is not None:
        changes["notes"] = notes
    return _guard(
        "Update allocation",
        lambda: _outcome(_context().allocations.reschedule(allocation_id, changes)),
    )


@mcp.tool()
def delete_allocation(allocation_id: str) -> dict[str, Any]:
    """Delete one allocation."""

    def run() -> dict[str, Any]:
        _context().allocations.delete(allocation_id)
        return {"deleted": allocation_id}

    return _guard("Delete allocation", run)


# -- Projects and areas --

@mcp.tool()
def create_project(
    name: str,
    start_date: str | None = None,
    end_date: str | None = None,
    status: str = "in_progress",
    client_id: str | None = None,
) -> dict[str, Any]:
    """Create a project; it gets a color no other live project uses."""
    data: dict[str, Any] = {"name": name, "status": status}
    if start_date:
        data["start_date"] = start_date
    if end_date:
        data["end_date"] = end_date
    if client_id:
        data["client_id"] = client_id
    return _guard("Create project", lambda: _context().projects.create(data))


@mcp.tool()
def assign_talent(project_id: str, talent_id: str) -> Any:
    """Assign a talent to a project for the project's whole date window."""
    return _guard("Assign talent", lambda: _context().projects.assign_talent(project_id, talent_id))


@mcp.tool()
def delete_project(project_id: str) -> dict[str, Any]:
    """Delete a project together with all of its allocations."""

    def run() -> dict[str, Any]:
        result = _context().projects.delete(project_id)
        return {
            "project_id": result.entity_id,
            "found": result.found,
            "removed_allocations": result.removed_allocations,
            "removed_batches": result.removed_batches,
        }

    return _guard("Delete project", run)


@mcp.tool()
def add_project_batch(
    project_id: str,
    start_date: str,
    end_date: str,
    notes: str | None = None,
) -> Any:
    """Add a dated batch (sub-range) to a project."""
    return _guard(
        "Add batch",
        lambda: _context().projects.add_batch(project_id, start_date, end_date, notes),
    )


@mcp.tool()
def remove_project_batch(batch_id: str) -> dict[str, Any]:
    """Remove one batch from its project."""

    def run() -> dict[str, Any]:
        _context().projects.remove_batch(batch_id)
        return {"deleted": batch_id}

    return _guard("Remove batch", run)


@mcp.tool()
def project_days(project_id: str) -> dict[str, Any]:
    """Days a project runs, summed over its batches when it has any."""
    projects = _context().projects
    return {
        "project_id": project_id,
        "total_days": projects.total_days(project_id),
        "batches": projects.get_batches(project_id),
    }


@mcp.tool()
def create_area(name: str) -> dict[str, Any]:
    """Create a business area."""
    return _guard("Create area", lambda: _context().areas.create({"name": name}))


@mcp.tool()
def delete_area(area_id: str) -> dict[str, Any]:
    """Delete an area and remove it from every talent's memberships."""

    def run() -> dict[str, Any]:
        result = _context().areas.delete(area_id)
        return {
            "area_id": result.entity_id,
            "found": result.found,
            "updated_talents": result.updated_talents,
        }

    return _guard("Delete area", run)


# -- Overview --

@mcp.tool()
def dashboard() -> dict[str, Any]:
    """Talent count, active projects, this month's utilization and upcoming deadlines."""
    return _context().dashboard()


@mcp.tool()
def recent_activity(limit: int = 20) -> list[dict[str, Any]]:
    """Most recent mutations made through this server, newest first."""
    return _context().activity.recent(limit)


# -- Server entrypoints --

async def _run_http() -> None:
    import uvicorn
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.responses import JSONResponse
    from starlette.routing import Route

    token = os.getenv("MCP_API_KEY", "")

    class BearerTokenAuth(BaseHTTPMiddleware):
        async def dispatch(self, request, call_next):
            if request.url.path == "/health":
                return await call_next(request)
            scheme, _, supplied = request.headers.get("authorization", "").partition(" ")
            if scheme.lower() != "bearer" or not hmac.compare_digest(supplied.encode(), token.encode()):
                return JSONResponse({"error": "unauthorized"}, status_code=401)
            return await call_next(request)

    def health(request):
        return JSONResponse({"status": "ok", "context_ready": _CONTEXT is not None})

    app = mcp.streamable_http_app()
    if token:
        app.add_middleware(BearerTokenAuth)
    app.routes.append(Route("/health", health))

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            log_level=os.getenv("TALENT_LOG_LEVEL", "info").lower(),
        )
    )
    await server.serve()


def main() -> None:
    global _ENV_FILE

    parser = argparse.ArgumentParser(description="Run talent-allocator MCP server")
    parser.add_argument("--env-file", default=None, help="Path to .env file")
    parser.add_argument(
        "--transport",
        default=None,
        choices=["stdio", "sse", "streamable-http"],
        help="MCP transport (default: streamable-http when PORT is set, else stdio)",
    )
    args = parser.parse_args()
    _ENV_FILE = args.env_file

    load_env(_ENV_FILE or os.getenv("TALENT_ENV_FILE"))
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    transport = args.transport
    if transport is None:
        transport = "streamable-http" if os.getenv("PORT") else "stdio"

    if transport == "streamable-http":
        import anyio
        anyio.run(_run_http)
    else:
        mcp.run(transport=transport)


if __name__ == "__main__":
    main()
