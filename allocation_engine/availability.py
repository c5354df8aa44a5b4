"""Talent availability from allocations and project assignments.

A talent is busy on a day if either source claims them:

  1. an allocation for the talent covers the day, or
  2. a project lists the talent in ``assigned_talents`` and the day falls in
     the project's window. A missing start or end bound is open; a project
     with neither bound never blocks anyone.
"""

from __future__ import annotations

from typing import Any, Iterable

from .conflicts import UNKNOWN_PROJECT, allocation_span, project_names
from .dates import DateLike, date_in_range, parse_date


def _allocation_on(allocations: Iterable[dict[str, Any]], talent_id: str, day: DateLike) -> dict[str, Any] | None:
    d = parse_date(day)
    for allocation in allocations:
        if str(allocation.get("talent_id")) != str(talent_id):
            continue
        span = allocation_span(allocation)
        if span is not None and span[0] <= d <= span[1]:
            return allocation
    return None


def project_blocks(project: dict[str, Any], talent_id: str, day: DateLike) -> bool:
    """True if the project's talent assignment makes talent_id busy on day."""
    assigned = [str(t) for t in project.get("assigned_talents") or []]
    if str(talent_id) not in assigned:
        return False
    start = project.get("start_date")
    end = project.get("end_date")
    if not start and not end:
        return False
    return date_in_range(day, start or None, end or None)


def _project_on(projects: Iterable[dict[str, Any]], talent_id: str, day: DateLike) -> dict[str, Any] | None:
    for project in projects:
        if project_blocks(project, talent_id, day):
            return project
    return None


def is_available(
    allocations: Iterable[dict[str, Any]],
    projects: Iterable[dict[str, Any]],
    talent_id: str,
    day: DateLike,
) -> bool:
    """Return True if neither an allocation nor a project assignment claims the talent."""
    if _allocation_on(allocations, talent_id, day) is not None:
        return False
    return _project_on(projects, talent_id, day) is None


def describe_assignment(
    allocations: Iterable[dict[str, Any]],
    projects: Iterable[dict[str, Any]],
    talent_id: str,
    day: DateLike,
) -> dict[str, Any] | None:
    """Explain why a talent is busy on day.

    Allocations take precedence over bare project assignments. Returns None
    when the talent is free.
    """
    projects = list(projects)
    allocation = _allocation_on(allocations, talent_id, day)
    if allocation is not None:
        names = project_names(projects)
        return {
            "type": "allocation",
            **allocation,
            "project_name": names.get(str(allocation.get("project_id"))) or UNKNOWN_PROJECT,
        }

    project = _project_on(projects, talent_id, day)
    if project is not None:
        return {
            "type": "project",
            "project_id": project.get("id"),
            "project_name": project.get("name") or UNKNOWN_PROJECT,
        }
    return None


def partition_by_availability(
    talents: Iterable[dict[str, Any]],
    allocations: Iterable[dict[str, Any]],
    projects: Iterable[dict[str, Any]],
    day: DateLike,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Split talents into (available, unavailable) for a day.

    Unavailable rows carry an ``assignment`` key from describe_assignment().
    """
    allocations = list(allocations)
    projects = list(projects)
    available: list[dict[str, Any]] = []
    unavailable: list[dict[str, Any]] = []
    for talent in talents:
        assignment = describe_assignment(allocations, projects, str(talent.get("id")), day)
        if assignment is None:
            available.append(talent)
        else:
            unavailable.append({**talent, "assignment": assignment})
    return available, unavailable
