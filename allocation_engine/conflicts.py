"""Scheduling conflict detection between allocations.

An allocation claims its talent for every day of the closed interval
[start_date, end_date]. Two allocations for the same talent conflict when
their intervals share a day, so ranges touching on a single endpoint day
count as a conflict.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable

from .dates import DateLike, parse_date, parse_date_or_none, ranges_overlap

UNKNOWN_PROJECT = "Unknown Project"


def project_names(projects: Iterable[dict[str, Any]]) -> dict[str, str]:
    return {str(p.get("id")): str(p.get("name") or "") for p in projects if p.get("id") is not None}


def allocation_span(allocation: dict[str, Any]) -> tuple[date, date] | None:
    """Return (start, end) dates of an allocation, or None if unparseable."""
    start = parse_date_or_none(allocation.get("start_date"))
    end = parse_date_or_none(allocation.get("end_date"))
    if start is None or end is None:
        return None
    return start, end


def check_conflicts(
    allocations: Iterable[dict[str, Any]],
    projects: Iterable[dict[str, Any]],
    talent_id: str,
    start_date: DateLike,
    end_date: DateLike,
    exclude_allocation_id: str | None = None,
) -> list[dict[str, Any]]:
    """Find existing allocations of a talent that overlap [start_date, end_date].

    The allocation with id ``exclude_allocation_id`` is ignored, which lets an
    edited allocation be checked without conflicting with itself. Each match
    is returned as a copy carrying ``project_name`` for display.
    """
    lo = parse_date(start_date)
    hi = parse_date(end_date)
    names = project_names(projects)

    conflicts: list[dict[str, Any]] = []
    for allocation in allocations:
        if str(allocation.get("talent_id")) != str(talent_id):
            continue
        if exclude_allocation_id is not None and str(allocation.get("id")) == str(exclude_allocation_id):
            continue
        span = allocation_span(allocation)
        if span is None:
            continue
        if ranges_overlap(span[0], span[1], lo, hi):
            conflicts.append(
                {
                    **allocation,
                    "project_name": names.get(str(allocation.get("project_id"))) or UNKNOWN_PROJECT,
                }
            )
    return conflicts


def conflict_summary(conflicts: list[dict[str, Any]]) -> str:
    """Human readable warning for a list of conflicts, empty if none."""
    if not conflicts:
        return ""
    names = ", ".join(c.get("project_name") or UNKNOWN_PROJECT for c in conflicts)
    return f"Scheduling conflict with: {names}"


def allocations_in_range(
    allocations: Iterable[dict[str, Any]],
    start_date: DateLike,
    end_date: DateLike,
) -> list[dict[str, Any]]:
    """Allocations whose interval intersects [start_date, end_date]."""
    lo = parse_date(start_date)
    hi = parse_date(end_date)
    rows = []
    for allocation in allocations:
        span = allocation_span(allocation)
        if span is None:
            continue
        if ranges_overlap(span[0], span[1], lo, hi):
            rows.append(allocation)
    return rows


def allocations_for_talent(allocations: Iterable[dict[str, Any]], talent_id: str) -> list[dict[str, Any]]:
    return [a for a in allocations if str(a.get("talent_id")) == str(talent_id)]


def allocations_for_project(allocations: Iterable[dict[str, Any]], project_id: str) -> list[dict[str, Any]]:
    return [a for a in allocations if str(a.get("project_id")) == str(project_id)]
