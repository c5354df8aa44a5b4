"""Dashboard metrics -- pure list-in / value-out helpers."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable

from .conflicts import allocation_span
from .dates import days_overlapping, month_bounds, parse_date_or_none

ACTIVE_STATUS = "in_progress"
COMPLETED_STATUS = "completed"


def talent_count(talents: Iterable[dict[str, Any]]) -> int:
    return sum(1 for _ in talents)


def active_project_count(projects: Iterable[dict[str, Any]]) -> int:
    return sum(1 for p in projects if p.get("status") == ACTIVE_STATUS)


def utilization(
    talents: Iterable[dict[str, Any]],
    allocations: Iterable[dict[str, Any]],
    year: int,
    month: int,
) -> int:
    """Allocated talent-days as a rounded percentage of all talent-days in the month."""
    n_talents = talent_count(talents)
    if n_talents == 0:
        return 0
    first, last = month_bounds(year, month)
    total_days = n_talents * last.day

    allocated = 0
    for allocation in allocations:
        span = allocation_span(allocation)
        if span is None:
            continue
        allocated += days_overlapping(span[0], span[1], first, last)
    return round(allocated / total_days * 100)


def upcoming_deadlines(
    projects: Iterable[dict[str, Any]],
    today: date,
    days: int = 30,
) -> list[dict[str, Any]]:
    """Open projects whose end_date lies within the next ``days`` days, soonest first."""
    horizon = today + timedelta(days=days)
    rows = []
    for project in projects:
        if project.get("status") == COMPLETED_STATUS:
            continue
        end = parse_date_or_none(project.get("end_date"))
        if end is None:
            continue
        if today <= end <= horizon:
            rows.append((end, project))
    rows.sort(key=lambda row: row[0])
    return [project for _, project in rows]


def span_days(start: Any, end: Any) -> int | None:
    """Inclusive day count of [start, end], None when either bound is missing."""
    lo = parse_date_or_none(start)
    hi = parse_date_or_none(end)
    if lo is None or hi is None:
        return None
    return (hi - lo).days + 1


def project_total_days(project: dict[str, Any]) -> int | None:
    """Days a project runs: the sum of its batches, else its own start/end window."""
    batches = project.get("batches") or []
    if batches:
        return sum(span_days(b.get("start_date"), b.get("end_date")) or 0 for b in batches)
    return span_days(project.get("start_date"), project.get("end_date"))


def completed_projects(projects: Iterable[dict[str, Any]], is_paid: bool | None = None) -> list[dict[str, Any]]:
    rows = [p for p in projects if p.get("status") == COMPLETED_STATUS]
    if is_paid is None:
        return rows
    return [p for p in rows if bool(p.get("is_paid")) is is_paid]


def dashboard_overview(
    talents: list[dict[str, Any]],
    projects: list[dict[str, Any]],
    allocations: list[dict[str, Any]],
    today: date,
) -> dict[str, Any]:
    return {
        "talent_count": talent_count(talents),
        "active_projects": active_project_count(projects),
        "utilization_pct": utilization(talents, allocations, today.year, today.month),
        "upcoming_deadlines": [
            {"id": p.get("id"), "name": p.get("name"), "end_date": p.get("end_date")}
            for p in upcoming_deadlines(projects, today)
        ],
    }
