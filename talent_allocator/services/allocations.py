"""Allocation lifecycle and the conflict/availability queries around it.

Conflicts are advisory by default: ``allocate`` and ``reschedule`` still
write the record and hand the overlapping allocations back as warnings.
With the "reject" policy they raise ConflictError before writing.

The conflict check reads the cached state, and the write happens after it
as a separate call. Two near-simultaneous allocations for the same talent
can therefore both pass the check; nothing at the store level prevents that
double-booking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from allocation_engine.availability import describe_assignment, is_available
from allocation_engine.conflicts import (
    allocations_for_project,
    allocations_for_talent,
    allocations_in_range,
    check_conflicts,
    conflict_summary,
)
from allocation_engine.dates import DateLike, ensure_date, month_bounds, parse_date

from ..activity import ActivityLog
from ..backends import ALLOCATIONS, PROJECTS, Backend
from ..errors import ConflictError, ValidationError
from ..state import StateStore
from .base import EntityService

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("talent_id", "project_id", "start_date", "end_date")


@dataclass
class AllocationOutcome:
    allocation: dict[str, Any] | None
    conflicts: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def warning(self) -> str:
        return conflict_summary(self.conflicts)


def validate_range(start_date: DateLike, end_date: DateLike) -> tuple[str, str]:
    try:
        start = ensure_date(start_date)
        end = ensure_date(end_date)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {exc}") from exc
    if parse_date(end) < parse_date(start):
        raise ValidationError("End date must be on or after start date")
    return start, end


class AllocationService(EntityService):
    collection_name = ALLOCATIONS
    entity_type = "allocation"
    required = REQUIRED_FIELDS

    def __init__(
        self,
        backend: Backend,
        state: StateStore,
        activity: ActivityLog | None = None,
        *,
        conflict_policy: str = "warn",
    ):
        super().__init__(backend, state, activity)
        self.conflict_policy = conflict_policy

    def display_name(self, record: dict[str, Any]) -> str:
        talent = next(
            (t for t in self.state.get("talents") or [] if str(t.get("id")) == str(record.get("talent_id"))),
            None,
        )
        project = next(
            (p for p in self.state.get(PROJECTS) or [] if str(p.get("id")) == str(record.get("project_id"))),
            None,
        )
        talent_name = (talent or {}).get("name") or "Talent"
        project_name = (project or {}).get("name") or "Project"
        return f"{talent_name} - {project_name}"

    # -- queries over the cached snapshot --

    def check_conflicts(
        self,
        talent_id: str,
        start_date: DateLike,
        end_date: DateLike,
        exclude_allocation_id: str | None = None,
    ) -> list[dict[str, Any]]:
        return check_conflicts(
            self.cached(),
            self.state.get(PROJECTS) or [],
            talent_id,
            start_date,
            end_date,
            exclude_allocation_id,
        )

    def is_talent_available(self, talent_id: str, day: DateLike) -> bool:
        return is_available(self.cached(), self.state.get(PROJECTS) or [], talent_id, day)

    def describe_assignment(self, talent_id: str, day: DateLike) -> dict[str, Any] | None:
        return describe_assignment(self.cached(), self.state.get(PROJECTS) or [], talent_id, day)

    def get_by_date_range(self, start_date: DateLike, end_date: DateLike) -> list[dict[str, Any]]:
        return allocations_in_range(self.cached(), start_date, end_date)

    def get_by_month(self, year: int, month: int) -> list[dict[str, Any]]:
        first, last = month_bounds(year, month)
        return self.get_by_date_range(first, last)

    def get_by_talent(self, talent_id: str) -> list[dict[str, Any]]:
        return allocations_for_talent(self.cached(), talent_id)

    def get_by_project(self, project_id: str) -> list[dict[str, Any]]:
        return allocations_for_project(self.cached(), project_id)

    # -- caller flows --

    def _screen(self, conflicts: list[dict[str, Any]]) -> None:
        if not conflicts:
            return
        if self.conflict_policy == "reject":
            raise ConflictError(conflict_summary(conflicts), conflicts)
        logger.info("%s (advisory, writing anyway)", conflict_summary(conflicts))

    def allocate(
        self,
        talent_id: str,
        project_id: str,
        start_date: DateLike,
        end_date: DateLike | None = None,
        notes: str | None = None,
    ) -> AllocationOutcome:
        """Book a talent onto a project; a single day when end_date is omitted."""
        start, end = validate_range(start_date, end_date if end_date is not None else start_date)
        conflicts = self.check_conflicts(talent_id, start, end)
        self._screen(conflicts)

        data: dict[str, Any] = {
            "talent_id": talent_id,
            "project_id": project_id,
            "start_date": start,
            "end_date": end,
        }
        if notes:
            data["notes"] = notes
        return AllocationOutcome(self.create(data), conflicts)

    def reschedule(self, allocation_id: str, data: dict[str, Any]) -> AllocationOutcome:
        """Move or edit an allocation, checking it against everything but itself."""
        current = self.find_cached(allocation_id) or self.get_by_id(allocation_id)
        if current is None:
            return AllocationOutcome(None)

        merged = {**current, **data}
        start, end = validate_range(merged.get("start_date"), merged.get("end_date"))
        conflicts = self.check_conflicts(str(merged.get("talent_id")), start, end, allocation_id)
        self._screen(conflicts)

        changes = {**data, "start_date": start, "end_date": end}
        return AllocationOutcome(self.update(allocation_id, changes), conflicts)
