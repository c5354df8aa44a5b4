from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

from allocation_engine.colors import ColorAllocator
from allocation_engine.metrics import completed_projects, project_total_days

from ..activity import ActivityLog
from ..backends import PROJECT_BATCHES, PROJECTS, Backend, Collection
from ..errors import AllocatorError, ValidationError
from ..state import StateStore
from .allocations import validate_range
from .base import EntityService

if TYPE_CHECKING:
    from ..cascade import CascadeManager, CascadeResult

PROJECT_STATUSES = ("upcoming", "in_progress", "completed")
DEFAULT_STATUS = "in_progress"

# Fields owned by the service, never written through update().
READ_ONLY_FIELDS = ("color", "batches")


class ProjectService(EntityService):
    """Projects, their colors, batches and talent assignments.

    A project row in the state carries its ``batches``: dated sub-ranges
    stored in their own collection. ``delete`` runs the project cascade, so
    the project's allocations and batches go with it.
    """

    collection_name = PROJECTS
    entity_type = "project"
    required = ("name",)

    def __init__(
        self,
        backend: Backend,
        state: StateStore,
        activity: ActivityLog | None = None,
        *,
        colors: ColorAllocator | None = None,
    ):
        super().__init__(backend, state, activity)
        self.colors = colors or ColorAllocator()
        self.cascade: CascadeManager | None = None

    @property
    def batch_collection(self) -> Collection:
        return self.backend.collection(PROJECT_BATCHES)

    def get_all(self) -> list[dict[str, Any]]:
        batches: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for batch in self.batch_collection.get_all():
            batches[str(batch.get("project_id"))].append(batch)

        rows = []
        for project in self.collection.get_all():
            row = self._normalize(project)
            row["batches"] = sorted(batches.get(row["id"], []), key=lambda b: str(b.get("start_date") or ""))
            rows.append(row)
        self.colors.reconcile(rows)
        self.state.set(PROJECTS, rows)
        return rows

    @staticmethod
    def _normalize(project: dict[str, Any]) -> dict[str, Any]:
        row = dict(project)
        row["id"] = str(row.get("id"))
        row["assigned_talents"] = [str(t) for t in row.get("assigned_talents") or []]
        row.setdefault("required_skills", [])
        row.setdefault("batches", [])
        return row

    def prepare_insert(self, data: dict[str, Any]) -> dict[str, Any]:
        status = data.get("status") or DEFAULT_STATUS
        if status not in PROJECT_STATUSES:
            raise ValidationError(f"Unknown project status {status!r}. Choose from {PROJECT_STATUSES}")
        fields = {k: v for k, v in data.items() if k != "batches"}
        return {
            **fields,
            "color": self.colors.generate(),
            "status": status,
            "is_paid": bool(data.get("is_paid", False)),
            "assigned_talents": [str(t) for t in data.get("assigned_talents") or []],
            "required_skills": list(data.get("required_skills") or []),
        }

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            return super().create(data)
        except Exception:
            # prepare_insert may already have reserved a color.
            self.colors.reconcile(self.cached())
            raise

    def update(self, record_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        changes = {k: v for k, v in data.items() if k not in READ_ONLY_FIELDS}
        status = changes.get("status")
        if status is not None and status not in PROJECT_STATUSES:
            raise ValidationError(f"Unknown project status {status!r}. Choose from {PROJECT_STATUSES}")
        return super().update(record_id, changes)

    def delete(self, record_id: str) -> CascadeResult:
        """Delete the project together with its allocations and batches."""
        if self.cascade is None:
            raise AllocatorError("Deleting a project needs a CascadeManager bound to this service")
        return self.cascade.delete_project(record_id)

    def update_status(self, record_id: str, status: str) -> dict[str, Any] | None:
        project = self.update(record_id, {"status": status})
        if project is not None and self.activity is not None:
            self.activity.log("status_changed", self.entity_type, record_id, self.display_name(project), {"status": status})
        return project

    def update_payment_status(self, record_id: str, is_paid: bool) -> dict[str, Any] | None:
        return self.update(record_id, {"is_paid": bool(is_paid)})

    def assign_talent(self, project_id: str, talent_id: str) -> dict[str, Any] | None:
        project = self.find_cached(project_id) or self.get_by_id(project_id)
        if project is None:
            return None
        assigned = [str(t) for t in project.get("assigned_talents") or []]
        if str(talent_id) in assigned:
            return project
        return self.update(project_id, {"assigned_talents": assigned + [str(talent_id)]})

    def remove_talent(self, project_id: str, talent_id: str) -> dict[str, Any] | None:
        project = self.find_cached(project_id) or self.get_by_id(project_id)
        if project is None:
            return None
        assigned = [str(t) for t in project.get("assigned_talents") or [] if str(t) != str(talent_id)]
        return self.update(project_id, {"assigned_talents": assigned})

    # -- batches --

    def add_batch(
        self,
        project_id: str,
        start_date: str,
        end_date: str,
        notes: str | None = None,
    ) -> dict[str, Any] | None:
        """Add a dated sub-range to a project; None if the project does not exist."""
        project = self.find_cached(project_id) or self.get_by_id(project_id)
        if project is None:
            return None
        start, end = validate_range(start_date, end_date)
        data: dict[str, Any] = {"project_id": str(project_id), "start_date": start, "end_date": end}
        if notes:
            data["notes"] = notes
        batch = self.batch_collection.insert(data)
        self.refresh(
            lambda rows: [
                {**p, "batches": list(p.get("batches") or []) + [batch]} if p.get("id") == str(project_id) else p
                for p in rows
            ]
        )
        if self.activity is not None:
            self.activity.log("updated", self.entity_type, str(project_id), self.display_name(project), {"batch_added": batch["id"]})
        return batch

    def remove_batch(self, batch_id: str) -> None:
        self.batch_collection.delete(batch_id)
        self.refresh(
            lambda rows: [
                {**p, "batches": [b for b in p.get("batches") or [] if str(b.get("id")) != str(batch_id)]}
                for p in rows
            ]
        )

    def get_batches(self, project_id: str) -> list[dict[str, Any]]:
        project = self.find_cached(project_id)
        return list((project or {}).get("batches") or [])

    def total_days(self, project_id: str) -> int | None:
        """Days the project runs, counted from its batches when it has any."""
        project = self.find_cached(project_id)
        return project_total_days(project) if project is not None else None

    # -- queries --

    def get_by_status(self, status: str) -> list[dict[str, Any]]:
        return [p for p in self.cached() if p.get("status") == status]

    def get_by_client(self, client_id: str) -> list[dict[str, Any]]:
        return [p for p in self.cached() if str(p.get("client_id")) == str(client_id)]

    def get_completed(self, is_paid: bool | None = None) -> list[dict[str, Any]]:
        return completed_projects(self.cached(), is_paid)
