"""Cascading deletes for projects and areas.

Both cascades run as a sequence of single-record store calls, dependents
first. Each completed step registers an undo action; if a later step fails
the undo actions run in reverse so the store ends up as it started. Only
when an undo action fails too is the store left partially changed, and the
CascadeError raised then names the records that could not be restored.

The manager binds itself to the project and area services, so their
``delete`` is the cascade and no delete path leaves dependents behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .activity import ActivityLog
from .backends import ALLOCATIONS, AREAS, PROJECT_BATCHES, PROJECTS, TALENTS, Backend, Collection
from .errors import CascadeError
from .services import AllocationService, AreaService, ProjectService, TalentService

logger = logging.getLogger(__name__)

UndoStep = tuple[str, Callable[[], Any]]


@dataclass
class CascadeResult:
    entity_id: str
    found: bool
    removed_allocations: list[str] = field(default_factory=list)
    removed_batches: list[str] = field(default_factory=list)
    updated_talents: list[str] = field(default_factory=list)


def _ids(values: Any) -> list[str]:
    return [str(v) for v in values or []]


class CascadeManager:
    def __init__(
        self,
        backend: Backend,
        *,
        projects: ProjectService,
        allocations: AllocationService,
        talents: TalentService,
        areas: AreaService,
        activity: ActivityLog | None = None,
    ):
        self.backend = backend
        self.projects = projects
        self.allocations = allocations
        self.talents = talents
        self.areas = areas
        self.activity = activity
        projects.cascade = self
        areas.cascade = self

    def _compensate(self, undo: list[UndoStep], cause: BaseException) -> None:
        unrestored: list[str] = []
        for label, action in reversed(undo):
            try:
                action()
            except Exception:
                logger.exception("Could not restore %s", label)
                unrestored.append(label)
        if unrestored:
            raise CascadeError(
                f"Cascade failed ({cause}) and {len(unrestored)} record(s) could not be restored",
                unrestored=unrestored,
            ) from cause

    @staticmethod
    def _remove(store: Collection, row: dict[str, Any], label: str, undo: list[UndoStep]) -> str:
        store.delete(row["id"])
        undo.append((f"{label} {row['id']}", lambda: store.insert(row)))
        return str(row["id"])

    def delete_project(self, project_id: str) -> CascadeResult:
        """Delete a project with every allocation and batch that references it."""
        project_id = str(project_id)
        allocation_store = self.backend.collection(ALLOCATIONS)
        batch_store = self.backend.collection(PROJECT_BATCHES)
        project_store = self.backend.collection(PROJECTS)

        project = project_store.get_by_id(project_id)
        allocations = allocation_store.find("project_id", project_id)
        batches = batch_store.find("project_id", project_id)
        result = CascadeResult(entity_id=project_id, found=project is not None)

        undo: list[UndoStep] = []
        try:
            for allocation in allocations:
                result.removed_allocations.append(self._remove(allocation_store, allocation, "allocation", undo))
            for batch in batches:
                result.removed_batches.append(self._remove(batch_store, batch, "batch", undo))
            if project is not None:
                project_store.delete(project_id)
        except Exception as exc:
            logger.warning("Deleting project %s failed, rolling back: %s", project_id, exc)
            try:
                self._compensate(undo, exc)
            finally:
                self.allocations.refresh()
                self.projects.refresh()
            raise

        removed = set(result.removed_allocations)
        self.projects.refresh(lambda rows: [p for p in rows if str(p.get("id")) != project_id])
        self.allocations.refresh(lambda rows: [a for a in rows if str(a.get("id")) not in removed])
        if project is not None:
            self.projects.colors.reconcile(self.projects.cached())
            if self.activity is not None:
                self.activity.log(
                    "deleted",
                    "project",
                    project_id,
                    str(project.get("name") or project_id),
                    {"removed_allocations": len(removed), "removed_batches": len(result.removed_batches)},
                )
        return result

    def delete_area(self, area_id: str) -> CascadeResult:
        """Delete an area and drop it from every talent's area memberships."""
        area_id = str(area_id)
        talent_store = self.backend.collection(TALENTS)
        area_store = self.backend.collection(AREAS)

        area = area_store.get_by_id(area_id)
        members = talent_store.find_containing("areas", area_id)
        result = CascadeResult(entity_id=area_id, found=area is not None)

        undo: list[UndoStep] = []
        try:
            for talent in members:
                before = _ids(talent.get("areas"))
                talent_store.update(talent["id"], {"areas": [a for a in before if a != area_id]})
                undo.append(
                    (
                        f"talent {talent['id']}",
                        lambda tid=talent["id"], areas=before: talent_store.update(tid, {"areas": areas}),
                    )
                )
                result.updated_talents.append(str(talent["id"]))
            if area is not None:
                area_store.delete(area_id)
        except Exception as exc:
            logger.warning("Deleting area %s failed, rolling back: %s", area_id, exc)
            try:
                self._compensate(undo, exc)
            finally:
                self.talents.refresh()
                self.areas.refresh()
            raise

        self.areas.refresh(lambda rows: [a for a in rows if str(a.get("id")) != area_id])
        self.talents.refresh(
            lambda rows: [{**t, "areas": [a for a in _ids(t.get("areas")) if a != area_id]} for t in rows]
        )
        if area is not None and self.activity is not None:
            self.activity.log(
                "deleted",
                "area",
                area_id,
                str(area.get("name") or area_id),
                {"updated_talents": len(result.updated_talents)},
            )
        return result
