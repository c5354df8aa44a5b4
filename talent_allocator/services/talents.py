from __future__ import annotations

from typing import Any

from allocation_engine.conflicts import allocations_for_talent, project_names

from ..backends import ALLOCATIONS, PROJECTS, TALENTS
from .base import EntityService


class TalentService(EntityService):
    collection_name = TALENTS
    entity_type = "talent"
    required = ("name",)

    def get_all(self) -> list[dict[str, Any]]:
        rows = [self._normalize(t) for t in self.collection.get_all()]
        self.state.set(TALENTS, rows)
        return rows

    @staticmethod
    def _normalize(talent: dict[str, Any]) -> dict[str, Any]:
        row = dict(talent)
        row["skills"] = list(row.get("skills") or [])
        row["areas"] = [str(a) for a in row.get("areas") or []]
        return row

    def prepare_insert(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            **data,
            "skills": list(data.get("skills") or []),
            "areas": [str(a) for a in data.get("areas") or []],
        }

    def _current(self, talent_id: str) -> dict[str, Any] | None:
        return self.find_cached(talent_id) or self.get_by_id(talent_id)

    def add_skill(self, talent_id: str, skill: str) -> dict[str, Any] | None:
        talent = self._current(talent_id)
        if talent is None:
            return None
        skills = list(talent.get("skills") or [])
        if skill in skills:
            return talent
        return self.update(talent_id, {"skills": skills + [skill]})

    def remove_skill(self, talent_id: str, skill: str) -> dict[str, Any] | None:
        talent = self._current(talent_id)
        if talent is None:
            return None
        return self.update(talent_id, {"skills": [s for s in talent.get("skills") or [] if s != skill]})

    def assign_area(self, talent_id: str, area_id: str) -> dict[str, Any] | None:
        talent = self._current(talent_id)
        if talent is None:
            return None
        areas = [str(a) for a in talent.get("areas") or []]
        if str(area_id) in areas:
            return talent
        return self.update(talent_id, {"areas": areas + [str(area_id)]})

    def remove_area(self, talent_id: str, area_id: str) -> dict[str, Any] | None:
        talent = self._current(talent_id)
        if talent is None:
            return None
        return self.update(talent_id, {"areas": [str(a) for a in talent.get("areas") or [] if str(a) != str(area_id)]})

    def get_assignment_history(self, talent_id: str) -> list[dict[str, Any]]:
        """All allocations of a talent, newest start first, with project name and color."""
        projects = self.state.get(PROJECTS) or []
        names = project_names(projects)
        colors = {str(p.get("id")): p.get("color") for p in projects}
        rows = [
            {
                **a,
                "project_name": names.get(str(a.get("project_id"))),
                "project_color": colors.get(str(a.get("project_id"))),
            }
            for a in allocations_for_talent(self.state.get(ALLOCATIONS) or [], talent_id)
        ]
        rows.sort(key=lambda row: str(row.get("start_date") or ""), reverse=True)
        return rows
