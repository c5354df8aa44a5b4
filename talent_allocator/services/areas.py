from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..backends import AREAS, TALENTS
from ..errors import AllocatorError
from .base import EntityService

if TYPE_CHECKING:
    from ..cascade import CascadeManager, CascadeResult


class AreaService(EntityService):
    """Business areas. ``delete`` also drops the area from every talent."""

    collection_name = AREAS
    entity_type = "area"
    required = ("name",)

    cascade: CascadeManager | None = None

    def delete(self, record_id: str) -> CascadeResult:
        if self.cascade is None:
            raise AllocatorError("Deleting an area needs a CascadeManager bound to this service")
        return self.cascade.delete_area(record_id)

    def get_talents_with_area(self, area_id: str) -> list[dict[str, Any]]:
        return [
            t for t in self.state.get(TALENTS) or []
            if str(area_id) in [str(a) for a in t.get("areas") or []]
        ]
