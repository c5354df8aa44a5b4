from __future__ import annotations

import logging
from typing import Any, Callable

from ..activity import ActivityLog
from ..backends import Backend, Collection
from ..errors import StoreError, ValidationError
from ..state import StateStore

logger = logging.getLogger(__name__)

Rows = list[dict[str, Any]]


def require_fields(data: dict[str, Any], fields: tuple[str, ...]) -> None:
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


class EntityService:
    """CRUD over one store collection, mirrored into the state under the same key.

    Every successful write re-reads the collection into the state. If that
    refresh fails the write still stands and the cached rows are patched
    in place instead.
    """

    collection_name: str = ""
    entity_type: str = ""
    required: tuple[str, ...] = ()

    def __init__(self, backend: Backend, state: StateStore, activity: ActivityLog | None = None):
        self.backend = backend
        self.state = state
        self.activity = activity

    @property
    def collection(self) -> Collection:
        return self.backend.collection(self.collection_name)

    def cached(self) -> Rows:
        return list(self.state.get(self.collection_name) or [])

    def get_all(self) -> Rows:
        rows = self.collection.get_all()
        self.state.set(self.collection_name, rows)
        return rows

    def get_by_id(self, record_id: str) -> dict[str, Any] | None:
        return self.collection.get_by_id(record_id)

    def find_cached(self, record_id: str) -> dict[str, Any] | None:
        for row in self.cached():
            if str(row.get("id")) == str(record_id):
                return row
        return None

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        require_fields(data, self.required)
        record = self.collection.insert(self.prepare_insert(data))
        self._after_write(lambda rows: rows + [record])
        self._log("created", record)
        return record

    def update(self, record_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        record = self.collection.update(record_id, data)
        if record is None:
            return None
        self._after_write(lambda rows: [record if str(r.get("id")) == str(record_id) else r for r in rows])
        self._log("updated", record)
        return record

    def delete(self, record_id: str) -> None:
        existing = self.find_cached(record_id)
        self.collection.delete(record_id)
        self._after_write(lambda rows: [r for r in rows if str(r.get("id")) != str(record_id)])
        self._log("deleted", existing or {"id": record_id})

    def prepare_insert(self, data: dict[str, Any]) -> dict[str, Any]:
        return dict(data)

    def display_name(self, record: dict[str, Any]) -> str:
        return str(record.get("name") or record.get("id") or "")

    def refresh(self, patch: Callable[[Rows], Rows] | None = None) -> None:
        """Re-read the collection into the state, falling back to ``patch`` on failure."""
        try:
            self.get_all()
        except StoreError:
            logger.exception("Refreshing %s failed, keeping cached state", self.collection_name)
            if patch is not None:
                self.state.set(self.collection_name, patch(self.cached()))

    def _after_write(self, patch: Callable[[Rows], Rows]) -> None:
        self.refresh(patch)

    def _log(self, action: str, record: dict[str, Any]) -> None:
        if self.activity is None:
            return
        self.activity.log(action, self.entity_type, record.get("id"), self.display_name(record))
