"""In-process record store used in local mode and in tests."""

from __future__ import annotations

import copy
from typing import Any

from ..errors import UNIQUE_VIOLATION, StoreError
from .base import ACTIVITY_LOGS, Backend, Collection, stamp_new, stamp_update

# Append-only collections are trimmed to their newest rows.
ROW_LIMITS: dict[str, int] = {ACTIVITY_LOGS: 1000}


class MemoryCollection(Collection):
    def __init__(self, name: str, *, max_rows: int | None = None):
        self.name = name
        self.max_rows = max_rows
        self._rows: dict[str, dict[str, Any]] = {}

    def get_all(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(row) for row in self._rows.values()]

    def find(self, field: str, value: Any) -> list[dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._rows.values() if str(r.get(field)) == str(value)]

    def find_containing(self, field: str, value: Any) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(r) for r in self._rows.values()
            if str(value) in [str(v) for v in r.get(field) or []]
        ]

    def get_by_id(self, record_id: str) -> dict[str, Any] | None:
        row = self._rows.get(str(record_id))
        return copy.deepcopy(row) if row is not None else None

    def insert(self, data: dict[str, Any]) -> dict[str, Any]:
        record = stamp_new(copy.deepcopy(data))
        if record["id"] in self._rows:
            raise StoreError(
                f"duplicate key in {self.name}: {record['id']}",
                code=UNIQUE_VIOLATION,
                retryable=False,
            )
        self._rows[record["id"]] = record
        if self.max_rows is not None:
            while len(self._rows) > self.max_rows:
                del self._rows[next(iter(self._rows))]
        return copy.deepcopy(record)

    def update(self, record_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        row = self._rows.get(str(record_id))
        if row is None:
            return None
        row.update(copy.deepcopy(stamp_update(data)))
        return copy.deepcopy(row)

    def delete(self, record_id: str) -> None:
        self._rows.pop(str(record_id), None)


class MemoryBackend(Backend):
    mode = "local"

    def __init__(self, row_limits: dict[str, int] | None = None) -> None:
        self.row_limits = ROW_LIMITS if row_limits is None else row_limits
        self._collections: dict[str, MemoryCollection] = {}

    def collection(self, name: str) -> MemoryCollection:
        if name not in self._collections:
            self._collections[name] = MemoryCollection(name, max_rows=self.row_limits.get(name))
        return self._collections[name]
