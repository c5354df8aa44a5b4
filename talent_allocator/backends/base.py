from __future__ import annotations

import abc
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

UTC = timezone.utc

ALLOCATIONS = "allocations"
PROJECTS = "projects"
TALENTS = "talents"
AREAS = "areas"
CLIENTS = "clients"
ACTIVITY_LOGS = "activity_logs"
PROJECT_BATCHES = "project_batches"

ENTITY_COLLECTIONS = (AREAS, CLIENTS, TALENTS, PROJECTS, ALLOCATIONS)


def now_utc_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def new_id() -> str:
    return str(uuid4())


def stamp_new(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of data with id and timestamps filled in (existing values win)."""
    record = dict(data)
    now = now_utc_iso()
    if not record.get("id"):
        record["id"] = new_id()
    record["id"] = str(record["id"])
    record.setdefault("created_at", now)
    record.setdefault("updated_at", record["created_at"])
    return record


def stamp_update(data: dict[str, Any]) -> dict[str, Any]:
    changes = {k: v for k, v in data.items() if k not in ("id", "created_at")}
    changes["updated_at"] = now_utc_iso()
    return changes


class Collection(abc.ABC):
    """One entity table of the record store.

    Missing records are reported as None, never as an exception. Store
    failures raise StoreError.
    """

    name: str

    @abc.abstractmethod
    def get_all(self) -> list[dict[str, Any]]: ...

    @abc.abstractmethod
    def get_by_id(self, record_id: str) -> dict[str, Any] | None: ...

    @abc.abstractmethod
    def insert(self, data: dict[str, Any]) -> dict[str, Any]:
        """Persist a new record. A supplied id is kept, so deleted rows can be restored."""

    @abc.abstractmethod
    def update(self, record_id: str, data: dict[str, Any]) -> dict[str, Any] | None: ...

    @abc.abstractmethod
    def delete(self, record_id: str) -> None: ...

    @abc.abstractmethod
    def find(self, field: str, value: Any) -> list[dict[str, Any]]:
        """Records whose ``field`` equals ``value``, filtered by the store."""

    @abc.abstractmethod
    def find_containing(self, field: str, value: Any) -> list[dict[str, Any]]:
        """Records whose list-valued ``field`` contains ``value``."""


class Backend(abc.ABC):
    mode: str

    @abc.abstractmethod
    def collection(self, name: str) -> Collection: ...

    def close(self) -> None:
        return None
