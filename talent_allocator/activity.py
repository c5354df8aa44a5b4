"""Audit trail of user-visible mutations."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any

from .backends import ACTIVITY_LOGS, Backend
from .backends.base import now_utc_iso
from .errors import StoreError

logger = logging.getLogger(__name__)

LOCAL_LIMIT = 100

ACTION_LABELS = {
    "created": "Created",
    "updated": "Updated",
    "deleted": "Deleted",
    "assigned": "Assigned",
    "unassigned": "Unassigned",
    "status_changed": "Changed status of",
}

ENTITY_LABELS = {
    "talent": "Talent",
    "project": "Project",
    "client": "Client",
    "allocation": "Allocation",
    "area": "Business Area",
}


class ActivityLog:
    """Records actions to the store and to a bounded local buffer.

    Logging never fails the action being logged: store errors are reported
    and the entry is still kept locally.
    """

    def __init__(self, backend: Backend, *, actor: str | None = None, limit: int = LOCAL_LIMIT):
        self.backend = backend
        self.actor = actor
        self._local: deque[dict[str, Any]] = deque(maxlen=limit)

    def log(
        self,
        action: str,
        entity_type: str,
        entity_id: str | None,
        entity_name: str,
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        entry = {
            "user_email": self.actor or "Anonymous",
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "entity_name": entity_name,
            "details": details,
            "created_at": now_utc_iso(),
        }
        try:
            self.backend.collection(ACTIVITY_LOGS).insert(entry)
        except StoreError as exc:
            logger.warning("Failed to save activity log entry: %s", exc)
        self._local.appendleft(entry)
        return entry

    def recent(self, limit: int = 50) -> list[dict[str, Any]]:
        return list(self._local)[:limit]


def describe(entry: dict[str, Any]) -> str:
    action = ACTION_LABELS.get(entry.get("action", ""), entry.get("action", ""))
    entity = ENTITY_LABELS.get(entry.get("entity_type", ""), entry.get("entity_type", ""))
    return f"{action} {entity.lower()} {entry.get('entity_name') or ''}".strip()
