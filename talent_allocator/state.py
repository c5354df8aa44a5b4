"""Reactive key/value state shared by the services and their consumers."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any, Any], None]


def default_state() -> dict[str, Any]:
    return {
        "talents": [],
        "projects": [],
        "allocations": [],
        "areas": [],
        "clients": [],
        "ui": {
            "loading": False,
            "selected_date": None,
            "selected_talent_id": None,
        },
    }


class StateStore:
    """Key/value store with per-key subscriptions.

    Keys may be dotted ("ui.loading"); setting one also notifies
    subscribers of its top-level parent key.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._state: dict[str, Any] = initial if initial is not None else default_state()
        self._subscribers: dict[str, list[Subscriber]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        current: Any = self._state
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key: str, value: Any) -> None:
        parts = key.split(".")
        current = self._state
        for part in parts[:-1]:
            nxt = current.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                current[part] = nxt
            current = nxt

        old = current.get(parts[-1])
        current[parts[-1]] = value
        self._notify(key, value, old)
        if len(parts) > 1:
            self._notify(parts[0], self._state[parts[0]], None)

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _notify(self, key: str, new: Any, old: Any) -> None:
        for callback in list(self._subscribers.get(key, [])):
            try:
                callback(new, old)
            except Exception:
                logger.exception("State subscriber for %r failed", key)
