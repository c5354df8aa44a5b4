"""Bulk loading of every collection into the state, with retry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import sleep
from typing import Any, Callable

from .backends import ENTITY_COLLECTIONS
from .services import EntityService
from .state import StateStore

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAY_S = 1.0


@dataclass
class LoadError:
    type: str
    message: str
    original: BaseException | None = None


@dataclass
class LoadResult:
    data: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    errors: list[LoadError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class DataLoader:
    """Fills the state from the store on startup and on demand.

    Each collection is attempted up to ``max_retries`` times, waiting
    ``retry_delay_s * attempt`` between attempts. A collection that keeps
    failing is reported in LoadResult.errors and loaded as empty; the other
    collections still load.
    """

    def __init__(
        self,
        state: StateStore,
        services: dict[str, EntityService],
        *,
        max_retries: int = MAX_RETRIES,
        retry_delay_s: float = RETRY_DELAY_S,
        sleeper: Callable[[float], None] = sleep,
    ):
        self.state = state
        self.services = services
        self.max_retries = max(1, max_retries)
        self.retry_delay_s = retry_delay_s
        self._sleep = sleeper

    def load_with_retry(
        self,
        load_fn: Callable[[], list[dict[str, Any]]],
        data_type: str,
    ) -> tuple[list[dict[str, Any]], LoadError | None]:
        last_exc: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return load_fn(), None
            except Exception as exc:
                last_exc = exc
                logger.warning("Failed to load %s (attempt %d/%d): %s", data_type, attempt, self.max_retries, exc)
                if attempt < self.max_retries:
                    self._sleep(self.retry_delay_s * attempt)
        return [], LoadError(
            type=data_type,
            message=f"Failed to load {data_type} after {self.max_retries} attempts",
            original=last_exc,
        )

    def load_all(self) -> LoadResult:
        result = LoadResult()
        self.state.set("ui.loading", True)
        try:
            for name in ENTITY_COLLECTIONS:
                service = self.services[name]
                rows, error = self.load_with_retry(service.get_all, name)
                result.data[name] = rows
                if error is not None:
                    result.errors.append(error)
                    self.state.set(name, [])
        finally:
            self.state.set("ui.loading", False)
        return result

    def reload(self, data_type: str) -> LoadResult:
        if data_type not in self.services:
            raise ValueError(f"Unknown data type: {data_type}")
        result = LoadResult()
        self.state.set("ui.loading", True)
        try:
            rows, error = self.load_with_retry(self.services[data_type].get_all, data_type)
            result.data[data_type] = rows
            if error is not None:
                result.errors.append(error)
        finally:
            self.state.set("ui.loading", False)
        return result

    def is_data_loaded(self) -> bool:
        return all(isinstance(self.state.get(name), list) for name in ENTITY_COLLECTIONS)

    def is_loading(self) -> bool:
        return bool(self.state.get("ui.loading", False))
