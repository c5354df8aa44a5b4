"""Record store backends.

Both implementations share the Collection interface, so services and
cascades have one code path regardless of where records live:

    MemoryBackend  -- in-process collections ("local mode")
    RestBackend    -- hosted PostgREST API over httpx
"""

from __future__ import annotations

import logging

import httpx

from ..config import Settings
from .base import (
    ACTIVITY_LOGS,
    ALLOCATIONS,
    AREAS,
    CLIENTS,
    ENTITY_COLLECTIONS,
    PROJECT_BATCHES,
    PROJECTS,
    TALENTS,
    Backend,
    Collection,
)
from .memory import MemoryBackend, MemoryCollection
from .rest import RestBackend, RestCollection

logger = logging.getLogger(__name__)

__all__ = [
    "ACTIVITY_LOGS",
    "ALLOCATIONS",
    "AREAS",
    "CLIENTS",
    "ENTITY_COLLECTIONS",
    "PROJECTS",
    "PROJECT_BATCHES",
    "TALENTS",
    "Backend",
    "Collection",
    "MemoryBackend",
    "MemoryCollection",
    "RestBackend",
    "RestCollection",
    "create_backend",
]


def create_backend(settings: Settings, *, transport: httpx.BaseTransport | None = None) -> Backend:
    if settings.local_mode:
        logger.info("No record store configured, running in local mode")
        return MemoryBackend()
    logger.info("Using record store at %s", settings.baas_url)
    return RestBackend(
        base_url=settings.baas_url,
        api_key=settings.baas_key,
        timeout_s=settings.http_timeout_s,
        retries=settings.http_retries,
        transport=transport,
    )
