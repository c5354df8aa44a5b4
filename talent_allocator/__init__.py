"""Talent allocation service: record store, entity services, cascades and the MCP server."""

from .config import Settings, load_settings
from .context import EngineContext
from .errors import AllocatorError, CascadeError, ConflictError, StoreError, ValidationError

__all__ = [
    "AllocatorError",
    "CascadeError",
    "ConflictError",
    "EngineContext",
    "Settings",
    "StoreError",
    "ValidationError",
    "load_settings",
]
