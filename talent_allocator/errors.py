"""Error types and classification for store and engine failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

NETWORK = "network"
VALIDATION = "validation"
CONFLICT = "conflict"
DATABASE = "database"
UNKNOWN = "unknown"

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
UNDEFINED_TABLE = "42P01"


class AllocatorError(Exception):
    """Base class for errors raised by talent_allocator."""


class StoreError(AllocatorError):
    """The record store failed (unreachable, rejected the request, ...)."""

    def __init__(self, message: str, *, code: str | None = None, retryable: bool = True, attempts: int = 1):
        super().__init__(message)
        self.code = code
        self.retryable = retryable
        self.attempts = attempts


class ValidationError(AllocatorError):
    """Input data is missing or malformed."""


class ConflictError(AllocatorError):
    """A write was refused because it overlaps existing allocations."""

    def __init__(self, message: str, conflicts: list[dict[str, Any]]):
        super().__init__(message)
        self.conflicts = conflicts


class CascadeError(AllocatorError):
    """A cascade failed and could not be fully rolled back."""

    def __init__(self, message: str, *, unrestored: list[str]):
        super().__init__(message)
        self.unrestored = unrestored


@dataclass(frozen=True)
class ErrorInfo:
    type: str
    message: str
    details: str
    retryable: bool


def is_network_error(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True
    text = str(exc).lower()
    return any(marker in text for marker in ("network", "econnrefused", "etimedout", "failed to fetch"))


def classify_error(exc: BaseException) -> ErrorInfo:
    """Categorize an exception for user-facing reporting."""
    details = str(exc)
    if isinstance(exc, ConflictError):
        return ErrorInfo(CONFLICT, details or "Scheduling conflict", details, False)
    if isinstance(exc, (ValidationError, ValueError)):
        return ErrorInfo(VALIDATION, details or "Invalid data provided", details, False)

    code = getattr(exc, "code", None)
    if code == UNIQUE_VIOLATION:
        return ErrorInfo(CONFLICT, "A record with this value already exists", details, False)
    if code == FOREIGN_KEY_VIOLATION:
        return ErrorInfo(DATABASE, "Cannot complete operation due to related records", details, False)
    if code == UNDEFINED_TABLE:
        return ErrorInfo(DATABASE, "Database table not found. Please run migrations.", details, False)

    if is_network_error(exc) or (isinstance(exc, StoreError) and code is None and exc.retryable):
        return ErrorInfo(NETWORK, "Network connection failed", details, True)
    if code:
        return ErrorInfo(DATABASE, "Database operation failed", details, True)
    if isinstance(exc, StoreError):
        return ErrorInfo(DATABASE, "Database operation failed", details, exc.retryable)
    return ErrorInfo(UNKNOWN, details or "An unexpected error occurred", details, True)


def format_error_message(info: ErrorInfo, context: str) -> str:
    if info.type == NETWORK:
        return f"Failed to {context.lower()}. Please check your internet connection."
    if info.type == VALIDATION:
        return info.message
    if info.type in (CONFLICT, DATABASE):
        return f"{context} failed: {info.message}"
    return f"{context} failed. Please try again."


def error_payload(exc: BaseException, context: str) -> dict[str, Any]:
    info = classify_error(exc)
    payload: dict[str, Any] = {
        "error": info.type,
        "message": format_error_message(info, context),
        "details": info.details,
        "retryable": info.retryable,
    }
    if isinstance(exc, ConflictError):
        payload["conflicts"] = exc.conflicts
    return payload
