from __future__ import annotations

import logging
from time import sleep
from typing import Any, Callable

import httpx

from ..errors import UNIQUE_VIOLATION, StoreError
from .base import Backend, Collection, stamp_new, stamp_update

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
PAGE_SIZE = 1000

# Default ordering per table, as PostgREST `order` expressions. `id` is
# appended as a tie-breaker so paging is stable.
ORDER_BY: dict[str, str] = {
    "allocations": "start_date",
    "areas": "name",
    "clients": "name",
    "talents": "name",
    "projects": "created_at.desc",
    "project_batches": "start_date",
    "activity_logs": "created_at.desc",
}


def _order(table: str) -> str:
    if table in ORDER_BY:
        return f"{ORDER_BY[table]},id"
    return "id"


def _error_from_response(resp: httpx.Response, table: str, attempts: int) -> StoreError:
    code: str | None = None
    message = resp.text
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = str(body["code"]) if body.get("code") is not None else None
        message = str(body.get("message") or message)
    return StoreError(
        f"{resp.request.method} {table} failed ({resp.status_code}): {message}",
        code=code,
        retryable=resp.status_code >= 500,
        attempts=attempts,
    )


class RestCollection(Collection):
    def __init__(self, backend: RestBackend, name: str):
        self.backend = backend
        self.name = name

    def _select(self, filters: dict[str, str] | None = None) -> list[dict[str, Any]]:
        """Read every matching row, one page at a time."""
        rows: list[dict[str, Any]] = []
        page_size = self.backend.page_size
        while True:
            params = {
                "select": "*",
                "order": _order(self.name),
                "limit": str(page_size),
                "offset": str(len(rows)),
                **(filters or {}),
            }
            page = self.backend.request("GET", self.name, params=params)
            if not isinstance(page, list):
                return rows
            rows.extend(page)
            if len(page) < page_size:
                return rows

    def get_all(self) -> list[dict[str, Any]]:
        return self._select()

    def find(self, field: str, value: Any) -> list[dict[str, Any]]:
        return self._select({field: f"eq.{value}"})

    def find_containing(self, field: str, value: Any) -> list[dict[str, Any]]:
        return self._select({field: f'cs.{{"{value}"}}'})

    def get_by_id(self, record_id: str) -> dict[str, Any] | None:
        data = self.backend.request("GET", self.name, params={"select": "*", "id": f"eq.{record_id}"})
        if isinstance(data, list) and data:
            return data[0]
        return None

    def insert(self, data: dict[str, Any]) -> dict[str, Any]:
        record = stamp_new(data)
        try:
            rows = self.backend.request("POST", self.name, json_body=[record], representation=True)
        except StoreError as exc:
            # A retried POST whose first attempt was committed collides with itself.
            if exc.code != UNIQUE_VIOLATION or exc.attempts < 2:
                raise
            existing = self.get_by_id(record["id"])
            if existing is None:
                raise
            logger.warning("POST %s %s was committed before a retry, using stored row", self.name, record["id"])
            return existing
        if isinstance(rows, list) and rows:
            return rows[0]
        return record

    def update(self, record_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        rows = self.backend.request(
            "PATCH",
            self.name,
            params={"id": f"eq.{record_id}"},
            json_body=stamp_update(data),
            representation=True,
        )
        if isinstance(rows, list) and rows:
            return rows[0]
        return None

    def delete(self, record_id: str) -> None:
        self.backend.request("DELETE", self.name, params={"id": f"eq.{record_id}"})


class RestBackend(Backend):
    """Record store backed by a hosted PostgREST API (Backend-as-a-Service).

    Timeouts, connection errors and 5xx responses are retried with
    exponential backoff; everything else fails fast as StoreError. Reads
    are paged, since the server caps the rows of a single select.
    """

    mode = "remote"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_s: float = 30.0,
        retries: int = 3,
        backoff_s: float = 1.0,
        page_size: int = PAGE_SIZE,
        transport: httpx.BaseTransport | None = None,
        sleeper: Callable[[float], None] = sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.retries = max(1, retries)
        self.backoff_s = backoff_s
        self.page_size = max(1, page_size)
        self._sleep = sleeper
        self._client = httpx.Client(
            base_url=f"{self.base_url}{REST_PREFIX}",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout_s,
            transport=transport,
        )
        self._collections: dict[str, RestCollection] = {}

    def collection(self, name: str) -> RestCollection:
        if name not in self._collections:
            self._collections[name] = RestCollection(self, name)
        return self._collections[name]

    def close(self) -> None:
        self._client.close()

    def _backoff(self, attempt: int) -> None:
        self._sleep(self.backoff_s * 2**attempt)

    def request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        representation: bool = False,
    ) -> Any:
        headers = {"Prefer": "return=representation"} if representation else None

        for attempt in range(self.retries):
            try:
                resp = self._client.request(method, f"/{table}", params=params, json=json_body, headers=headers)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt < self.retries - 1:
                    logger.warning("%s %s failed (%s), retrying", method, table, exc)
                    self._backoff(attempt)
                    continue
                raise StoreError(f"{method} {table} failed: {exc}", retryable=True, attempts=attempt + 1) from exc

            if resp.status_code >= 500 and attempt < self.retries - 1:
                logger.warning("%s %s returned %s, retrying", method, table, resp.status_code)
                self._backoff(attempt)
                continue
            if resp.status_code >= 400:
                raise _error_from_response(resp, table, attempt + 1)
            if resp.status_code == 204 or not resp.content:
                return None
            return resp.json()

        raise StoreError(f"{method} {table} failed without a response", attempts=self.retries)
