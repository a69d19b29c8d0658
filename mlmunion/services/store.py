"""Read/update accessor for the managed database's PostgREST API."""

import logging
from typing import AsyncIterator, List, Optional, Sequence, Tuple

import httpx

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
PAGE_SIZE = 1000

# (column, operator, value) rendered as ``column=operator.value``
Filter = Tuple[str, str, str]


class StoreError(RuntimeError):
    """The store could not be reached or returned an unusable response."""


def format_value(value: object) -> str:
    """Render *value* the way PostgREST expects it in a filter."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def eq(column: str, value: object) -> Filter:
    return (column, "eq", format_value(value))


def neq(column: str, value: object) -> Filter:
    return (column, "neq", format_value(value))


def not_null(column: str) -> Filter:
    return (column, "not.is", "null")


def _filter_params(filters: Sequence[Filter]) -> List[Tuple[str, str]]:
    return [(column, f"{op}.{value}") for column, op, value in filters]


def create_client(
    base_url: str,
    api_key: str,
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build the HTTP client used by :class:`ContentStore`."""
    headers = {"Accept": "application/json"}
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/") + REST_PREFIX,
        headers=headers,
        timeout=timeout,
        transport=transport,
    )


class ContentStore:
    """Row-level access to the content tables.

    The accessor owns no connection state of its own; the caller constructs the
    :class:`httpx.AsyncClient` and passes it in, which keeps tests free to hand
    over a client backed by :class:`httpx.MockTransport`.

    Raises:
        StoreError: from every method, on transport errors, non-2xx responses
            and bodies that are not the expected JSON shape.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_one(
        self, table: str, columns: str, filters: Sequence[Filter]
    ) -> Optional[dict]:
        """Return the first row of *table* matching *filters*, or *None*."""
        rows = await self.fetch_all(table, columns, filters, limit=1)
        return rows[0] if rows else None

    async def fetch_all(
        self,
        table: str,
        columns: str,
        filters: Sequence[Filter] = (),
        order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[dict]:
        """Return the rows of *table* matching *filters*."""
        params = [("select", columns)] + _filter_params(filters)
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset:
            params.append(("offset", str(offset)))

        try:
            resp = await self._client.get(f"/{table}", params=params)
            resp.raise_for_status()
            rows = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Store query on %s failed: %s", table, exc)
            raise StoreError(f"Query on '{table}' failed") from exc

        if not isinstance(rows, list):
            raise StoreError(f"Query on '{table}' returned {type(rows).__name__}, expected a list")
        return rows

    async def iter_all(
        self,
        table: str,
        columns: str,
        filters: Sequence[Filter] = (),
        batch_size: int = PAGE_SIZE,
    ) -> AsyncIterator[dict]:
        """Yield every matching row, paging through the table in id order."""
        offset = 0
        while True:
            rows = await self.fetch_all(
                table, columns, filters, order="id.asc", limit=batch_size, offset=offset
            )
            for row in rows:
                yield row
            if len(rows) < batch_size:
                break
            offset += batch_size

    async def update(self, table: str, record_id: str, values: dict) -> None:
        """Apply *values* to the single row whose primary key is *record_id*."""
        try:
            resp = await self._client.patch(
                f"/{table}",
                params=_filter_params([eq("id", record_id)]),
                json=values,
                headers={"Prefer": "return=minimal"},
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Store update on %s (%s) failed: %s", table, record_id, exc)
            raise StoreError(f"Update on '{table}' failed") from exc
