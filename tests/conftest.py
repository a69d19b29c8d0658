"""Shared fixtures: an in-memory store standing in for the PostgREST API."""

from typing import Dict, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from mlmunion.config import Settings, get_settings
from mlmunion.dependencies import get_store, limiter
from mlmunion.main import app
from mlmunion.services.store import Filter, StoreError, format_value

SITE_URL = "https://www.mlmunion.in"


def _matches(row: dict, flt: Filter) -> bool:
    column, op, value = flt
    actual = row.get(column)
    if op == "eq":
        return actual is not None and format_value(actual) == value
    if op == "neq":
        return actual is None or format_value(actual) != value
    if op == "not.is" and value == "null":
        return actual is not None
    raise AssertionError(f"FakeStore does not support operator {op!r}")


class FakeStore:
    """Implements the :class:`ContentStore` interface over lists of dicts.

    Column selection is ignored; every stored column is returned.
    """

    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None):
        self.tables: Dict[str, List[dict]] = tables or {}
        self.fail = False
        self.queries: List[tuple] = []
        self.updates: List[tuple] = []

    def add(self, table: str, **row) -> dict:
        self.tables.setdefault(table, []).append(row)
        return row

    async def fetch_one(self, table: str, columns: str, filters: Sequence[Filter]):
        rows = await self.fetch_all(table, columns, filters, limit=1)
        return rows[0] if rows else None

    async def fetch_all(self, table, columns, filters=(), order=None, limit=None, offset=0):
        self.queries.append((table, tuple(filters)))
        if self.fail:
            raise StoreError(f"Query on '{table}' failed")
        rows = [r for r in self.tables.get(table, []) if all(_matches(r, f) for f in filters)]
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=direction == "desc")
        rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return [dict(r) for r in rows]

    async def iter_all(self, table, columns, filters=(), batch_size=1000):
        for row in await self.fetch_all(table, columns, filters, order="id.asc"):
            yield row

    async def update(self, table, record_id, values):
        if self.fail:
            raise StoreError(f"Update on '{table}' failed")
        self.updates.append((table, record_id, values))
        for row in self.tables.get(table, []):
            if row.get("id") == record_id:
                row.update(values)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def client(store):
    """TestClient wired to *store*; redirects are not followed."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: Settings(site_url=SITE_URL)
    limiter._storage.reset()
    yield TestClient(app, follow_redirects=False)
    app.dependency_overrides.clear()
