"""Shared test fixtures.

In-memory stand-ins for the two collaborators of CurrencyApplicationService:
  - InMemoryCache          → KeyValueCache (records every get/set/delete)
  - InMemoryCurrencyStore  → CurrencyRepositoryProtocol (counts every call)
"""

import uuid
from collections import Counter
from collections.abc import AsyncGenerator
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.ccy_common.database import get_db_session
from src.ccy_common.errors import (
    CacheError,
    CurrencyCodeExistsError,
    CurrencyNotFoundError,
)
from src.ccy_currency.api.router import get_currency_service
from src.ccy_currency.application.service import CurrencyApplicationService
from src.ccy_currency.domain.models import Currency
from src.main import create_app


class InMemoryCache:
    def __init__(self) -> None:
        self.now = datetime.now(UTC)
        self.data: dict[str, tuple[str, datetime]] = {}
        self.gets: list[str] = []
        self.sets: list[tuple[str, timedelta]] = []
        self.deletes: list[str] = []
        self.down = False

    def advance(self, delta: timedelta) -> None:
        self.now += delta

    def keys(self) -> set[str]:
        return {k for k, (_, exp) in self.data.items() if exp > self.now}

    def _check(self) -> None:
        if self.down:
            raise CacheError("connection refused")

    async def get(self, key: str) -> str | None:
        self.gets.append(key)
        self._check()
        entry = self.data.get(key)
        if entry is None or entry[1] <= self.now:
            return None
        return entry[0]

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        self.sets.append((key, ttl))
        self._check()
        self.data[key] = (value, self.now + ttl)

    async def delete(self, *keys: str) -> int:
        self.deletes.extend(keys)
        self._check()
        return sum(1 for k in keys if self.data.pop(k, None) is not None)

    async def delete_by_prefix(self, prefix: str) -> int:
        self.deletes.append(f"{prefix}*")
        self._check()
        doomed = [k for k in self.data if k.startswith(prefix)]
        for k in doomed:
            del self.data[k]
        return len(doomed)


class InMemoryCurrencyStore:
    def __init__(self) -> None:
        self.rows: dict[str, Currency] = {}
        self.calls: Counter[str] = Counter()

    def _code_taken(self, code: str, exclude_id: str | None = None) -> bool:
        return any(c.code == code and c.id != exclude_id for c in self.rows.values())

    def _insert(self, currency: Currency) -> Currency:
        now = datetime.now(UTC)
        row = replace(
            currency,
            id=currency.id or str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
        )
        self.rows[row.id] = row
        return replace(row)

    async def create(self, db, currency: Currency) -> Currency:
        self.calls["create"] += 1
        if self._code_taken(currency.code):
            raise CurrencyCodeExistsError(currency.code)
        return self._insert(currency)

    async def get_by_id(self, db, currency_id: str) -> Currency:
        self.calls["get_by_id"] += 1
        if currency_id not in self.rows:
            raise CurrencyNotFoundError(currency_id)
        return replace(self.rows[currency_id])

    async def get_by_code(self, db, code: str) -> Currency:
        self.calls["get_by_code"] += 1
        for row in self.rows.values():
            if row.code == code:
                return replace(row)
        raise CurrencyNotFoundError(code)

    async def get_all(self, db, limit: int, offset: int) -> list[Currency]:
        self.calls["get_all"] += 1
        rows = sorted(self.rows.values(), key=lambda c: c.code)
        if offset > 0:
            rows = rows[offset:]
        if limit > 0:
            rows = rows[:limit]
        return [replace(r) for r in rows]

    async def update(self, db, currency: Currency) -> Currency:
        self.calls["update"] += 1
        if currency.id not in self.rows:
            raise CurrencyNotFoundError(str(currency.id))
        if self._code_taken(currency.code, exclude_id=currency.id):
            raise CurrencyCodeExistsError(currency.code)
        row = replace(currency, updated_at=datetime.now(UTC))
        self.rows[row.id] = row
        return replace(row)

    async def delete(self, db, currency_id: str) -> None:
        self.calls["delete"] += 1
        if self.rows.pop(currency_id, None) is None:
            raise CurrencyNotFoundError(currency_id)

    async def get_by_factor(self, db, factor: int) -> list[Currency]:
        self.calls["get_by_factor"] += 1
        return sorted(
            (replace(r) for r in self.rows.values() if r.factor == factor),
            key=lambda c: c.code,
        )

    async def search_by_name(self, db, name: str) -> list[Currency]:
        self.calls["search_by_name"] += 1
        return sorted(
            (replace(r) for r in self.rows.values() if name.lower() in r.description.lower()),
            key=lambda c: c.code,
        )

    async def get_by_codes(self, db, codes: list[str]) -> list[Currency]:
        self.calls["get_by_codes"] += 1
        return sorted(
            (replace(r) for r in self.rows.values() if r.code in codes),
            key=lambda c: c.code,
        )

    async def create_batch(self, db, currencies: list[Currency]) -> list[Currency]:
        """Row by row; a failure drops the rows already inserted by this call."""
        self.calls["create_batch"] += 1
        created: list[Currency] = []
        try:
            for currency in currencies:
                if self._code_taken(currency.code):
                    raise CurrencyCodeExistsError(currency.code)
                created.append(self._insert(currency))
        except CurrencyCodeExistsError:
            for row in created:
                del self.rows[row.id]
            raise
        return created

    async def count(self, db) -> int:
        self.calls["count"] += 1
        return len(self.rows)


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def store() -> InMemoryCurrencyStore:
    return InMemoryCurrencyStore()


@pytest.fixture
def db() -> AsyncMock:
    """Stand-in AsyncSession: only commit/rollback are touched by the service."""
    return AsyncMock()


@pytest.fixture
def service(store: InMemoryCurrencyStore, cache: InMemoryCache) -> CurrencyApplicationService:
    return CurrencyApplicationService(repo=store, cache=cache)


@pytest.fixture
def app(service: CurrencyApplicationService, db: AsyncMock) -> FastAPI:
    """App wired to the in-memory fakes; lifespan (real DB/Redis) never runs."""
    application = create_app()

    async def _db_override() -> AsyncGenerator[AsyncMock, None]:
        yield db

    application.dependency_overrides[get_currency_service] = lambda: service
    application.dependency_overrides[get_db_session] = _db_override
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
