"""CurrencyApplicationService: cache-aside reads + invalidation on write.

Reads:
  get_currency_by_code / list_currencies check Redis first, fall back to the
  repository on miss (or corrupt snapshot, or cache outage) and repopulate
  the cache with a 15 minute TTL. NotFound is never cached.

Writes:
  validate → repository → commit → invalidate code key + every list key.
  On any exception the session is rolled back and nothing is invalidated.

The cache is advisory: CacheError never leaves this class. Population and
invalidation helpers return the error instead of raising so every call site
shows that it is logged and dropped.
"""

import logging
from datetime import timedelta

from pydantic import ValidationError as SnapshotDecodeError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ccy_common.errors import CacheError, InvalidCurrencyCodeError, ValidationError
from src.ccy_currency.domain.cache import (
    CACHE_TTL,
    LIST_KEY_PREFIX,
    KeyValueCache,
    code_key,
    decode_currencies,
    decode_currency,
    encode_currencies,
    encode_currency,
    list_key,
)
from src.ccy_currency.domain.models import (
    CODE_LENGTH,
    DEFAULT_AMOUNT_DISPLAY_FORMAT,
    DEFAULT_CREATED_BY,
    DEFAULT_FACTOR,
    Currency,
)
from src.ccy_currency.domain.repository import CurrencyRepositoryProtocol

logger = logging.getLogger(__name__)


def _validate(currency: Currency) -> None:
    if not currency.code:
        raise ValidationError("currency code is required")
    if not currency.description:
        raise ValidationError("currency description is required")
    currency.code = currency.code.upper()
    if len(currency.code) != CODE_LENGTH:
        raise InvalidCurrencyCodeError(currency.code)
    if currency.factor < 0:
        raise ValidationError("currency factor must be positive")


def _apply_defaults(currency: Currency) -> None:
    if currency.factor == 0:
        currency.factor = DEFAULT_FACTOR
    if not currency.amount_display_format:
        currency.amount_display_format = DEFAULT_AMOUNT_DISPLAY_FORMAT
    if not currency.created_by:
        currency.created_by = DEFAULT_CREATED_BY


class CurrencyApplicationService:
    def __init__(
        self,
        repo: CurrencyRepositoryProtocol,
        cache: KeyValueCache,
        ttl: timedelta = CACHE_TTL,
    ) -> None:
        self._repo = repo
        self._cache = cache
        self._ttl = ttl

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    async def get_currency_by_code(self, db: AsyncSession, code: str) -> Currency:
        key = code_key(code)
        raw = await self._cache_get(key)
        if raw is not None:
            try:
                currency = decode_currency(raw)
            except SnapshotDecodeError:
                logger.warning("Discarding corrupt cache entry %s", key)
            else:
                logger.debug("Cache hit: %s", key)
                return currency

        currency = await self._repo.get_by_code(db, code)

        err = await self._cache_set(key, encode_currency(currency))
        if err is not None:
            logger.warning("Cache populate failed for %s: %s", key, err.message)
        return currency

    async def list_currencies(
        self, db: AsyncSession, limit: int, offset: int
    ) -> list[Currency]:
        key = list_key(limit, offset)
        if key is None:
            return await self._repo.get_all(db, limit, offset)

        raw = await self._cache_get(key)
        if raw is not None:
            try:
                currencies = decode_currencies(raw)
            except SnapshotDecodeError:
                logger.warning("Discarding corrupt cache entry %s", key)
            else:
                logger.debug("Cache hit: %s", key)
                return currencies

        currencies = await self._repo.get_all(db, limit, offset)

        err = await self._cache_set(key, encode_currencies(currencies))
        if err is not None:
            logger.warning("Cache populate failed for %s: %s", key, err.message)
        return currencies

    # ------------------------------------------------------------------
    # Uncached reads
    # ------------------------------------------------------------------

    async def get_currency_by_id(self, db: AsyncSession, currency_id: str) -> Currency:
        return await self._repo.get_by_id(db, currency_id)

    async def search_currencies(self, db: AsyncSession, query: str) -> list[Currency]:
        if not query:
            return []
        return await self._repo.search_by_name(db, query)

    async def get_currencies_by_factor(
        self, db: AsyncSession, factor: int
    ) -> list[Currency]:
        return await self._repo.get_by_factor(db, factor)

    async def get_currencies_by_codes(
        self, db: AsyncSession, codes: list[str]
    ) -> list[Currency]:
        return await self._repo.get_by_codes(db, [c.upper() for c in codes])

    async def get_currency_count(self, db: AsyncSession) -> int:
        return await self._repo.count(db)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_currency(self, db: AsyncSession, currency: Currency) -> Currency:
        _validate(currency)
        _apply_defaults(currency)
        try:
            created = await self._repo.create(db, currency)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        for err in await self._invalidate(created.code):
            logger.warning("Cache invalidation failed for %s: %s", created.code, err.message)
        return created

    async def create_currencies(
        self, db: AsyncSession, currencies: list[Currency]
    ) -> list[Currency]:
        """All-or-nothing batch create."""
        for currency in currencies:
            _validate(currency)
            _apply_defaults(currency)
        try:
            created = await self._repo.create_batch(db, currencies)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        codes = [currency.code for currency in created]
        for err in await self._invalidate(*codes):
            logger.warning("Cache invalidation failed for %s: %s", codes, err.message)
        return created

    async def update_currency(self, db: AsyncSession, currency: Currency) -> Currency:
        """Full-record overwrite; callers merge partial changes beforehand."""
        _validate(currency)
        try:
            updated = await self._repo.update(db, currency)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        for err in await self._invalidate(updated.code):
            logger.warning("Cache invalidation failed for %s: %s", updated.code, err.message)
        return updated

    async def delete_currency(self, db: AsyncSession, currency_id: str) -> None:
        # The code is only known from the row; resolve it before it is gone.
        currency = await self._repo.get_by_id(db, currency_id)
        try:
            await self._repo.delete(db, currency_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        for err in await self._invalidate(currency.code):
            logger.warning("Cache invalidation failed for %s: %s", currency.code, err.message)

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------

    async def _cache_get(self, key: str) -> str | None:
        """Outage reads as a miss."""
        try:
            return await self._cache.get(key)
        except CacheError as exc:
            logger.warning("Cache read failed for %s, using store: %s", key, exc.message)
            return None

    async def _cache_set(self, key: str, payload: str) -> CacheError | None:
        try:
            await self._cache.set(key, payload, self._ttl)
        except CacheError as exc:
            return exc
        return None

    async def _invalidate(self, *codes: str) -> list[CacheError]:
        """Drop the given code keys, then every list key in one sweep."""
        errors: list[CacheError] = []
        try:
            await self._cache.delete(*(code_key(code) for code in codes))
        except CacheError as exc:
            errors.append(exc)
        try:
            await self._cache.delete_by_prefix(LIST_KEY_PREFIX)
        except CacheError as exc:
            errors.append(exc)
        return errors
