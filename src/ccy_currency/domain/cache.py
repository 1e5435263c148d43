"""Currency read cache: key scheme, TTL policy and snapshot codec.

Cache keys (shared with any other reader of the same Redis, keep exact):
  - single currency:  f"currency:code:{code}"
  - first-page list:  f"currencies:all:{limit}:{offset}"
    only for offset == 0 and limit <= 100; every other page bypasses the cache.

Every write uses a fixed 15 minute TTL, no refresh on read.
Writes invalidate the code key plus *all* list keys (coarse on purpose:
a spurious miss is fine, a stale list is not).
"""

from datetime import timedelta
from typing import Protocol

from pydantic import TypeAdapter

from src.ccy_currency.domain.models import Currency

CACHE_TTL = timedelta(minutes=15)

CODE_KEY_PREFIX = "currency:code:"
LIST_KEY_PREFIX = "currencies:all:"
MAX_CACHED_LIST_LIMIT = 100


class KeyValueCache(Protocol):
    """Narrow cache capability. Implementations raise CacheError on failure."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: timedelta) -> None: ...

    async def delete(self, *keys: str) -> int: ...

    async def delete_by_prefix(self, prefix: str) -> int: ...


def code_key(code: str) -> str:
    return f"{CODE_KEY_PREFIX}{code}"


def list_key(limit: int, offset: int) -> str | None:
    """List key for a cacheable first page, None when the page bypasses the cache."""
    if offset != 0 or limit > MAX_CACHED_LIST_LIMIT:
        return None
    return f"{LIST_KEY_PREFIX}{limit}:{offset}"


# ---------------------------------------------------------------------------
# Snapshot codec
# ---------------------------------------------------------------------------

_currency_adapter = TypeAdapter(Currency)
_currency_list_adapter = TypeAdapter(list[Currency])


def encode_currency(currency: Currency) -> str:
    return _currency_adapter.dump_json(currency).decode()


def decode_currency(raw: str) -> Currency:
    """Raises pydantic.ValidationError on a corrupt snapshot."""
    return _currency_adapter.validate_json(raw)


def encode_currencies(currencies: list[Currency]) -> str:
    return _currency_list_adapter.dump_json(currencies).decode()


def decode_currencies(raw: str) -> list[Currency]:
    return _currency_list_adapter.validate_json(raw)
