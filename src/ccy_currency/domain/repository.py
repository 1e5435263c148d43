"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock or an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real PostgreSQL implementation.

Contract shared by every implementation:
  - missing rows raise CurrencyNotFoundError
  - duplicate codes raise CurrencyCodeExistsError
  - transport failures raise StoreError
  - nothing is committed here; the caller owns the transaction
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ccy_currency.domain.models import Currency


class CurrencyRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, currency: Currency) -> Currency: ...

    async def get_by_id(self, db: AsyncSession, currency_id: str) -> Currency: ...

    async def get_by_code(self, db: AsyncSession, code: str) -> Currency: ...

    async def get_all(
        self, db: AsyncSession, limit: int, offset: int
    ) -> list[Currency]: ...

    async def update(self, db: AsyncSession, currency: Currency) -> Currency: ...

    async def delete(self, db: AsyncSession, currency_id: str) -> None: ...

    async def get_by_factor(self, db: AsyncSession, factor: int) -> list[Currency]: ...

    async def search_by_name(self, db: AsyncSession, name: str) -> list[Currency]: ...

    async def get_by_codes(
        self, db: AsyncSession, codes: list[str]
    ) -> list[Currency]: ...

    async def create_batch(
        self, db: AsyncSession, currencies: list[Currency]
    ) -> list[Currency]: ...

    async def count(self, db: AsyncSession) -> int: ...
