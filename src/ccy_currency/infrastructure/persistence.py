"""CurrencyRepository: concrete implementation of CurrencyRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) is required for None values.
The repository never commits; CurrencyApplicationService owns the transaction.
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ccy_common.errors import (
    CurrencyCodeExistsError,
    CurrencyNotFoundError,
    StoreError,
)
from src.ccy_currency.domain.models import Currency

_UNIQUE_VIOLATION = "23505"

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, code, description, amount_display_format, html_encoded_symbol,
    factor, created_by, created_at, updated_at
"""

_INSERT_CURRENCY_SQL = text(f"""
    INSERT INTO currencies (id, code, description, amount_display_format,
        html_encoded_symbol, factor, created_by)
    VALUES (CAST(:id AS UUID), :code, :description, :amount_display_format,
        :html_encoded_symbol, :factor, CAST(:created_by AS UUID))
    RETURNING {_SELECT_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM currencies
    WHERE id = CAST(:id AS UUID)
""")

_GET_BY_CODE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM currencies
    WHERE code = :code
""")

# NULL limit == LIMIT ALL, NULL offset == OFFSET 0
_LIST_CURRENCIES_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM currencies
    ORDER BY code ASC
    LIMIT CAST(:limit AS BIGINT)
    OFFSET CAST(:offset AS BIGINT)
""")

_UPDATE_CURRENCY_SQL = text(f"""
    UPDATE currencies
    SET code = :code,
        description = :description,
        amount_display_format = :amount_display_format,
        html_encoded_symbol = :html_encoded_symbol,
        factor = :factor,
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID)
    RETURNING {_SELECT_COLUMNS}
""")

_DELETE_CURRENCY_SQL = text("""
    DELETE FROM currencies
    WHERE id = CAST(:id AS UUID)
""")

_GET_BY_FACTOR_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM currencies
    WHERE factor = :factor
    ORDER BY code ASC
""")

_SEARCH_BY_NAME_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM currencies
    WHERE description ILIKE :pattern
    ORDER BY code ASC
""")

_GET_BY_CODES_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM currencies
    WHERE code IN :codes
    ORDER BY code ASC
""").bindparams(bindparam("codes", expanding=True))

_COUNT_SQL = text("SELECT COUNT(*) FROM currencies")

# ---------------------------------------------------------------------------
# Row mapper + error translation
# ---------------------------------------------------------------------------


def _row_to_currency(row: Any) -> Currency:
    return Currency(
        id=str(row.id),
        code=row.code,
        description=row.description,
        amount_display_format=row.amount_display_format,
        html_encoded_symbol=row.html_encoded_symbol,
        factor=row.factor,
        created_by=str(row.created_by) if row.created_by is not None else None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _write_params(currency: Currency) -> dict[str, Any]:
    return {
        "id": currency.id,
        "code": currency.code,
        "description": currency.description,
        "amount_display_format": currency.amount_display_format,
        "html_encoded_symbol": currency.html_encoded_symbol,
        "factor": currency.factor,
        "created_by": currency.created_by,
    }


def _is_unique_violation(exc: IntegrityError) -> bool:
    return getattr(exc.orig, "sqlstate", None) == _UNIQUE_VIOLATION


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (TypeError, ValueError):
        return False
    return True


@contextmanager
def _store_errors(action: str, code: str | None = None) -> Iterator[None]:
    """Translate driver/SQLAlchemy failures into the domain error kinds."""
    try:
        yield
    except IntegrityError as exc:
        if code is not None and _is_unique_violation(exc):
            raise CurrencyCodeExistsError(code) from exc
        raise StoreError(f"{action}: {exc.orig}") from exc
    except (SQLAlchemyError, OSError, TimeoutError) as exc:
        raise StoreError(f"{action}: {exc}") from exc


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CurrencyRepository:
    """Concrete repository: raw SQL against the currencies table."""

    async def create(self, db: AsyncSession, currency: Currency) -> Currency:
        if currency.id is None:
            currency.id = str(uuid.uuid4())
        with _store_errors("create currency", code=currency.code):
            result = await db.execute(_INSERT_CURRENCY_SQL, _write_params(currency))
            row = result.fetchone()
        return _row_to_currency(row)

    async def get_by_id(self, db: AsyncSession, currency_id: str) -> Currency:
        if not _is_uuid(currency_id):
            raise CurrencyNotFoundError(currency_id)
        with _store_errors("get currency by id"):
            result = await db.execute(_GET_BY_ID_SQL, {"id": currency_id})
            row = result.fetchone()
        if row is None:
            raise CurrencyNotFoundError(currency_id)
        return _row_to_currency(row)

    async def get_by_code(self, db: AsyncSession, code: str) -> Currency:
        with _store_errors("get currency by code"):
            result = await db.execute(_GET_BY_CODE_SQL, {"code": code})
            row = result.fetchone()
        if row is None:
            raise CurrencyNotFoundError(code)
        return _row_to_currency(row)

    async def get_all(
        self, db: AsyncSession, limit: int, offset: int
    ) -> list[Currency]:
        with _store_errors("list currencies"):
            result = await db.execute(
                _LIST_CURRENCIES_SQL,
                {
                    "limit": limit if limit > 0 else None,
                    "offset": offset if offset > 0 else None,
                },
            )
            rows = result.fetchall()
        return [_row_to_currency(row) for row in rows]

    async def update(self, db: AsyncSession, currency: Currency) -> Currency:
        if currency.id is None or not _is_uuid(currency.id):
            raise CurrencyNotFoundError(str(currency.id))
        with _store_errors("update currency", code=currency.code):
            result = await db.execute(_UPDATE_CURRENCY_SQL, _write_params(currency))
            row = result.fetchone()
        if row is None:
            raise CurrencyNotFoundError(currency.id)
        return _row_to_currency(row)

    async def delete(self, db: AsyncSession, currency_id: str) -> None:
        if not _is_uuid(currency_id):
            raise CurrencyNotFoundError(currency_id)
        with _store_errors("delete currency"):
            result = await db.execute(_DELETE_CURRENCY_SQL, {"id": currency_id})
        if result.rowcount == 0:
            raise CurrencyNotFoundError(currency_id)

    async def get_by_factor(self, db: AsyncSession, factor: int) -> list[Currency]:
        with _store_errors("get currencies by factor"):
            result = await db.execute(_GET_BY_FACTOR_SQL, {"factor": factor})
            rows = result.fetchall()
        return [_row_to_currency(row) for row in rows]

    async def search_by_name(self, db: AsyncSession, name: str) -> list[Currency]:
        with _store_errors("search currencies"):
            result = await db.execute(_SEARCH_BY_NAME_SQL, {"pattern": f"%{name}%"})
            rows = result.fetchall()
        return [_row_to_currency(row) for row in rows]

    async def get_by_codes(
        self, db: AsyncSession, codes: list[str]
    ) -> list[Currency]:
        if not codes:
            return []
        with _store_errors("get currencies by codes"):
            result = await db.execute(_GET_BY_CODES_SQL, {"codes": list(codes)})
            rows = result.fetchall()
        return [_row_to_currency(row) for row in rows]

    async def create_batch(
        self, db: AsyncSession, currencies: list[Currency]
    ) -> list[Currency]:
        """Insert all rows inside one SAVEPOINT; a single failure undoes the lot."""
        if not currencies:
            return []
        created: list[Currency] = []
        with _store_errors("create currency batch"):
            async with db.begin_nested():
                for currency in currencies:
                    if currency.id is None:
                        currency.id = str(uuid.uuid4())
                    with _store_errors("create currency batch", code=currency.code):
                        result = await db.execute(
                            _INSERT_CURRENCY_SQL, _write_params(currency)
                        )
                        row = result.fetchone()
                    created.append(_row_to_currency(row))
        return created

    async def count(self, db: AsyncSession) -> int:
        with _store_errors("count currencies"):
            result = await db.execute(_COUNT_SQL)
            return int(result.scalar_one())
