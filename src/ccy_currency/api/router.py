"""ccy_currency REST endpoints.

GET    /currencies          list (page/limit), or search / factor filter
GET    /currencies/{code}   single currency, cache-aside
POST   /currencies          create
PUT    /currencies/{code}   partial update (empty / zero fields are no-ops)
DELETE /currencies/{code}   hard delete

Path codes are case-insensitive and uppercased before use.
Error → status mapping lives in the app-level exception handlers.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ccy_common.database import get_db_session
from src.ccy_common.errors import InvalidCurrencyCodeError, StoreError
from src.ccy_common.response import (
    ApiResponse,
    PaginatedResponse,
    Pagination,
    success_response,
)
from src.ccy_currency.application.schemas import (
    CreateCurrencyRequest,
    CurrencyOut,
    UpdateCurrencyRequest,
)
from src.ccy_currency.application.service import CurrencyApplicationService
from src.ccy_currency.domain.models import CODE_LENGTH

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/currencies", tags=["currencies"])

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100


def get_currency_service(request: Request) -> CurrencyApplicationService:
    """Service instance built in the app lifespan."""
    return request.app.state.currency_service


ServiceDep = Annotated[CurrencyApplicationService, Depends(get_currency_service)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _normalize_code(code: str) -> str:
    code = code.upper()
    if len(code) != CODE_LENGTH:
        raise InvalidCurrencyCodeError(code)
    return code


def _query_int(raw: str, default: int) -> int:
    """Unparseable query values fall back to the default."""
    try:
        return int(raw)
    except ValueError:
        return default


@router.get("", response_model_exclude_none=True)
async def list_currencies(
    request: Request,
    service: ServiceDep,
    db: DbDep,
    page: str = Query("1", description="1-based page number"),
    limit: str = Query(str(DEFAULT_PAGE_LIMIT), description="Clamped to [1, 100]"),
    search: str = Query("", description="Substring match on description; no paging"),
    factor: str = Query("0", description="Exact factor match; no paging"),
) -> PaginatedResponse:
    page_no = max(_query_int(page, 1), 1)
    page_size = min(max(_query_int(limit, DEFAULT_PAGE_LIMIT), 1), MAX_PAGE_LIMIT)
    offset = (page_no - 1) * page_size
    factor_value = _query_int(factor, 0)

    total: int | None = None
    if search:
        currencies = await service.search_currencies(db, search)
    elif factor_value > 0:
        currencies = await service.get_currencies_by_factor(db, factor_value)
    else:
        currencies = await service.list_currencies(db, page_size, offset)
        try:
            total = await service.get_currency_count(db)
        except StoreError as exc:
            logger.warning("Currency count unavailable, omitting total: %s", exc.message)

    return PaginatedResponse(
        data=[CurrencyOut.from_domain(c).model_dump() for c in currencies],
        pagination=Pagination(page=page_no, limit=page_size, offset=offset, total=total),
        request_id=_get_request_id(request),
    )


@router.get("/{code}", response_model_exclude_none=True)
async def get_currency(
    code: str,
    request: Request,
    service: ServiceDep,
    db: DbDep,
) -> ApiResponse:
    currency = await service.get_currency_by_code(db, _normalize_code(code))
    resp = success_response(
        CurrencyOut.from_domain(currency).model_dump(),
        "Currency retrieved successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
async def create_currency(
    body: CreateCurrencyRequest,
    request: Request,
    service: ServiceDep,
    db: DbDep,
) -> ApiResponse:
    currency = await service.create_currency(db, body.to_domain())
    resp = success_response(
        CurrencyOut.from_domain(currency).model_dump(),
        "Currency created successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/{code}", response_model_exclude_none=True)
async def update_currency(
    code: str,
    body: UpdateCurrencyRequest,
    request: Request,
    service: ServiceDep,
    db: DbDep,
) -> ApiResponse:
    existing = await service.get_currency_by_code(db, _normalize_code(code))
    currency = await service.update_currency(db, body.apply_to(existing))
    resp = success_response(
        CurrencyOut.from_domain(currency).model_dump(),
        "Currency updated successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.delete("/{code}", response_model_exclude_none=True)
async def delete_currency(
    code: str,
    request: Request,
    service: ServiceDep,
    db: DbDep,
) -> ApiResponse:
    existing = await service.get_currency_by_code(db, _normalize_code(code))
    await service.delete_currency(db, existing.id)
    resp = success_response(message="Currency deleted successfully")
    resp.request_id = _get_request_id(request)
    return resp
