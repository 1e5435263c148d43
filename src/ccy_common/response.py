"""Unified API response wrapper.

All API endpoints return this format (None fields are omitted on the wire):
{
    "success": true,
    "data": { ... },
    "error": "...",          // only on failure
    "message": "...",
    "timestamp": "...",
    "request_id": "..."
}

The list endpoint adds "pagination": {"page", "limit", "offset", "total"}.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    success: bool = True
    data: Any = None
    error: str | None = None
    message: str | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


class Pagination(BaseModel):
    page: int
    limit: int
    offset: int
    total: int | None = None


class PaginatedResponse(ApiResponse):
    pagination: Pagination


def success_response(data: Any = None, message: str | None = None) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message)


def error_response(error: str, message: str | None = None) -> ApiResponse:
    return ApiResponse(success=False, error=error, message=message)
