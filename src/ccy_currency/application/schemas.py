"""Pydantic request/response schemas for ccy_currency.

All responses are wrapped in ApiResponse at the router layer.
Empty strings and zero/negative factors in UpdateCurrencyRequest mean
"leave as is"; a factor cannot be reset through an update.
"""

from dataclasses import replace

from pydantic import BaseModel, Field

from src.ccy_currency.domain.models import Currency

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateCurrencyRequest(BaseModel):
    code: str = Field(..., min_length=3, max_length=3)
    description: str = Field(..., min_length=1, max_length=255)
    amount_display_format: str = Field("", max_length=50)
    html_encoded_symbol: str = Field("", max_length=50)
    factor: int = Field(0, ge=0)

    def to_domain(self) -> Currency:
        return Currency(
            code=self.code.upper(),
            description=self.description,
            amount_display_format=self.amount_display_format,
            html_encoded_symbol=self.html_encoded_symbol or None,
            factor=self.factor,
        )


class UpdateCurrencyRequest(BaseModel):
    description: str = Field("", max_length=255)
    amount_display_format: str = Field("", max_length=50)
    html_encoded_symbol: str = Field("", max_length=50)
    factor: int = 0

    def apply_to(self, currency: Currency) -> Currency:
        """Return a copy of ``currency`` with only the provided fields overwritten."""
        changes: dict[str, object] = {}
        if self.description:
            changes["description"] = self.description
        if self.amount_display_format:
            changes["amount_display_format"] = self.amount_display_format
        if self.html_encoded_symbol:
            changes["html_encoded_symbol"] = self.html_encoded_symbol
        if self.factor > 0:
            changes["factor"] = self.factor
        return replace(currency, **changes)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class CurrencyOut(BaseModel):
    id: str | None
    code: str
    description: str
    amount_display_format: str
    html_encoded_symbol: str | None
    factor: int
    created_at: str | None
    updated_at: str | None
    created_by: str | None

    @classmethod
    def from_domain(cls, c: Currency) -> "CurrencyOut":
        return cls(
            id=c.id,
            code=c.code,
            description=c.description,
            amount_display_format=c.amount_display_format,
            html_encoded_symbol=c.html_encoded_symbol,
            factor=c.factor,
            created_at=c.created_at.isoformat() if c.created_at else None,
            updated_at=c.updated_at.isoformat() if c.updated_at else None,
            created_by=c.created_by,
        )
