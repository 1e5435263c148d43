"""Domain models for ccy_currency: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_FACTOR = 100  # 2 decimal places
DEFAULT_AMOUNT_DISPLAY_FORMAT = "###,###.##"
# No auth context yet: every write is attributed to this placeholder principal.
DEFAULT_CREATED_BY = "1609b0e1-30c4-402c-a76e-8f5b4d6cfc24"
CODE_LENGTH = 3


@dataclass
class Currency:
    code: str
    description: str
    amount_display_format: str = ""
    html_encoded_symbol: str | None = None
    factor: int = 0
    id: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
