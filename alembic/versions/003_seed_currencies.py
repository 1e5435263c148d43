"""003: seed reference currencies

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_SEED_CREATED_BY = "1609b0e1-30c4-402c-a76e-8f5b4d6cfc24"

# (code, description, amount_display_format, html_encoded_symbol, factor)
_SEED_CURRENCIES = [
    ("AED", "United Arab Emirates Dirham", "###,###.##", "&#x62f;&#x2e;&#x625;", 100),
    ("MAD", "Moroccan Dirham", "###,###.##", "&#77;&#65;&#68;", 100),
    ("MUR", "Mauritian Rupee", "###,###.##", "&#8360;", 100),
    ("XCD", "Eastern Caribbean Dollar", "###,###.##", "&#36;", 100),
    ("CLP", "Chilean Peso", "###,###", "&#36;", 1),
    ("ZAR", "South African Rand", "###,###.##", "&#82;", 100),
    ("SEK", "Swedish Krona", "###,###.##", "&#107;&#114;", 100),
    ("KES", "Kenyan Shilling", "###,###.##", "&#75;&#83;&#104;", 100),
    ("CAD", "Canadian Dollar", "###,###.##", "&#36;", 100),
    ("GBP", "British Pound", "###,###.##", "&#163;", 100),
    ("OMR", "Omani Rial", "###,###.###", "&#65020;", 1000),
    ("RON", "Romanian Leu", "###,###.##", "&#108;&#101;&#105;", 100),
    ("NOK", "Norwegian Krone", "###,###.##", "&#107;&#114;", 100),
    ("SAR", "Saudi Riyal", "###,###.##", "&#65020;", 100),
    ("JPY", "Japanese Yen", "###,###", "&#165;", 1),
    ("DKK", "Danish Krone", "###,###.##", "&#107;&#114;", 100),
    ("HUF", "Hungarian Forint", "###,###.##", "&#70;&#116;", 100),
    ("IDR", "Indonesian Rupiah", "###,###.##", "&#36;", 100),
    ("USD", "United States Dollar", "###,###.##", "&#36;", 100),
    ("EUR", "Euro", "###,###.##", "&#8364;", 100),
    ("CHF", "Swiss Franc", "###,###.##", "&#67;&#72;&#70;", 100),
    ("CNY", "Chinese Yuan", "###,###.##", "&#165;", 100),
    ("INR", "Indian Rupee", "###,###.##", "&#8377;", 100),
    ("TRY", "Turkish Lira", "###,###.##", "&#8378;", 100),
    ("AUD", "Australian Dollar", "###,###.##", "&#36;", 100),
]


def upgrade() -> None:
    insert = sa.text("""
        INSERT INTO currencies
            (code, description, amount_display_format, html_encoded_symbol, factor, created_by)
        VALUES
            (:code, :description, :fmt, :symbol, :factor, CAST(:created_by AS UUID))
        ON CONFLICT (code) DO NOTHING
    """)
    conn = op.get_bind()
    for code, description, fmt, symbol, factor in _SEED_CURRENCIES:
        conn.execute(
            insert,
            {
                "code": code,
                "description": description,
                "fmt": fmt,
                "symbol": symbol,
                "factor": factor,
                "created_by": _SEED_CREATED_BY,
            },
        )


def downgrade() -> None:
    codes = ", ".join(f"'{code}'" for code, *_ in _SEED_CURRENCIES)
    op.execute(f"DELETE FROM currencies WHERE code IN ({codes});")
