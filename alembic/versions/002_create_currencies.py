"""002: create currencies table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE currencies (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            code                    VARCHAR(3)      NOT NULL,
            description             VARCHAR(255)    NOT NULL,
            amount_display_format   VARCHAR(50)     NOT NULL DEFAULT '###,###.##',
            html_encoded_symbol     VARCHAR(50),
            factor                  INTEGER         NOT NULL DEFAULT 100,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            created_by              UUID            NOT NULL,
            CONSTRAINT uq_currencies_code       UNIQUE (code),
            CONSTRAINT ck_currencies_code_len   CHECK (char_length(code) = 3),
            CONSTRAINT ck_currencies_code_upper CHECK (code = UPPER(code)),
            CONSTRAINT ck_currencies_factor_gt_0 CHECK (factor > 0)
        );
    """)
    op.execute("CREATE INDEX idx_currencies_created_at ON currencies (created_at);")
    op.execute("""
        CREATE TRIGGER trg_currencies_updated_at
            BEFORE UPDATE ON currencies
            FOR EACH ROW EXECUTE FUNCTION fn_set_updated_at();
    """)
    op.execute("COMMENT ON TABLE currencies IS 'Currency master data with display formatting and symbols';")
    op.execute("COMMENT ON COLUMN currencies.code IS 'ISO 4217 currency code';")
    op.execute(
        "COMMENT ON COLUMN currencies.factor IS "
        "'Minor-unit multiplier (100 = 2 decimal places, 1000 = 3 decimal places)';"
    )
    op.execute("COMMENT ON COLUMN currencies.html_encoded_symbol IS 'HTML encoded currency symbol for display';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS currencies CASCADE;")
