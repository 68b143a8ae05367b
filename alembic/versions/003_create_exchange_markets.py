"""003: exchange_markets

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE exchange_markets (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            currency        VARCHAR(20)     NOT NULL,
            pair            VARCHAR(20)     NOT NULL,
            status          BOOLEAN         NOT NULL DEFAULT TRUE,
            metadata        JSONB,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_exchange_markets_currency_pair UNIQUE (currency, pair)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_exchange_markets_updated_at
            BEFORE UPDATE ON exchange_markets
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON COLUMN exchange_markets.metadata IS "
        "'ccxt market structure; limits.amount.min/max bound binary order amounts';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS exchange_markets CASCADE;")
