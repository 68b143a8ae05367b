"""004: binary_orders

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE binary_orders (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id             VARCHAR(64)     NOT NULL,
            symbol              VARCHAR(41)     NOT NULL,
            type                VARCHAR(20)     NOT NULL,
            side                VARCHAR(10)     NOT NULL,
            status              VARCHAR(10)     NOT NULL DEFAULT 'PENDING',
            price               NUMERIC(30, 15) NOT NULL,
            profit              NUMERIC(30, 15) NOT NULL DEFAULT 0,
            amount              NUMERIC(30, 15) NOT NULL,
            is_demo             BOOLEAN         NOT NULL DEFAULT FALSE,
            closed_at           TIMESTAMPTZ     NOT NULL,
            barrier             NUMERIC(30, 15),
            strike_price        NUMERIC(30, 15),
            payout_per_point    NUMERIC(30, 15),
            duration_type       VARCHAR(10)     NOT NULL DEFAULT 'TIME',
            close_price         NUMERIC(30, 15),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_binary_orders_type CHECK (
                type IN ('RISE_FALL', 'HIGHER_LOWER', 'TOUCH_NO_TOUCH', 'CALL_PUT', 'TURBO')
            ),
            CONSTRAINT ck_binary_orders_side CHECK (
                side IN ('RISE', 'FALL', 'HIGHER', 'LOWER', 'TOUCH', 'NO_TOUCH',
                         'CALL', 'PUT', 'UP', 'DOWN')
            ),
            CONSTRAINT ck_binary_orders_status CHECK (
                status IN ('PENDING', 'WIN', 'LOSS', 'DRAW', 'CANCELED')
            ),
            CONSTRAINT ck_binary_orders_duration_type CHECK (duration_type IN ('TIME', 'TICKS')),
            CONSTRAINT ck_binary_orders_amount_gt_0   CHECK (amount > 0),
            CONSTRAINT ck_binary_orders_price_gt_0    CHECK (price > 0)
        );
    """)
    op.execute("CREATE INDEX idx_binary_orders_user_created ON binary_orders (user_id, created_at DESC, id DESC);")
    op.execute("""
        CREATE INDEX idx_binary_orders_pending
        ON binary_orders (closed_at)
        WHERE status = 'PENDING';
    """)
    op.execute("""
        CREATE TRIGGER trg_binary_orders_updated_at
            BEFORE UPDATE ON binary_orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE binary_orders IS 'Append-only binary option wagers; one transition out of PENDING';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS binary_orders CASCADE;")
