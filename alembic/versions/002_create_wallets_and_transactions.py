"""002: wallets + transactions

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wallets (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         VARCHAR(64)     NOT NULL,
            currency        VARCHAR(20)     NOT NULL,
            type            VARCHAR(20)     NOT NULL DEFAULT 'SPOT',
            balance         NUMERIC(30, 15) NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_wallets_user_currency_type UNIQUE (user_id, currency, type),
            CONSTRAINT ck_wallets_balance_gte_0      CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_wallets_updated_at
            BEFORE UPDATE ON wallets
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)

    op.execute("""
        CREATE TABLE transactions (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         VARCHAR(64)     NOT NULL,
            wallet_id       UUID            NOT NULL REFERENCES wallets (id),
            type            VARCHAR(30)     NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            amount          NUMERIC(30, 15) NOT NULL,
            fee             NUMERIC(30, 15) NOT NULL DEFAULT 0,
            description     VARCHAR(1000),
            reference_id    VARCHAR(64)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_transactions_reference_id UNIQUE (reference_id),
            CONSTRAINT ck_transactions_type         CHECK (type IN ('BINARY_ORDER')),
            CONSTRAINT ck_transactions_status       CHECK (status IN ('PENDING', 'COMPLETED')),
            CONSTRAINT ck_transactions_amount_gt_0  CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_transactions_wallet ON transactions (wallet_id);")
    op.execute("""
        CREATE TRIGGER trg_transactions_updated_at
            BEFORE UPDATE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE transactions IS 'One row per non-demo binary order; deleted on cancellation';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
