"""004: create wallets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wallets (
            id              VARCHAR(64)     PRIMARY KEY,
            owner_id        VARCHAR(64)     NOT NULL,
            balance         BIGINT          NOT NULL DEFAULT 0,
            locked_balance  BIGINT          NOT NULL DEFAULT 0,
            currency        VARCHAR(3)      NOT NULL DEFAULT 'UGX',
            version         BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_wallets_owner_id          UNIQUE (owner_id),
            CONSTRAINT ck_wallets_balance_gte_0     CHECK (balance >= 0),
            CONSTRAINT ck_wallets_locked_gte_0      CHECK (locked_balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_wallets_updated_at
            BEFORE UPDATE ON wallets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE wallets IS 'One wallet per user; amounts in minor units';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
