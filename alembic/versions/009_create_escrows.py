"""009: create escrows table

Revision ID: 009
Revises: 008
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE escrows (
            id                  VARCHAR(64)     PRIMARY KEY,
            order_id            VARCHAR(64)     NOT NULL REFERENCES orders (id),
            buyer_wallet_id     VARCHAR(64)     NOT NULL REFERENCES wallets (id),
            amount              BIGINT          NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'held',
            frozen              BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            resolved_at         TIMESTAMPTZ,
            CONSTRAINT uq_escrows_order_id      UNIQUE (order_id),
            CONSTRAINT ck_escrows_amount_gt_0   CHECK (amount > 0),
            CONSTRAINT ck_escrows_status        CHECK (status IN ('held', 'released', 'refunded')),
            CONSTRAINT ck_escrows_resolved_at   CHECK ((status = 'held') = (resolved_at IS NULL))
        );
    """)
    op.execute("CREATE INDEX idx_escrows_held_wallet ON escrows (buyer_wallet_id) WHERE status = 'held';")
    op.execute("""
        CREATE TRIGGER trg_escrows_updated_at
            BEFORE UPDATE ON escrows
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS escrows CASCADE;")
