"""007: create cart_items table

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE cart_items (
            buyer_id        VARCHAR(64)     NOT NULL,
            listing_id      VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
            quantity        INTEGER         NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (buyer_id, listing_id),
            CONSTRAINT ck_cart_items_quantity_gt_0 CHECK (quantity > 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_cart_items_updated_at
            BEFORE UPDATE ON cart_items
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS cart_items CASCADE;")
