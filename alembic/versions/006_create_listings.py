"""006: create listings table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id              VARCHAR(64)     PRIMARY KEY,
            vendor_id       VARCHAR(64)     NOT NULL,
            title           VARCHAR(255)    NOT NULL,
            description     TEXT            NOT NULL DEFAULT '',
            category        VARCHAR(100)    NOT NULL,
            condition       VARCHAR(20)     NOT NULL DEFAULT 'new',
            price           BIGINT          NOT NULL,
            stock           INTEGER         NOT NULL DEFAULT 0,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            view_count      BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_price_gt_0   CHECK (price > 0),
            CONSTRAINT ck_listings_stock_gte_0  CHECK (stock >= 0),
            CONSTRAINT ck_listings_condition    CHECK (
                condition IN ('new', 'used', 'refurbished')
            )
        );
    """)
    op.execute("CREATE INDEX idx_listings_vendor ON listings (vendor_id, (CAST(id AS BIGINT)) DESC);")
    op.execute("""
        CREATE INDEX idx_listings_browse
        ON listings (category, created_at DESC)
        WHERE is_active;
    """)
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
