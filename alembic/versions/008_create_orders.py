"""008: create orders and order_items tables

Revision ID: 008
Revises: 007
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(64)     PRIMARY KEY,
            buyer_id            VARCHAR(64)     NOT NULL,
            vendor_id           VARCHAR(64)     NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'pending',
            subtotal            BIGINT          NOT NULL,
            shipping            BIGINT          NOT NULL DEFAULT 0,
            tax                 BIGINT          NOT NULL DEFAULT 0,
            total               BIGINT          NOT NULL,
            currency            VARCHAR(3)      NOT NULL DEFAULT 'UGX',
            shipping_address    VARCHAR(500),
            notes               VARCHAR(1000),
            cancel_reason       VARCHAR(500),
            tracking_number     VARCHAR(100),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            paid_at             TIMESTAMPTZ,
            processing_at       TIMESTAMPTZ,
            shipped_at          TIMESTAMPTZ,
            delivered_at        TIMESTAMPTZ,
            cancelled_at        TIMESTAMPTZ,
            disputed_at         TIMESTAMPTZ,
            refunded_at         TIMESTAMPTZ,
            CONSTRAINT ck_orders_status CHECK (
                status IN ('pending', 'paid', 'processing', 'shipped', 'delivered',
                           'cancelled', 'disputed', 'refunded')
            ),
            CONSTRAINT ck_orders_amounts_gte_0 CHECK (
                subtotal >= 0 AND shipping >= 0 AND tax >= 0
            ),
            CONSTRAINT ck_orders_total CHECK (total = subtotal + shipping + tax)
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, (CAST(id AS BIGINT)) DESC);")
    op.execute("CREATE INDEX idx_orders_vendor ON orders (vendor_id, (CAST(id AS BIGINT)) DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE order_items (
            id              BIGSERIAL       PRIMARY KEY,
            order_id        VARCHAR(64)     NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
            listing_id      VARCHAR(64)     NOT NULL,
            title           VARCHAR(255)    NOT NULL,
            quantity        INTEGER         NOT NULL,
            unit_price      BIGINT          NOT NULL,
            line_total      BIGINT          NOT NULL,
            CONSTRAINT ck_order_items_quantity_gt_0 CHECK (quantity > 0),
            CONSTRAINT ck_order_items_line_total    CHECK (line_total = unit_price * quantity)
        );
    """)
    op.execute("CREATE INDEX idx_order_items_order ON order_items (order_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS order_items CASCADE;")
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
