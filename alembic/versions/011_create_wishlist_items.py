"""011: create wishlist_items table

Revision ID: 011
Revises: 010
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "011"
down_revision: Union[str, None] = "010"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wishlist_items (
            buyer_id        VARCHAR(64)     NOT NULL,
            listing_id      VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (buyer_id, listing_id)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wishlist_items CASCADE;")
