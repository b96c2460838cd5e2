"""003: create vendor_profiles table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE vendor_profiles (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            vendor_type     VARCHAR(20)     NOT NULL,
            business_name   VARCHAR(255)    NOT NULL,
            country         VARCHAR(100)    NOT NULL DEFAULT 'Uganda',
            city            VARCHAR(100)    NOT NULL DEFAULT 'Kampala',
            vetting_status  VARCHAR(20)     NOT NULL DEFAULT 'pending',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_vendor_profiles_user_id   UNIQUE (user_id),
            CONSTRAINT ck_vendor_profiles_type      CHECK (
                vendor_type IN ('local_retail', 'china_supplier')
            ),
            CONSTRAINT ck_vendor_profiles_vetting   CHECK (
                vetting_status IN ('pending', 'approved', 'rejected')
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_vendor_profiles_updated_at
            BEFORE UPDATE ON vendor_profiles
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS vendor_profiles CASCADE;")
