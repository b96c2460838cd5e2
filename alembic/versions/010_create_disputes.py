"""010: create disputes and dispute_evidence tables

Revision ID: 010
Revises: 009
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "010"
down_revision: Union[str, None] = "009"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE disputes (
            id                  VARCHAR(64)     PRIMARY KEY,
            order_id            VARCHAR(64)     NOT NULL REFERENCES orders (id),
            buyer_id            VARCHAR(64)     NOT NULL,
            vendor_id           VARCHAR(64)     NOT NULL,
            reason              VARCHAR(255)    NOT NULL,
            description         TEXT            NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'open',
            outcome             VARCHAR(20),
            resolution_note     VARCHAR(2000),
            resolved_by         VARCHAR(64),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            resolved_at         TIMESTAMPTZ,
            CONSTRAINT uq_disputes_order_id     UNIQUE (order_id),
            CONSTRAINT ck_disputes_status       CHECK (status IN ('open', 'under_review', 'resolved')),
            CONSTRAINT ck_disputes_outcome      CHECK (outcome IS NULL OR outcome IN ('refund', 'release')),
            CONSTRAINT ck_disputes_resolved     CHECK ((status = 'resolved') = (outcome IS NOT NULL))
        );
    """)
    op.execute("CREATE INDEX idx_disputes_buyer ON disputes (buyer_id, (CAST(id AS BIGINT)) DESC);")
    op.execute("CREATE INDEX idx_disputes_vendor ON disputes (vendor_id, (CAST(id AS BIGINT)) DESC);")
    op.execute("""
        CREATE TRIGGER trg_disputes_updated_at
            BEFORE UPDATE ON disputes
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE dispute_evidence (
            id              BIGSERIAL       PRIMARY KEY,
            dispute_id      VARCHAR(64)     NOT NULL REFERENCES disputes (id) ON DELETE CASCADE,
            submitted_by    VARCHAR(64)     NOT NULL,
            kind            VARCHAR(20)     NOT NULL DEFAULT 'text',
            content         TEXT            NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_dispute_evidence_kind CHECK (kind IN ('text', 'image', 'document'))
        );
    """)
    op.execute("CREATE INDEX idx_dispute_evidence_dispute ON dispute_evidence (dispute_id, id);")
    op.execute("COMMENT ON TABLE dispute_evidence IS 'Append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS dispute_evidence CASCADE;")
    op.execute("DROP TABLE IF EXISTS disputes CASCADE;")
