"""DisputeRepository: raw SQL over disputes and dispute_evidence.

dispute_evidence is append-only: rows are inserted, never updated or deleted.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.errors import InternalError
from src.bm_common.pagination import id_as_bigint
from src.bm_dispute.domain.models import Dispute, Evidence

_COLUMNS = (
    "id, order_id, buyer_id, vendor_id, reason, description, status, outcome, "
    "resolution_note, resolved_by, created_at, updated_at, resolved_at"
)

_INSERT_SQL = text(f"""
    INSERT INTO disputes (id, order_id, buyer_id, vendor_id, reason, description, status)
    VALUES (:id, :order_id, :buyer_id, :vendor_id, :reason, :description, :status)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM disputes WHERE id = :dispute_id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM disputes WHERE id = :dispute_id FOR UPDATE")

_GET_BY_ORDER_SQL = text(f"SELECT {_COLUMNS} FROM disputes WHERE order_id = :order_id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM disputes
    WHERE (CAST(:user_id AS TEXT) IS NULL
           OR buyer_id = CAST(:user_id AS TEXT)
           OR vendor_id = CAST(:user_id AS TEXT))
      AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR CAST(id AS BIGINT) < :cursor_id)
    ORDER BY CAST(id AS BIGINT) DESC
    LIMIT :limit
""")

_EVIDENCE_SQL = text("""
    SELECT id, dispute_id, submitted_by, kind, content, created_at
    FROM dispute_evidence
    WHERE dispute_id = :dispute_id
    ORDER BY id
""")

_INSERT_EVIDENCE_SQL = text("""
    INSERT INTO dispute_evidence (dispute_id, submitted_by, kind, content)
    VALUES (:dispute_id, :submitted_by, :kind, :content)
    RETURNING id, dispute_id, submitted_by, kind, content, created_at
""")

_UPDATE_STATUS_SQL = text(f"""
    UPDATE disputes SET status = :to_status, updated_at = NOW()
    WHERE id = :dispute_id AND status = :from_status
    RETURNING {_COLUMNS}
""")

_RESOLVE_SQL = text(f"""
    UPDATE disputes
    SET status = 'resolved',
        outcome = :outcome,
        resolution_note = :resolution_note,
        resolved_by = :resolved_by,
        resolved_at = NOW(),
        updated_at = NOW()
    WHERE id = :dispute_id AND status <> 'resolved'
    RETURNING {_COLUMNS}
""")


def _row_to_dispute(row: object) -> Dispute:
    return Dispute(
        id=row.id,  # type: ignore[attr-defined]
        order_id=row.order_id,  # type: ignore[attr-defined]
        buyer_id=row.buyer_id,  # type: ignore[attr-defined]
        vendor_id=row.vendor_id,  # type: ignore[attr-defined]
        reason=row.reason,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        resolution_note=row.resolution_note,  # type: ignore[attr-defined]
        resolved_by=row.resolved_by,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
    )


def _row_to_evidence(row: object) -> Evidence:
    return Evidence(
        id=row.id,  # type: ignore[attr-defined]
        dispute_id=row.dispute_id,  # type: ignore[attr-defined]
        submitted_by=row.submitted_by,  # type: ignore[attr-defined]
        kind=row.kind,  # type: ignore[attr-defined]
        content=row.content,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class DisputeRepository:
    async def _with_evidence(self, db: AsyncSession, dispute: Dispute) -> Dispute:
        rows = (await db.execute(_EVIDENCE_SQL, {"dispute_id": dispute.id})).fetchall()
        dispute.evidence = [_row_to_evidence(row) for row in rows]
        return dispute

    async def save(self, db: AsyncSession, dispute: Dispute) -> Dispute:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "id": dispute.id,
                    "order_id": dispute.order_id,
                    "buyer_id": dispute.buyer_id,
                    "vendor_id": dispute.vendor_id,
                    "reason": dispute.reason,
                    "description": dispute.description,
                    "status": dispute.status,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Dispute insert returned no rows")
        return _row_to_dispute(row)

    async def get_by_id(self, db: AsyncSession, dispute_id: str) -> Dispute | None:
        row = (await db.execute(_GET_SQL, {"dispute_id": dispute_id})).fetchone()
        return await self._with_evidence(db, _row_to_dispute(row)) if row else None

    async def get_for_update(self, db: AsyncSession, dispute_id: str) -> Dispute | None:
        row = (await db.execute(_GET_FOR_UPDATE_SQL, {"dispute_id": dispute_id})).fetchone()
        return _row_to_dispute(row) if row else None

    async def get_by_order(self, db: AsyncSession, order_id: str) -> Dispute | None:
        row = (await db.execute(_GET_BY_ORDER_SQL, {"order_id": order_id})).fetchone()
        return _row_to_dispute(row) if row else None

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Dispute]:
        rows = (
            await db.execute(
                _LIST_SQL,
                {
                    "user_id": user_id,
                    "status": status,
                    "cursor_id": id_as_bigint(cursor_id),
                    "limit": limit,
                },
            )
        ).fetchall()
        return [_row_to_dispute(row) for row in rows]

    async def add_evidence(
        self,
        db: AsyncSession,
        dispute_id: str,
        submitted_by: str,
        kind: str,
        content: str,
    ) -> Evidence:
        row = (
            await db.execute(
                _INSERT_EVIDENCE_SQL,
                {
                    "dispute_id": dispute_id,
                    "submitted_by": submitted_by,
                    "kind": kind,
                    "content": content,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Evidence insert returned no rows")
        return _row_to_evidence(row)

    async def update_status(
        self, db: AsyncSession, dispute_id: str, from_status: str, to_status: str
    ) -> Dispute | None:
        row = (
            await db.execute(
                _UPDATE_STATUS_SQL,
                {"dispute_id": dispute_id, "from_status": from_status, "to_status": to_status},
            )
        ).fetchone()
        return _row_to_dispute(row) if row else None

    async def mark_resolved(
        self,
        db: AsyncSession,
        dispute_id: str,
        outcome: str,
        resolution_note: str | None,
        resolved_by: str,
    ) -> Dispute | None:
        row = (
            await db.execute(
                _RESOLVE_SQL,
                {
                    "dispute_id": dispute_id,
                    "outcome": outcome,
                    "resolution_note": resolution_note,
                    "resolved_by": resolved_by,
                },
            )
        ).fetchone()
        return _row_to_dispute(row) if row else None
