"""EscrowRepository: raw SQL over the escrows table.

Resolution is UPDATE ... WHERE status = 'held' RETURNING, so of two
concurrent release/refund calls exactly one gets a row back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.errors import InternalError
from src.bm_escrow.domain.models import Escrow

_COLUMNS = (
    "id, order_id, buyer_wallet_id, amount, status, frozen, created_at, updated_at, resolved_at"
)

_INSERT_SQL = text(f"""
    INSERT INTO escrows (id, order_id, buyer_wallet_id, amount, status, frozen)
    VALUES (:id, :order_id, :buyer_wallet_id, :amount, :status, :frozen)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM escrows WHERE order_id = :order_id")

_GET_FOR_UPDATE_SQL = text(
    f"SELECT {_COLUMNS} FROM escrows WHERE order_id = :order_id FOR UPDATE"
)

_RESOLVE_SQL = text(f"""
    UPDATE escrows
    SET status = :status, frozen = FALSE, resolved_at = NOW(), updated_at = NOW()
    WHERE order_id = :order_id AND status = 'held'
    RETURNING {_COLUMNS}
""")

_SET_FROZEN_SQL = text(f"""
    UPDATE escrows
    SET frozen = :frozen, updated_at = NOW()
    WHERE order_id = :order_id AND status = 'held'
    RETURNING {_COLUMNS}
""")


def _row_to_escrow(row: object) -> Escrow:
    return Escrow(
        id=row.id,  # type: ignore[attr-defined]
        order_id=row.order_id,  # type: ignore[attr-defined]
        buyer_wallet_id=row.buyer_wallet_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        frozen=row.frozen,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
    )


class EscrowRepository:
    async def save(self, db: AsyncSession, escrow: Escrow) -> Escrow:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "id": escrow.id,
                    "order_id": escrow.order_id,
                    "buyer_wallet_id": escrow.buyer_wallet_id,
                    "amount": escrow.amount,
                    "status": escrow.status,
                    "frozen": escrow.frozen,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Escrow insert returned no rows")
        return _row_to_escrow(row)

    async def get_by_order(self, db: AsyncSession, order_id: str) -> Escrow | None:
        row = (await db.execute(_GET_SQL, {"order_id": order_id})).fetchone()
        return _row_to_escrow(row) if row else None

    async def get_by_order_for_update(
        self, db: AsyncSession, order_id: str
    ) -> Escrow | None:
        row = (await db.execute(_GET_FOR_UPDATE_SQL, {"order_id": order_id})).fetchone()
        return _row_to_escrow(row) if row else None

    async def mark_resolved(
        self, db: AsyncSession, order_id: str, status: str
    ) -> Escrow | None:
        row = (
            await db.execute(_RESOLVE_SQL, {"order_id": order_id, "status": status})
        ).fetchone()
        return _row_to_escrow(row) if row else None

    async def set_frozen(
        self, db: AsyncSession, order_id: str, frozen: bool
    ) -> Escrow | None:
        row = (
            await db.execute(_SET_FROZEN_SQL, {"order_id": order_id, "frozen": frozen})
        ).fetchone()
        return _row_to_escrow(row) if row else None
