"""CartRepository: raw SQL over cart_items joined with listings."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Row, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_cart.domain.models import CartItem
from src.bm_common.errors import InternalError

_LIST_SQL = text("""
    SELECT c.listing_id, l.vendor_id, l.title, l.price, c.quantity, l.stock, l.is_active
    FROM cart_items c
    JOIN listings l ON l.id = c.listing_id
    WHERE c.buyer_id = :buyer_id
    ORDER BY c.created_at, c.listing_id
""")

_GET_QTY_SQL = text("""
    SELECT quantity FROM cart_items
    WHERE buyer_id = :buyer_id AND listing_id = :listing_id
""")

_ADD_SQL = text("""
    INSERT INTO cart_items (buyer_id, listing_id, quantity)
    VALUES (:buyer_id, :listing_id, :quantity)
    ON CONFLICT (buyer_id, listing_id) DO UPDATE
        SET quantity = cart_items.quantity + EXCLUDED.quantity,
            updated_at = NOW()
    RETURNING quantity
""")

_SET_SQL = text("""
    UPDATE cart_items SET quantity = :quantity, updated_at = NOW()
    WHERE buyer_id = :buyer_id AND listing_id = :listing_id
    RETURNING quantity
""")

_REMOVE_SQL = text("""
    DELETE FROM cart_items
    WHERE buyer_id = :buyer_id AND listing_id = :listing_id
    RETURNING listing_id
""")

_CLEAR_SQL = text("DELETE FROM cart_items WHERE buyer_id = :buyer_id")

# Deleting the rows locks them: a concurrent claim waits, then sees an empty cart
_CLAIM_SQL = text("""
    WITH claimed AS (
        DELETE FROM cart_items WHERE buyer_id = :buyer_id
        RETURNING listing_id, quantity, created_at
    )
    SELECT c.listing_id, l.vendor_id, l.title, l.price, c.quantity, l.stock, l.is_active
    FROM claimed c
    JOIN listings l ON l.id = c.listing_id
    ORDER BY c.created_at, c.listing_id
""")


def _to_items(rows: Sequence[Row[Any]]) -> list[CartItem]:
    return [
        CartItem(
            listing_id=row.listing_id,
            vendor_id=row.vendor_id,
            title=row.title,
            unit_price=row.price,
            quantity=row.quantity,
            stock=row.stock,
            is_active=row.is_active,
        )
        for row in rows
    ]


class CartRepository:
    async def list_items(self, db: AsyncSession, buyer_id: str) -> list[CartItem]:
        return _to_items((await db.execute(_LIST_SQL, {"buyer_id": buyer_id})).fetchall())

    async def claim_items(self, db: AsyncSession, buyer_id: str) -> list[CartItem]:
        return _to_items((await db.execute(_CLAIM_SQL, {"buyer_id": buyer_id})).fetchall())

    async def get_quantity(
        self, db: AsyncSession, buyer_id: str, listing_id: str
    ) -> int | None:
        row = (
            await db.execute(_GET_QTY_SQL, {"buyer_id": buyer_id, "listing_id": listing_id})
        ).fetchone()
        return row.quantity if row else None

    async def add_quantity(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int
    ) -> int:
        row = (
            await db.execute(
                _ADD_SQL,
                {"buyer_id": buyer_id, "listing_id": listing_id, "quantity": quantity},
            )
        ).fetchone()
        if row is None:
            raise InternalError("Cart upsert returned no rows")
        return row.quantity

    async def set_quantity(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int
    ) -> bool:
        result = await db.execute(
            _SET_SQL, {"buyer_id": buyer_id, "listing_id": listing_id, "quantity": quantity}
        )
        return result.fetchone() is not None

    async def remove(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool:
        result = await db.execute(
            _REMOVE_SQL, {"buyer_id": buyer_id, "listing_id": listing_id}
        )
        return result.fetchone() is not None

    async def clear(self, db: AsyncSession, buyer_id: str) -> int:
        result = await db.execute(_CLEAR_SQL, {"buyer_id": buyer_id})
        return result.rowcount or 0
