"""WishlistRepository: raw SQL over wishlist_items joined with listings."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_wishlist.domain.models import WishlistItem

_LIST_SQL = text("""
    SELECT w.listing_id, l.vendor_id, l.title, l.price, l.stock, l.is_active, w.created_at
    FROM wishlist_items w
    JOIN listings l ON l.id = w.listing_id
    WHERE w.buyer_id = :buyer_id
    ORDER BY w.created_at DESC, w.listing_id
""")

_ADD_SQL = text("""
    INSERT INTO wishlist_items (buyer_id, listing_id)
    VALUES (:buyer_id, :listing_id)
    ON CONFLICT (buyer_id, listing_id) DO NOTHING
    RETURNING listing_id
""")

_REMOVE_SQL = text("""
    DELETE FROM wishlist_items
    WHERE buyer_id = :buyer_id AND listing_id = :listing_id
    RETURNING listing_id
""")

_CONTAINS_SQL = text("""
    SELECT 1 FROM wishlist_items
    WHERE buyer_id = :buyer_id AND listing_id = :listing_id
""")

_COUNT_SQL = text("SELECT COUNT(*) AS n FROM wishlist_items WHERE buyer_id = :buyer_id")


class WishlistRepository:
    async def list_items(self, db: AsyncSession, buyer_id: str) -> list[WishlistItem]:
        rows = (await db.execute(_LIST_SQL, {"buyer_id": buyer_id})).fetchall()
        return [
            WishlistItem(
                listing_id=row.listing_id,
                vendor_id=row.vendor_id,
                title=row.title,
                price=row.price,
                stock=row.stock,
                is_active=row.is_active,
                created_at=row.created_at,
            )
            for row in rows
        ]

    async def add(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool:
        result = await db.execute(_ADD_SQL, {"buyer_id": buyer_id, "listing_id": listing_id})
        return result.fetchone() is not None

    async def remove(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool:
        result = await db.execute(_REMOVE_SQL, {"buyer_id": buyer_id, "listing_id": listing_id})
        return result.fetchone() is not None

    async def contains(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool:
        result = await db.execute(_CONTAINS_SQL, {"buyer_id": buyer_id, "listing_id": listing_id})
        return result.fetchone() is not None

    async def count(self, db: AsyncSession, buyer_id: str) -> int:
        row = (await db.execute(_COUNT_SQL, {"buyer_id": buyer_id})).fetchone()
        return int(row.n) if row else 0
