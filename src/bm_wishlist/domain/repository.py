"""Repository Protocol for wishlist rows."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_wishlist.domain.models import WishlistItem


class WishlistRepositoryProtocol(Protocol):
    async def list_items(self, db: AsyncSession, buyer_id: str) -> list[WishlistItem]: ...

    async def add(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool:
        """Returns False when the listing was already saved."""
        ...

    async def remove(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool: ...

    async def contains(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool: ...

    async def count(self, db: AsyncSession, buyer_id: str) -> int: ...
