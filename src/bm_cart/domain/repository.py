"""Repository Protocol for cart rows."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_cart.domain.models import CartItem


class CartRepositoryProtocol(Protocol):
    async def list_items(self, db: AsyncSession, buyer_id: str) -> list[CartItem]: ...

    async def claim_items(self, db: AsyncSession, buyer_id: str) -> list[CartItem]:
        """Delete the buyer's cart rows and return them priced against their listings."""
        ...

    async def get_quantity(
        self, db: AsyncSession, buyer_id: str, listing_id: str
    ) -> int | None: ...

    async def add_quantity(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int
    ) -> int:
        """Insert or accumulate; returns the resulting quantity."""
        ...

    async def set_quantity(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int
    ) -> bool: ...

    async def remove(self, db: AsyncSession, buyer_id: str, listing_id: str) -> bool: ...

    async def clear(self, db: AsyncSession, buyer_id: str) -> int: ...
