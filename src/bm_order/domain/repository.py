"""Repository Protocol for orders and their line items."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_order.domain.models import Order, VendorOrderStats


class OrderRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, order: Order) -> Order:
        """Insert the order and its items."""
        ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None:
        """SELECT ... FOR UPDATE on the order row; items loaded too."""
        ...

    async def transition(
        self,
        db: AsyncSession,
        order_id: str,
        from_status: str,
        to_status: str,
        cancel_reason: str | None = None,
        tracking_number: str | None = None,
    ) -> Order | None:
        """Conditional status update; None when the row is no longer in from_status."""
        ...

    async def list_by_buyer(
        self,
        db: AsyncSession,
        buyer_id: str,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...

    async def list_by_vendor(
        self,
        db: AsyncSession,
        vendor_id: str,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...

    async def vendor_stats(self, db: AsyncSession, vendor_id: str) -> VendorOrderStats: ...
