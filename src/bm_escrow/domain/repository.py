"""Repository Protocol for escrows."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_escrow.domain.models import Escrow


class EscrowRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, escrow: Escrow) -> Escrow: ...

    async def get_by_order(self, db: AsyncSession, order_id: str) -> Escrow | None: ...

    async def get_by_order_for_update(
        self, db: AsyncSession, order_id: str
    ) -> Escrow | None: ...

    async def mark_resolved(
        self, db: AsyncSession, order_id: str, status: str
    ) -> Escrow | None:
        """held -> status; None when the escrow was no longer held."""
        ...

    async def set_frozen(
        self, db: AsyncSession, order_id: str, frozen: bool
    ) -> Escrow | None: ...
