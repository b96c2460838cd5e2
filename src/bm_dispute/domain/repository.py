"""Repository Protocol for disputes and their evidence."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_dispute.domain.models import Dispute, Evidence


class DisputeRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, dispute: Dispute) -> Dispute: ...

    async def get_by_id(self, db: AsyncSession, dispute_id: str) -> Dispute | None:
        """Dispute with its evidence list."""
        ...

    async def get_for_update(self, db: AsyncSession, dispute_id: str) -> Dispute | None: ...

    async def get_by_order(self, db: AsyncSession, order_id: str) -> Dispute | None: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Dispute]:
        """Disputes where user_id is buyer or vendor; user_id None lists all."""
        ...

    async def add_evidence(
        self,
        db: AsyncSession,
        dispute_id: str,
        submitted_by: str,
        kind: str,
        content: str,
    ) -> Evidence: ...

    async def update_status(
        self, db: AsyncSession, dispute_id: str, from_status: str, to_status: str
    ) -> Dispute | None: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        dispute_id: str,
        outcome: str,
        resolution_note: str | None,
        resolved_by: str,
    ) -> Dispute | None:
        """Conditional on status != resolved; None when already resolved."""
        ...
