"""Admin application service: dispute review/resolution and invariant audit."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_dispute.application.schemas import DisputeListResponse, DisputeOut
from src.bm_dispute.application.service import DisputeResolver
from src.bm_escrow.domain.invariants import verify_global_invariants


class AdminService:
    def __init__(self, resolver: DisputeResolver | None = None) -> None:
        self._resolver = resolver or DisputeResolver()

    async def list_disputes(
        self, db: AsyncSession, status: str | None, cursor: str | None, limit: int
    ) -> DisputeListResponse:
        return await self._resolver.list_disputes(db, None, status, cursor, limit)

    async def review_dispute(self, db: AsyncSession, dispute_id: str) -> DisputeOut:
        return await self._resolver.start_review(db, dispute_id)

    async def resolve_dispute(
        self,
        db: AsyncSession,
        admin_id: str,
        dispute_id: str,
        outcome: str,
        resolution_note: str | None,
    ) -> DisputeOut:
        return await self._resolver.resolve(db, admin_id, dispute_id, outcome, resolution_note)

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, object]:
        violations = await verify_global_invariants(db)
        return {"ok": len(violations) == 0, "violations": violations}
