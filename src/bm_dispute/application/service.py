"""Dispute Resolver.

open_dispute:  order paid/processing/shipped -> disputed, escrow frozen
add_evidence:  buyer or vendor appends evidence until the dispute is resolved
start_review:  admin, open -> under_review
resolve:       admin, order -> refunded | delivered, escrow unfrozen and
               refunded | released, dispute -> resolved; all in one transaction
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.enums import DisputeOutcome, DisputeStatus, OrderStatus
from src.bm_common.errors import (
    AlreadyResolvedError,
    DisputeExistsError,
    DisputeNotFoundError,
    DisputeTransitionError,
    OrderNotFoundError,
    OrderTransitionError,
)
from src.bm_common.id_generator import generate_id
from src.bm_common.pagination import cursor_decode, cursor_encode
from src.bm_dispute.application.schemas import DisputeListResponse, DisputeOut, EvidenceOut
from src.bm_dispute.domain.models import Dispute
from src.bm_dispute.domain.repository import DisputeRepositoryProtocol
from src.bm_dispute.infrastructure.persistence import DisputeRepository
from src.bm_escrow.domain.controller import EscrowController
from src.bm_escrow.domain.repository import EscrowRepositoryProtocol
from src.bm_escrow.infrastructure.persistence import EscrowRepository
from src.bm_order.domain.repository import OrderRepositoryProtocol
from src.bm_order.domain.state_machine import DISPUTABLE
from src.bm_order.domain.transitions import apply_transition
from src.bm_order.infrastructure.persistence import OrderRepository
from src.bm_wallet.domain.repository import WalletRepositoryProtocol
from src.bm_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class DisputeResolver:
    def __init__(
        self,
        dispute_repo: DisputeRepositoryProtocol | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
        escrow_repo: EscrowRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
    ) -> None:
        self._disputes: DisputeRepositoryProtocol = dispute_repo or DisputeRepository()
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._escrow = EscrowController(
            escrow_repo or EscrowRepository(), wallet_repo or WalletRepository()
        )

    async def open_dispute(
        self,
        db: AsyncSession,
        buyer_id: str,
        order_id: str,
        reason: str,
        description: str,
    ) -> DisputeOut:
        try:
            order = await self._orders.get_for_update(db, order_id)
            if order is None or order.buyer_id != buyer_id:
                raise OrderNotFoundError(order_id)
            if await self._disputes.get_by_order(db, order_id) is not None:
                raise DisputeExistsError(order_id)
            if OrderStatus(order.status) not in DISPUTABLE:
                raise OrderTransitionError(order_id, order.status, OrderStatus.DISPUTED.value)

            await apply_transition(db, self._orders, order, OrderStatus.DISPUTED)
            await self._escrow.freeze(db, order_id)
            dispute = await self._disputes.save(
                db,
                Dispute(
                    id=generate_id(),
                    order_id=order_id,
                    buyer_id=order.buyer_id,
                    vendor_id=order.vendor_id,
                    reason=reason,
                    description=description,
                    status=DisputeStatus.OPEN.value,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Dispute %s opened on order %s", dispute.id, order_id)
        return DisputeOut.from_domain(dispute)

    async def add_evidence(
        self,
        db: AsyncSession,
        user_id: str,
        dispute_id: str,
        kind: str,
        content: str,
    ) -> EvidenceOut:
        try:
            dispute = await self._disputes.get_for_update(db, dispute_id)
            if dispute is None or not dispute.is_party(user_id):
                raise DisputeNotFoundError(dispute_id)
            if dispute.is_resolved:
                raise AlreadyResolvedError("Dispute", dispute_id, dispute.status)
            evidence = await self._disputes.add_evidence(db, dispute_id, user_id, kind, content)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return EvidenceOut.from_domain(evidence)

    async def start_review(self, db: AsyncSession, dispute_id: str) -> DisputeOut:
        try:
            dispute = await self._disputes.get_for_update(db, dispute_id)
            if dispute is None:
                raise DisputeNotFoundError(dispute_id)
            if dispute.is_resolved:
                raise AlreadyResolvedError("Dispute", dispute_id, dispute.status)
            if dispute.status != DisputeStatus.OPEN.value:
                raise DisputeTransitionError(
                    dispute_id, dispute.status, DisputeStatus.UNDER_REVIEW.value
                )
            updated = await self._disputes.update_status(
                db, dispute_id, DisputeStatus.OPEN.value, DisputeStatus.UNDER_REVIEW.value
            )
            if updated is None:
                raise DisputeTransitionError(
                    dispute_id, dispute.status, DisputeStatus.UNDER_REVIEW.value
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Dispute %s under review", dispute_id)
        return DisputeOut.from_domain(updated)

    async def resolve(
        self,
        db: AsyncSession,
        admin_id: str,
        dispute_id: str,
        outcome: str,
        resolution_note: str | None = None,
    ) -> DisputeOut:
        decided = DisputeOutcome(outcome)
        try:
            dispute = await self._disputes.get_for_update(db, dispute_id)
            if dispute is None:
                raise DisputeNotFoundError(dispute_id)
            if dispute.is_resolved:
                raise AlreadyResolvedError("Dispute", dispute_id, dispute.status)

            order = await self._orders.get_for_update(db, dispute.order_id)
            if order is None:
                raise OrderNotFoundError(dispute.order_id)
            target = (
                OrderStatus.REFUNDED if decided is DisputeOutcome.REFUND else OrderStatus.DELIVERED
            )
            order = await apply_transition(db, self._orders, order, target)
            await self._escrow.unfreeze(db, order.id)
            if decided is DisputeOutcome.REFUND:
                await self._escrow.refund(db, order)
            else:
                await self._escrow.release(db, order)

            resolved = await self._disputes.mark_resolved(
                db, dispute_id, decided.value, resolution_note, admin_id
            )
            if resolved is None:
                raise AlreadyResolvedError("Dispute", dispute_id, DisputeStatus.RESOLVED.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Dispute %s resolved by %s: %s (order %s)",
            dispute_id, admin_id, decided.value, order.id,
        )
        return DisputeOut.from_domain(resolved)

    async def get_dispute(
        self, db: AsyncSession, user_id: str, dispute_id: str, is_admin: bool = False
    ) -> DisputeOut:
        dispute = await self._disputes.get_by_id(db, dispute_id)
        if dispute is None or not (is_admin or dispute.is_party(user_id)):
            raise DisputeNotFoundError(dispute_id)
        return DisputeOut.from_domain(dispute)

    async def list_disputes(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> DisputeListResponse:
        """user_id None lists every dispute (admin)."""
        disputes = await self._disputes.list_for_user(
            db, user_id, status, cursor_decode(cursor), limit + 1
        )
        has_more = len(disputes) > limit
        page = disputes[:limit]
        return DisputeListResponse(
            items=[DisputeOut.from_domain(d) for d in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )
