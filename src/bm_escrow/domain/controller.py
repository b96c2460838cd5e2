"""Escrow Controller: holds buyer funds for an order until release or refund.

hold:     buyer balance -> buyer locked_balance, escrow row created as held
release:  buyer locked_balance leaves the wallet, vendor wallet credited
refund:   buyer locked_balance -> buyer balance

Exactly one of release/refund succeeds per escrow. Every method runs inside
the caller's transaction together with the order status change.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.enums import EscrowStatus, LedgerEntryType
from src.bm_common.errors import (
    AlreadyResolvedError,
    EscrowFrozenError,
    EscrowNotFoundError,
    InternalError,
)
from src.bm_common.id_generator import generate_id
from src.bm_escrow.domain.models import Escrow
from src.bm_escrow.domain.repository import EscrowRepositoryProtocol
from src.bm_order.domain.models import Order
from src.bm_wallet.domain.ledger import Ledger
from src.bm_wallet.domain.repository import WalletRepositoryProtocol

logger = logging.getLogger(__name__)


class EscrowController:
    def __init__(
        self,
        escrow_repo: EscrowRepositoryProtocol,
        wallet_repo: WalletRepositoryProtocol,
    ) -> None:
        self._escrows = escrow_repo
        self._wallets = wallet_repo
        self._ledger = Ledger(wallet_repo)

    async def hold(self, db: AsyncSession, order: Order, buyer_wallet_id: str) -> Escrow:
        """Lock order.total on the buyer wallet and open a held escrow for it."""
        await self._ledger.lock(db, buyer_wallet_id, order.total, order.id)
        escrow = await self._escrows.save(
            db,
            Escrow(
                id=generate_id(),
                order_id=order.id,
                buyer_wallet_id=buyer_wallet_id,
                amount=order.total,
                status=EscrowStatus.HELD.value,
            ),
        )
        logger.info("Escrow held for order %s: %d", order.id, order.total)
        return escrow

    async def release(self, db: AsyncSession, order: Order) -> Escrow:
        """Pay the held amount out to the vendor's wallet."""
        escrow = await self._load_held(db, order)
        if escrow.frozen:
            raise EscrowFrozenError(order.id)
        resolved = await self._resolve(db, order, EscrowStatus.RELEASED)
        await self._ledger.settle_locked(db, escrow.buyer_wallet_id, escrow.amount, order.id)
        vendor_wallet = await self._wallets.get_or_create(db, order.vendor_id, order.currency)
        await self._ledger.append(
            db,
            vendor_wallet.id,
            escrow.amount,
            LedgerEntryType.ESCROW_RELEASE,
            order_id=order.id,
            description=f"Escrow released for order {order.id}",
        )
        logger.info(
            "Escrow released for order %s: %d to vendor %s",
            order.id, escrow.amount, order.vendor_id,
        )
        return resolved

    async def refund(self, db: AsyncSession, order: Order) -> Escrow:
        """Return the held amount to the buyer's spendable balance."""
        escrow = await self._load_held(db, order)
        resolved = await self._resolve(db, order, EscrowStatus.REFUNDED)
        await self._ledger.unlock(db, escrow.buyer_wallet_id, escrow.amount, order.id)
        logger.info("Escrow refunded for order %s: %d", order.id, escrow.amount)
        return resolved

    async def freeze(self, db: AsyncSession, order_id: str) -> Escrow:
        return await self._set_frozen(db, order_id, True)

    async def unfreeze(self, db: AsyncSession, order_id: str) -> Escrow:
        return await self._set_frozen(db, order_id, False)

    async def get(self, db: AsyncSession, order_id: str) -> Escrow | None:
        return await self._escrows.get_by_order(db, order_id)

    async def _load_held(self, db: AsyncSession, order: Order) -> Escrow:
        escrow = await self._escrows.get_by_order_for_update(db, order.id)
        if escrow is None:
            raise EscrowNotFoundError(order.id)
        if not escrow.is_held:
            raise AlreadyResolvedError("Escrow", escrow.id, escrow.status)
        if escrow.amount != order.total:
            raise InternalError(
                f"Escrow {escrow.id} amount {escrow.amount} != order total {order.total}"
            )
        return escrow

    async def _resolve(self, db: AsyncSession, order: Order, status: EscrowStatus) -> Escrow:
        resolved = await self._escrows.mark_resolved(db, order.id, status.value)
        if resolved is None:
            # Lost a race with a concurrent resolution
            current = await self._escrows.get_by_order(db, order.id)
            if current is None:
                raise EscrowNotFoundError(order.id)
            raise AlreadyResolvedError("Escrow", current.id, current.status)
        return resolved

    async def _set_frozen(self, db: AsyncSession, order_id: str, frozen: bool) -> Escrow:
        escrow = await self._escrows.set_frozen(db, order_id, frozen)
        if escrow is None:
            current = await self._escrows.get_by_order(db, order_id)
            if current is None:
                raise EscrowNotFoundError(order_id)
            raise AlreadyResolvedError("Escrow", current.id, current.status)
        logger.info("Escrow for order %s %s", order_id, "frozen" if frozen else "unfrozen")
        return escrow
