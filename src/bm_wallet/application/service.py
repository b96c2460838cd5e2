"""WalletApplicationService: wallet reads plus gateway-backed deposit/withdraw.

Deposit collects through the gateway before crediting. Withdraw debits first
and disburses before commit, so a gateway failure rolls the debit back.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bm_common.enums import LedgerEntryType
from src.bm_common.money import to_display
from src.bm_common.pagination import cursor_decode, cursor_encode
from src.bm_wallet.application.schemas import (
    LedgerEntryItem,
    TransactionsResponse,
    WalletMovementResponse,
    WalletResponse,
)
from src.bm_wallet.domain.ledger import Ledger
from src.bm_wallet.domain.models import Wallet
from src.bm_wallet.domain.repository import WalletRepositoryProtocol
from src.bm_wallet.infrastructure.payment_gateway import (
    PaymentGatewayProtocol,
    SimulatedPaymentGateway,
)
from src.bm_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class WalletApplicationService:
    def __init__(
        self,
        repo: WalletRepositoryProtocol | None = None,
        gateway: PaymentGatewayProtocol | None = None,
    ) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()
        self._gateway: PaymentGatewayProtocol = gateway or SimulatedPaymentGateway()
        self._ledger = Ledger(self._repo)

    async def _ensure_wallet(self, db: AsyncSession, owner_id: str) -> Wallet:
        wallet = await self._repo.get_by_owner(db, owner_id)
        if wallet is not None:
            return wallet
        try:
            wallet = await self._repo.get_or_create(db, owner_id, settings.DEFAULT_CURRENCY)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Created wallet %s for %s", wallet.id, owner_id)
        return wallet

    async def get_wallet(self, db: AsyncSession, owner_id: str) -> WalletResponse:
        return WalletResponse.from_wallet(await self._ensure_wallet(db, owner_id))

    async def deposit(
        self, db: AsyncSession, owner_id: str, amount: int, method: str
    ) -> WalletMovementResponse:
        wallet = await self._ensure_wallet(db, owner_id)
        gateway_ref = await self._gateway.collect(owner_id, amount, method, wallet.id)
        try:
            wallet, entry = await self._ledger.append(
                db,
                wallet.id,
                amount,
                LedgerEntryType.DEPOSIT,
                description=f"Deposit via {method} ({gateway_ref})",
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WalletMovementResponse(
            wallet=WalletResponse.from_wallet(wallet),
            amount=amount,
            amount_display=to_display(amount, wallet.currency),
            ledger_entry_id=entry.id,
            gateway_reference=gateway_ref,
        )

    async def withdraw(
        self, db: AsyncSession, owner_id: str, amount: int, method: str
    ) -> WalletMovementResponse:
        wallet = await self._ensure_wallet(db, owner_id)
        try:
            # Only the unlocked balance can leave the wallet
            wallet, entry = await self._ledger.append(
                db,
                wallet.id,
                -amount,
                LedgerEntryType.WITHDRAW,
                description=f"Withdrawal via {method}",
            )
            gateway_ref = await self._gateway.disburse(owner_id, amount, method, wallet.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WalletMovementResponse(
            wallet=WalletResponse.from_wallet(wallet),
            amount=amount,
            amount_display=to_display(amount, wallet.currency),
            ledger_entry_id=entry.id,
            gateway_reference=gateway_ref,
        )

    async def list_transactions(
        self,
        db: AsyncSession,
        owner_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> TransactionsResponse:
        wallet = await self._ensure_wallet(db, owner_id)
        decoded = cursor_decode(cursor)
        cursor_id = int(decoded) if decoded is not None and decoded.isdigit() else None
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, wallet.id, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]
        return TransactionsResponse(
            items=[LedgerEntryItem.from_entry(e, wallet.currency) for e in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )
