"""Ledger: the only writer of wallet balances.

Every balance change is one conditional UPDATE ... RETURNING plus one
ledger_entries insert carrying balance_after, so for each wallet
SUM(ledger_entries.amount) == wallets.balance holds after every commit.
locked_balance moves that do not touch balance (settle_locked) write no entry.

Transaction ownership: the CALLER commits or rolls back.
"""

import logging
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.enums import LedgerEntryType
from src.bm_common.errors import InsufficientFundsError, ValidationError, WalletNotFoundError
from src.bm_wallet.domain.models import LedgerEntry, Wallet
from src.bm_wallet.domain.repository import WalletRepositoryProtocol

logger = logging.getLogger(__name__)


class Ledger:
    def __init__(self, repo: WalletRepositoryProtocol) -> None:
        self._repo = repo

    async def append(
        self,
        db: AsyncSession,
        wallet_id: str,
        amount: int,
        reason: LedgerEntryType,
        order_id: str | None = None,
        description: str | None = None,
    ) -> tuple[Wallet, LedgerEntry]:
        """Credit (amount > 0) or debit (amount < 0) the spendable balance."""
        if amount == 0:
            raise ValidationError("Ledger amount must be non-zero")
        wallet = await self._repo.apply_delta(db, wallet_id, amount, 0)
        if wallet is None:
            await self._raise_insufficient(db, wallet_id, -amount, locked=False)
        entry = await self._repo.insert_ledger_entry(
            db, wallet_id, reason.value, amount, wallet.balance, order_id, description
        )
        logger.info(
            "Ledger %s %+d on wallet %s (balance=%d)",
            reason.value, amount, wallet_id, wallet.balance,
        )
        return wallet, entry

    async def lock(
        self, db: AsyncSession, wallet_id: str, amount: int, order_id: str
    ) -> tuple[Wallet, LedgerEntry]:
        """balance -> locked_balance, recorded as an ORDER_LOCK debit."""
        self._require_positive(amount)
        wallet = await self._repo.apply_delta(db, wallet_id, -amount, amount)
        if wallet is None:
            await self._raise_insufficient(db, wallet_id, amount, locked=False)
        entry = await self._repo.insert_ledger_entry(
            db,
            wallet_id,
            LedgerEntryType.ORDER_LOCK.value,
            -amount,
            wallet.balance,
            order_id,
            f"Funds locked in escrow for order {order_id}",
        )
        logger.info("Locked %d on wallet %s for order %s", amount, wallet_id, order_id)
        return wallet, entry

    async def unlock(
        self, db: AsyncSession, wallet_id: str, amount: int, order_id: str
    ) -> tuple[Wallet, LedgerEntry]:
        """locked_balance -> balance, recorded as an ESCROW_REFUND credit."""
        self._require_positive(amount)
        wallet = await self._repo.apply_delta(db, wallet_id, amount, -amount)
        if wallet is None:
            await self._raise_insufficient(db, wallet_id, amount, locked=True)
        entry = await self._repo.insert_ledger_entry(
            db,
            wallet_id,
            LedgerEntryType.ESCROW_REFUND.value,
            amount,
            wallet.balance,
            order_id,
            f"Escrow refunded for order {order_id}",
        )
        logger.info("Unlocked %d on wallet %s for order %s", amount, wallet_id, order_id)
        return wallet, entry

    async def settle_locked(
        self, db: AsyncSession, wallet_id: str, amount: int, order_id: str
    ) -> Wallet:
        """Locked funds leave the wallet (escrow release); balance is untouched."""
        self._require_positive(amount)
        wallet = await self._repo.apply_delta(db, wallet_id, 0, -amount)
        if wallet is None:
            await self._raise_insufficient(db, wallet_id, amount, locked=True)
        logger.info("Settled %d locked on wallet %s for order %s", amount, wallet_id, order_id)
        return wallet

    @staticmethod
    def _require_positive(amount: int) -> None:
        if amount <= 0:
            raise ValidationError(f"Amount must be positive, got {amount}")

    async def _raise_insufficient(
        self, db: AsyncSession, wallet_id: str, required: int, locked: bool
    ) -> NoReturn:
        current = await self._repo.get_by_id(db, wallet_id)
        if current is None:
            raise WalletNotFoundError(wallet_id)
        available = current.locked_balance if locked else current.balance
        raise InsufficientFundsError(required, available)
