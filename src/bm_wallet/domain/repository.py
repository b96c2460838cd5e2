"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_wallet.domain.models import LedgerEntry, Wallet


class WalletRepositoryProtocol(Protocol):
    async def get_by_owner(self, db: AsyncSession, owner_id: str) -> Wallet | None: ...

    async def get_by_id(self, db: AsyncSession, wallet_id: str) -> Wallet | None: ...

    async def get_or_create(
        self, db: AsyncSession, owner_id: str, currency: str
    ) -> Wallet: ...

    async def apply_delta(
        self,
        db: AsyncSession,
        wallet_id: str,
        balance_delta: int,
        locked_delta: int,
    ) -> Wallet | None:
        """Atomically add both deltas; None when either column would go negative."""
        ...

    async def insert_ledger_entry(
        self,
        db: AsyncSession,
        wallet_id: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        order_id: str | None,
        description: str | None,
    ) -> LedgerEntry: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        wallet_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
