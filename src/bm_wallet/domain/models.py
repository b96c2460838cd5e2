"""Domain models for bm_wallet: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Wallet:
    id: str
    owner_id: str
    balance: int          # minor units, spendable
    locked_balance: int   # minor units, held in escrow for open orders
    currency: str
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_balance(self) -> int:
        return self.balance + self.locked_balance


@dataclass
class LedgerEntry:
    id: int                      # BIGSERIAL
    wallet_id: str
    entry_type: str              # LedgerEntryType value
    amount: int                  # minor units, positive=credit negative=debit
    balance_after: int           # balance snapshot after the entry
    order_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
