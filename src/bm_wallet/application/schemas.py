"""Pydantic schemas for the bm_wallet API."""

from typing import Literal

from pydantic import BaseModel, Field

from src.bm_common.datetime_utils import iso_or_none
from src.bm_common.money import to_display
from src.bm_wallet.domain.models import LedgerEntry, Wallet

PaymentMethod = Literal["mobile_money", "card", "bank_transfer"]

# Per request, in minor units; keeps balance arithmetic far inside BIGINT
MAX_MOVEMENT = 10**12


class DepositRequest(BaseModel):
    amount: int = Field(
        ..., gt=0, le=MAX_MOVEMENT, description="Amount to deposit in minor units"
    )
    method: PaymentMethod = "mobile_money"


class WithdrawRequest(BaseModel):
    amount: int = Field(
        ..., gt=0, le=MAX_MOVEMENT, description="Amount to withdraw in minor units"
    )
    method: PaymentMethod = "mobile_money"


class WalletResponse(BaseModel):
    wallet_id: str
    currency: str
    balance: int
    balance_display: str
    locked_balance: int
    locked_balance_display: str
    total_balance: int
    total_balance_display: str

    @classmethod
    def from_wallet(cls, wallet: Wallet) -> "WalletResponse":
        return cls(
            wallet_id=wallet.id,
            currency=wallet.currency,
            balance=wallet.balance,
            balance_display=to_display(wallet.balance, wallet.currency),
            locked_balance=wallet.locked_balance,
            locked_balance_display=to_display(wallet.locked_balance, wallet.currency),
            total_balance=wallet.total_balance,
            total_balance_display=to_display(wallet.total_balance, wallet.currency),
        )


class WalletMovementResponse(BaseModel):
    """Result of a deposit or withdrawal."""

    wallet: WalletResponse
    amount: int
    amount_display: str
    ledger_entry_id: int
    gateway_reference: str


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    amount_display: str
    balance_after: int
    balance_after_display: str
    order_id: str | None
    description: str | None
    created_at: str | None

    @classmethod
    def from_entry(cls, entry: LedgerEntry, currency: str) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            entry_type=entry.entry_type,
            amount=entry.amount,
            amount_display=to_display(entry.amount, currency),
            balance_after=entry.balance_after,
            balance_after_display=to_display(entry.balance_after, currency),
            order_id=entry.order_id,
            description=entry.description,
            created_at=iso_or_none(entry.created_at),
        )


class TransactionsResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
