"""Domain models for bm_escrow: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.bm_common.enums import EscrowStatus


@dataclass
class Escrow:
    id: str
    order_id: str
    buyer_wallet_id: str
    amount: int                  # == order.total while held
    status: str                  # EscrowStatus value
    frozen: bool = False         # set while a dispute is open
    created_at: datetime | None = None
    updated_at: datetime | None = None
    resolved_at: datetime | None = None

    @property
    def is_held(self) -> bool:
        return self.status == EscrowStatus.HELD.value
