"""Payment gateway port and the simulated adapter shipped by default.

Wallet deposits collect money from the customer through the gateway and
withdrawals disburse it. Both return the gateway's transaction reference,
which is stored in the ledger entry description. Real adapters (mobile
money, card) plug in behind PaymentGatewayProtocol.
"""

import logging
import uuid
from typing import Protocol

from src.bm_common.errors import PaymentGatewayError

logger = logging.getLogger(__name__)


class PaymentGatewayProtocol(Protocol):
    async def collect(self, owner_id: str, amount: int, method: str, reference: str) -> str:
        """Charge the customer; return the gateway transaction reference."""
        ...

    async def disburse(self, owner_id: str, amount: int, method: str, reference: str) -> str:
        """Pay out to the customer; return the gateway transaction reference."""
        ...


class SimulatedPaymentGateway:
    """Gateway that settles instantly. Configurable to fail for tests."""

    def __init__(self) -> None:
        self.should_succeed = True
        self.failure_reason = "Gateway unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Gateway unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    async def collect(self, owner_id: str, amount: int, method: str, reference: str) -> str:
        return self._settle("collect", owner_id, amount, method, reference)

    async def disburse(self, owner_id: str, amount: int, method: str, reference: str) -> str:
        return self._settle("disburse", owner_id, amount, method, reference)

    def _settle(self, action: str, owner_id: str, amount: int, method: str, reference: str) -> str:
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)
        gateway_ref = f"SIM-{uuid.uuid4().hex[:12].upper()}"
        logger.info(
            "Simulated %s of %d via %s for %s (ref=%s, gateway_ref=%s)",
            action, amount, method, owner_id, reference, gateway_ref,
        )
        return gateway_ref
