"""Guarded order status change shared by the order and dispute flows.

The caller must already hold the row lock (OrderRepository.get_for_update)
and owns the transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.enums import OrderStatus
from src.bm_common.errors import OrderTransitionError
from src.bm_order.domain.models import Order
from src.bm_order.domain.repository import OrderRepositoryProtocol
from src.bm_order.domain.state_machine import assert_transition

logger = logging.getLogger(__name__)


async def apply_transition(
    db: AsyncSession,
    repo: OrderRepositoryProtocol,
    order: Order,
    target: OrderStatus,
    cancel_reason: str | None = None,
    tracking_number: str | None = None,
) -> Order:
    assert_transition(order.id, order.status, target)
    updated = await repo.transition(
        db, order.id, order.status, target.value, cancel_reason, tracking_number
    )
    if updated is None:
        current = await repo.get_by_id(db, order.id)
        raise OrderTransitionError(
            order.id, current.status if current else order.status, target.value
        )
    logger.info("Order %s: %s -> %s", order.id, order.status, target.value)
    return updated
