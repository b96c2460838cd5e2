"""Order status transition table.

    pending    -> paid | cancelled
    paid       -> processing | cancelled | disputed
    processing -> shipped | disputed
    shipped    -> delivered | disputed
    disputed   -> delivered | refunded

delivered, cancelled and refunded are terminal.
"""

from src.bm_common.enums import OrderStatus
from src.bm_common.errors import OrderTransitionError

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.DISPUTED}
    ),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.DISPUTED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.DISPUTED}),
    OrderStatus.DISPUTED: frozenset({OrderStatus.DELIVERED, OrderStatus.REFUNDED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

# Column stamped with NOW() when an order enters the status
TIMESTAMP_COLUMNS: dict[OrderStatus, str] = {
    OrderStatus.PAID: "paid_at",
    OrderStatus.PROCESSING: "processing_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
    OrderStatus.DISPUTED: "disputed_at",
    OrderStatus.REFUNDED: "refunded_at",
}

DISPUTABLE: frozenset[OrderStatus] = frozenset(
    {OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.SHIPPED}
)
CANCELLABLE: frozenset[OrderStatus] = frozenset({OrderStatus.PENDING, OrderStatus.PAID})


def can_transition(current: str | OrderStatus, target: str | OrderStatus) -> bool:
    return OrderStatus(target) in TRANSITIONS[OrderStatus(current)]


def assert_transition(order_id: str, current: str | OrderStatus, target: str | OrderStatus) -> None:
    if not can_transition(current, target):
        raise OrderTransitionError(
            order_id, OrderStatus(current).value, OrderStatus(target).value
        )
