"""Pydantic schemas for the buyer and vendor order APIs."""

from typing import Literal

from pydantic import BaseModel, Field

from src.bm_cart.application.schemas import CartItemOut, TotalsOut
from src.bm_common.datetime_utils import iso_or_none
from src.bm_common.money import to_display
from src.bm_escrow.domain.models import Escrow
from src.bm_order.domain.models import Order, OrderItem


class PlaceOrderRequest(BaseModel):
    shipping_address: str = Field(..., min_length=5, max_length=500)
    notes: str | None = Field(None, max_length=1000)


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class VendorStatusRequest(BaseModel):
    status: Literal["processing", "shipped", "cancelled"]
    tracking_number: str | None = Field(None, max_length=100)
    reason: str | None = Field(None, max_length=500)


class OrderItemOut(BaseModel):
    listing_id: str
    title: str
    quantity: int
    unit_price: int
    line_total: int

    @classmethod
    def from_domain(cls, item: OrderItem) -> "OrderItemOut":
        return cls(
            listing_id=item.listing_id,
            title=item.title,
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=item.line_total,
        )


class EscrowOut(BaseModel):
    escrow_id: str
    amount: int
    status: str
    frozen: bool
    resolved_at: str | None

    @classmethod
    def from_domain(cls, escrow: Escrow) -> "EscrowOut":
        return cls(
            escrow_id=escrow.id,
            amount=escrow.amount,
            status=escrow.status,
            frozen=escrow.frozen,
            resolved_at=iso_or_none(escrow.resolved_at),
        )


class OrderOut(BaseModel):
    order_id: str
    buyer_id: str
    vendor_id: str
    status: str
    items: list[OrderItemOut]
    subtotal: int
    shipping: int
    tax: int
    total: int
    total_display: str
    currency: str
    shipping_address: str | None
    notes: str | None
    cancel_reason: str | None
    tracking_number: str | None
    escrow: EscrowOut | None = None
    created_at: str | None
    paid_at: str | None
    processing_at: str | None
    shipped_at: str | None
    delivered_at: str | None
    cancelled_at: str | None
    disputed_at: str | None
    refunded_at: str | None

    @classmethod
    def from_domain(cls, order: Order, escrow: Escrow | None = None) -> "OrderOut":
        return cls(
            order_id=order.id,
            buyer_id=order.buyer_id,
            vendor_id=order.vendor_id,
            status=order.status,
            items=[OrderItemOut.from_domain(i) for i in order.items],
            subtotal=order.subtotal,
            shipping=order.shipping,
            tax=order.tax,
            total=order.total,
            total_display=to_display(order.total, order.currency),
            currency=order.currency,
            shipping_address=order.shipping_address,
            notes=order.notes,
            cancel_reason=order.cancel_reason,
            tracking_number=order.tracking_number,
            escrow=EscrowOut.from_domain(escrow) if escrow else None,
            created_at=iso_or_none(order.created_at),
            paid_at=iso_or_none(order.paid_at),
            processing_at=iso_or_none(order.processing_at),
            shipped_at=iso_or_none(order.shipped_at),
            delivered_at=iso_or_none(order.delivered_at),
            cancelled_at=iso_or_none(order.cancelled_at),
            disputed_at=iso_or_none(order.disputed_at),
            refunded_at=iso_or_none(order.refunded_at),
        )


class OrderListResponse(BaseModel):
    items: list[OrderOut]
    next_cursor: str | None
    has_more: bool


class PlaceOrderResponse(BaseModel):
    orders: list[OrderOut]
    grand_total: int
    grand_total_display: str
    wallet_balance: int
    wallet_locked_balance: int


class CheckoutGroup(BaseModel):
    vendor_id: str
    items: list[CartItemOut]
    totals: TotalsOut


class CheckoutResponse(BaseModel):
    groups: list[CheckoutGroup]
    unavailable_items: list[CartItemOut]
    grand_total: int
    grand_total_display: str
    wallet_balance: int
    sufficient_funds: bool
    can_place_order: bool


class VendorDashboardResponse(BaseModel):
    total_listings: int
    active_listings: int
    total_orders: int
    pending_orders: int
    total_sales: int
    total_sales_display: str
    wallet_balance: int
