"""Pydantic schemas for the bm_cart API."""

from pydantic import BaseModel, Field

from src.bm_cart.domain.models import CartItem, CartTotals
from src.bm_common.money import to_display


class AddToCartRequest(BaseModel):
    quantity: int = Field(1, ge=1, le=1000)


class UpdateCartRequest(BaseModel):
    quantity: int = Field(..., ge=1, le=1000)


class TotalsOut(BaseModel):
    subtotal: int
    shipping: int
    tax: int
    total: int
    total_display: str

    @classmethod
    def from_totals(cls, totals: CartTotals, currency: str) -> "TotalsOut":
        return cls(
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            tax=totals.tax,
            total=totals.total,
            total_display=to_display(totals.total, currency),
        )


class CartItemOut(BaseModel):
    listing_id: str
    vendor_id: str
    title: str
    unit_price: int
    quantity: int
    line_total: int
    stock: int
    available: bool

    @classmethod
    def from_domain(cls, item: CartItem) -> "CartItemOut":
        return cls(
            listing_id=item.listing_id,
            vendor_id=item.vendor_id,
            title=item.title,
            unit_price=item.unit_price,
            quantity=item.quantity,
            line_total=item.line_total,
            stock=item.stock,
            available=item.is_purchasable,
        )


class CartResponse(BaseModel):
    items: list[CartItemOut]
    totals: TotalsOut
    vendor_count: int
    has_unavailable_items: bool


class CartSummaryResponse(BaseModel):
    item_count: int
    distinct_items: int
    totals: TotalsOut
