"""Domain models for bm_order: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class OrderItem:
    listing_id: str
    title: str            # snapshot at placement
    quantity: int
    unit_price: int       # minor units, snapshot at placement
    line_total: int       # unit_price * quantity
    id: int | None = None


@dataclass
class Order:
    id: str
    buyer_id: str
    vendor_id: str
    status: str           # OrderStatus value
    subtotal: int
    shipping: int
    tax: int
    total: int            # subtotal + shipping + tax, immutable after creation
    items: list[OrderItem] = field(default_factory=list)
    currency: str = "UGX"
    shipping_address: str | None = None
    notes: str | None = None
    cancel_reason: str | None = None
    tracking_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    paid_at: datetime | None = None
    processing_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    disputed_at: datetime | None = None
    refunded_at: datetime | None = None


@dataclass
class VendorOrderStats:
    total_orders: int = 0
    pending_orders: int = 0      # pending, paid or processing
    total_sales: int = 0         # sum of delivered order totals
