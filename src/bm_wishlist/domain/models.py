"""Domain models for bm_wishlist: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class WishlistItem:
    """A saved listing joined with its live price and availability."""

    listing_id: str
    vendor_id: str
    title: str
    price: int          # minor units
    stock: int
    is_active: bool = True
    created_at: datetime | None = None

    @property
    def in_stock(self) -> bool:
        return self.is_active and self.stock > 0
