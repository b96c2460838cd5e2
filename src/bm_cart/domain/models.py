"""Domain models for bm_cart: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass


@dataclass
class CartItem:
    """One cart row joined with the live listing it points at."""

    listing_id: str
    vendor_id: str
    title: str
    unit_price: int     # minor units, current listing price
    quantity: int
    stock: int          # listing stock at read time
    is_active: bool = True

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    @property
    def is_purchasable(self) -> bool:
        return self.is_active and 0 < self.quantity <= self.stock


@dataclass(frozen=True)
class CartTotals:
    subtotal: int
    shipping: int
    tax: int
    total: int

    @classmethod
    def zero(cls) -> "CartTotals":
        return cls(subtotal=0, shipping=0, tax=0, total=0)

    def __add__(self, other: "CartTotals") -> "CartTotals":
        return CartTotals(
            subtotal=self.subtotal + other.subtotal,
            shipping=self.shipping + other.shipping,
            tax=self.tax + other.tax,
            total=self.total + other.total,
        )
