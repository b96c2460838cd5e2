"""Cart Aggregator: pure totals computation, no I/O.

compute_totals prices one shipment (a single vendor's items). Carts spanning
several vendors become one order per vendor, so compute_cart_totals sums the
per-vendor results and pays shipping once per vendor.
"""

from collections.abc import Sequence

from src.bm_cart.domain.models import CartItem, CartTotals
from src.bm_cart.domain.rate_rules import RateRulesProtocol
from src.bm_common.errors import ListingInactiveError, OutOfStockError, ValidationError


def validate_item(item: CartItem) -> None:
    """Raise if the item cannot be bought as-is."""
    if item.quantity <= 0:
        raise ValidationError(f"Quantity must be positive for listing {item.listing_id}")
    if not item.is_active:
        raise ListingInactiveError(item.listing_id)
    if item.stock <= 0 or item.quantity > item.stock:
        raise OutOfStockError(item.listing_id, item.quantity, max(item.stock, 0))


def compute_totals(items: Sequence[CartItem], rules: RateRulesProtocol) -> CartTotals:
    """Totals for one shipment. An empty item list totals to all zeros."""
    if not items:
        return CartTotals.zero()
    for item in items:
        validate_item(item)
    subtotal = sum(item.line_total for item in items)
    shipping = rules.shipping(subtotal)
    tax = rules.tax(subtotal)
    return CartTotals(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=subtotal + shipping + tax,
    )


def group_by_vendor(items: Sequence[CartItem]) -> dict[str, list[CartItem]]:
    """Group items by vendor, preserving first-seen vendor order."""
    groups: dict[str, list[CartItem]] = {}
    for item in items:
        groups.setdefault(item.vendor_id, []).append(item)
    return groups


def compute_cart_totals(items: Sequence[CartItem], rules: RateRulesProtocol) -> CartTotals:
    totals = CartTotals.zero()
    for group in group_by_vendor(items).values():
        totals = totals + compute_totals(group, rules)
    return totals
