"""Cart Aggregator and rate rules: pure functions, no I/O."""

import pytest

from src.bm_cart.domain.aggregator import (
    compute_cart_totals,
    compute_totals,
    group_by_vendor,
    validate_item,
)
from src.bm_cart.domain.models import CartItem, CartTotals
from src.bm_cart.domain.rate_rules import FlatRateRules
from src.bm_common.errors import ListingInactiveError, OutOfStockError, ValidationError

SHIPPING = 500_000
RULES = FlatRateRules(flat_fee=SHIPPING)


def _item(
    listing_id: str = "L1",
    vendor_id: str = "v1",
    unit_price: int = 4_500_000,
    quantity: int = 2,
    stock: int = 10,
    is_active: bool = True,
) -> CartItem:
    return CartItem(listing_id, vendor_id, f"Item {listing_id}", unit_price, quantity, stock, is_active)


class TestComputeTotals:
    def test_single_vendor_order(self) -> None:
        totals = compute_totals([_item()], RULES)
        assert totals == CartTotals(subtotal=9_000_000, shipping=SHIPPING, tax=0, total=9_500_000)

    def test_total_is_sum_of_parts(self) -> None:
        rules = FlatRateRules(flat_fee=SHIPPING, tax_rate_bps=1800)
        totals = compute_totals([_item(unit_price=333, quantity=1)], rules)
        assert totals.tax == 60
        assert totals.total == totals.subtotal + totals.shipping + totals.tax

    def test_empty_is_zero(self) -> None:
        assert compute_totals([], RULES) == CartTotals.zero()

    def test_free_shipping_threshold(self) -> None:
        rules = FlatRateRules(flat_fee=SHIPPING, free_shipping_threshold=5_000_000)
        assert compute_totals([_item()], rules).shipping == 0
        assert compute_totals([_item(quantity=1, unit_price=100)], rules).shipping == SHIPPING

    def test_rejects_unavailable_item(self) -> None:
        with pytest.raises(OutOfStockError):
            compute_totals([_item(quantity=11)], RULES)


class TestValidateItem:
    def test_zero_quantity(self) -> None:
        with pytest.raises(ValidationError):
            validate_item(_item(quantity=0))

    def test_inactive(self) -> None:
        with pytest.raises(ListingInactiveError):
            validate_item(_item(is_active=False))

    def test_sold_out(self) -> None:
        with pytest.raises(OutOfStockError):
            validate_item(_item(stock=0, quantity=1))

    def test_exact_stock_is_fine(self) -> None:
        validate_item(_item(stock=2, quantity=2))


class TestGrouping:
    def test_preserves_first_seen_vendor_order(self) -> None:
        items = [_item("A", "v2"), _item("B", "v1"), _item("C", "v2")]
        groups = group_by_vendor(items)
        assert list(groups) == ["v2", "v1"]
        assert [i.listing_id for i in groups["v2"]] == ["A", "C"]

    def test_shipping_charged_per_vendor(self) -> None:
        items = [_item("A", "v1", 1000, 1), _item("B", "v2", 2000, 1), _item("C", "v1", 500, 2)]
        totals = compute_cart_totals(items, RULES)
        assert totals.subtotal == 4000
        assert totals.shipping == 2 * SHIPPING
        assert totals.total == 4000 + 2 * SHIPPING


class TestFlatRateRules:
    def test_negative_values_rejected(self) -> None:
        with pytest.raises(ValueError):
            FlatRateRules(flat_fee=-1)

    def test_from_settings(self) -> None:
        rules = FlatRateRules.from_settings()
        assert rules.flat_fee == 500_000
        assert rules.tax_rate_bps == 0
