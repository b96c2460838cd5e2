"""CartApplicationService against in-memory repositories."""

import pytest

from src.bm_cart.application.service import CartApplicationService
from src.bm_cart.domain.rate_rules import FlatRateRules
from src.bm_common.errors import (
    ListingInactiveError,
    ListingNotFoundError,
    NotFoundError,
    OutOfStockError,
)
from tests.fakes import Marketplace, make_listing


@pytest.fixture
def market() -> Marketplace:
    return Marketplace(
        make_listing("L1", "vendor-1", price=4_500_000, stock=3),
        make_listing("L2", "vendor-2", price=1_000_000, stock=5),
        make_listing("L3", "vendor-1", price=700_000, stock=5, is_active=False),
    )


@pytest.fixture
def service(market: Marketplace) -> CartApplicationService:
    return CartApplicationService(
        repo=market.carts,
        listing_repo=market.listings,
        rules=FlatRateRules(flat_fee=500_000),
    )


class TestAdd:
    async def test_add_accumulates(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        await service.add(market.db, "buyer", "L1", 1)
        cart = await service.add(market.db, "buyer", "L1", 2)
        assert cart.items[0].quantity == 3
        assert cart.totals.subtotal == 13_500_000

    async def test_beyond_stock(self, service: CartApplicationService, market: Marketplace) -> None:
        await service.add(market.db, "buyer", "L1", 2)
        with pytest.raises(OutOfStockError):
            await service.add(market.db, "buyer", "L1", 2)
        assert market.carts.rows[("buyer", "L1")] == 2

    async def test_inactive(self, service: CartApplicationService, market: Marketplace) -> None:
        with pytest.raises(ListingInactiveError):
            await service.add(market.db, "buyer", "L3", 1)

    async def test_unknown(self, service: CartApplicationService, market: Marketplace) -> None:
        with pytest.raises(ListingNotFoundError):
            await service.add(market.db, "buyer", "missing", 1)


class TestView:
    async def test_shipping_per_vendor(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        await service.add(market.db, "buyer", "L1", 1)
        cart = await service.add(market.db, "buyer", "L2", 2)
        assert cart.vendor_count == 2
        assert cart.totals.subtotal == 6_500_000
        assert cart.totals.shipping == 1_000_000
        assert cart.totals.total == 7_500_000
        assert cart.totals.total_display == "UGX 75,000.00"

    async def test_unavailable_items_flagged_and_not_priced(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        await service.add(market.db, "buyer", "L2", 1)
        market.listings.listings["L2"].is_active = False
        cart = await service.view(market.db, "buyer")
        assert cart.has_unavailable_items is True
        assert cart.items[0].available is False
        assert cart.totals.total == 0

    async def test_summary(self, service: CartApplicationService, market: Marketplace) -> None:
        await service.add(market.db, "buyer", "L1", 2)
        await service.add(market.db, "buyer", "L2", 1)
        summary = await service.summary(market.db, "buyer")
        assert summary.item_count == 3
        assert summary.distinct_items == 2

    async def test_empty(self, service: CartApplicationService, market: Marketplace) -> None:
        cart = await service.view(market.db, "buyer")
        assert cart.items == []
        assert cart.totals.total == 0


class TestEdit:
    async def test_update_sets_quantity(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        await service.add(market.db, "buyer", "L2", 1)
        cart = await service.update(market.db, "buyer", "L2", 4)
        assert cart.items[0].quantity == 4

    async def test_update_missing_row(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        with pytest.raises(NotFoundError):
            await service.update(market.db, "buyer", "L2", 1)

    async def test_update_beyond_stock(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        await service.add(market.db, "buyer", "L2", 1)
        with pytest.raises(OutOfStockError):
            await service.update(market.db, "buyer", "L2", 6)

    async def test_update_after_listing_deactivated(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        await service.add(market.db, "buyer", "L2", 1)
        market.listings.listings["L2"].is_active = False
        market.db.checkpoint()
        with pytest.raises(ListingInactiveError):
            await service.update(market.db, "buyer", "L2", 2)
        assert market.carts.rows[("buyer", "L2")] == 1

    async def test_remove_and_clear(
        self, service: CartApplicationService, market: Marketplace
    ) -> None:
        await service.add(market.db, "buyer", "L1", 1)
        await service.add(market.db, "buyer", "L2", 1)
        cart = await service.remove(market.db, "buyer", "L1")
        assert [i.listing_id for i in cart.items] == ["L2"]
        with pytest.raises(NotFoundError):
            await service.remove(market.db, "buyer", "L1")
        assert await service.clear(market.db, "buyer") == 1
