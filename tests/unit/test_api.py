"""HTTP surface: envelopes, status codes and auth wiring.

Routers run against in-memory repositories: the DB session and the current
user are dependency overrides, and each router's module-level service is
swapped for one built on the fakes.
"""

import uuid
from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from src.bm_admin.api import router as admin_router
from src.bm_admin.application.service import AdminService
from src.bm_cart.api import router as cart_router
from src.bm_cart.application.service import CartApplicationService
from src.bm_cart.domain.rate_rules import FlatRateRules
from src.bm_catalogue.api import category_router
from src.bm_catalogue.api import router as marketplace_router
from src.bm_catalogue.application.service import ListingApplicationService
from src.bm_common.database import get_db_session
from src.bm_common.enums import OrderStatus
from src.bm_dispute.api import router as dispute_router
from src.bm_dispute.application.service import DisputeResolver
from src.bm_gateway.auth.dependencies import get_current_user
from src.bm_gateway.user.db_models import UserModel
from src.bm_order.api import router as order_router
from src.bm_order.application.service import OrderApplicationService
from src.bm_wallet.api import router as wallet_router
from src.bm_wallet.application.service import WalletApplicationService
from src.bm_wallet.infrastructure.payment_gateway import SimulatedPaymentGateway
from src.bm_wishlist.api import router as wishlist_router
from src.bm_wishlist.application.service import WishlistApplicationService
from src.main import app
from tests.fakes import Marketplace, make_listing


def _user(role: str = "buyer") -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.name = "Amina"
    user.email = f"{user.id.hex[:8]}@example.com"
    user.phone = "+256700000001"
    user.password_hash = "x"
    user.role = role
    user.is_active = True
    return user


@pytest.fixture
def market() -> Marketplace:
    return Marketplace(make_listing("L1", "vendor-1", price=5_000, stock=10))


@pytest.fixture
def buyer() -> UserModel:
    return _user()


@pytest.fixture
def wire(market: Marketplace, monkeypatch: pytest.MonkeyPatch) -> Marketplace:
    orders = OrderApplicationService(
        order_repo=market.orders,
        cart_repo=market.carts,
        listing_repo=market.listings,
        wallet_repo=market.wallets,
        escrow_repo=market.escrows,
        rules=FlatRateRules(flat_fee=0),
    )
    resolver = DisputeResolver(
        dispute_repo=market.disputes,
        order_repo=market.orders,
        escrow_repo=market.escrows,
        wallet_repo=market.wallets,
    )
    monkeypatch.setattr(order_router, "_service", orders)
    monkeypatch.setattr(dispute_router, "_resolver", resolver)
    monkeypatch.setattr(admin_router, "_service", AdminService(resolver))
    cart = CartApplicationService(market.carts, market.listings, FlatRateRules(flat_fee=0))
    monkeypatch.setattr(cart_router, "_service", cart)
    monkeypatch.setattr(
        wishlist_router,
        "_service",
        WishlistApplicationService(market.wishlist, market.listings, cart),
    )
    catalogue = ListingApplicationService(market.listings)
    monkeypatch.setattr(marketplace_router, "_service", catalogue)
    monkeypatch.setattr(category_router, "_service", catalogue)
    monkeypatch.setattr(
        wallet_router,
        "_service",
        WalletApplicationService(market.wallets, SimulatedPaymentGateway()),
    )

    async def _db() -> AsyncIterator[object]:
        yield market.db

    app.dependency_overrides[get_db_session] = _db
    yield market
    app.dependency_overrides.clear()


@pytest.fixture
async def api(wire: Marketplace, buyer: UserModel) -> AsyncIterator[AsyncClient]:
    app.dependency_overrides[get_current_user] = lambda: buyer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def anon(wire: Marketplace) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestEnvelope:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_success_envelope_echoes_request_id(self, anon: AsyncClient) -> None:
        resp = await anon.get("/api/v1/marketplace")
        body = resp.json()
        assert resp.status_code == 200
        assert body["code"] == 0
        assert body["request_id"] == resp.headers["X-Request-ID"]
        assert [i["listing_id"] for i in body["data"]["items"]] == ["L1"]

    async def test_app_error_envelope(self, anon: AsyncClient) -> None:
        resp = await anon.get("/api/v1/marketplace/missing")
        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == 3001
        assert body["data"] is None
        assert body["request_id"] == resp.headers["X-Request-ID"]

    async def test_query_validation_is_enveloped(self, anon: AsyncClient) -> None:
        resp = await anon.get("/api/v1/marketplace", params={"sort": "cheapest"})
        assert resp.status_code == 422
        assert resp.json()["code"] == 9003
        assert "sort" in resp.json()["message"]

    async def test_business_validation(self, anon: AsyncClient) -> None:
        resp = await anon.get("/api/v1/marketplace", params={"min_price": 500, "max_price": 100})
        assert resp.status_code == 422
        assert resp.json()["code"] == 9003

    async def test_missing_token_is_401(self, anon: AsyncClient) -> None:
        resp = await anon.get("/api/v1/wallet")
        assert resp.status_code == 401
        assert resp.json()["code"] == 401


class TestBuyerFlow:
    async def test_place_and_confirm(
        self, api: AsyncClient, wire: Marketplace, buyer: UserModel
    ) -> None:
        buyer_id = str(buyer.id)
        deposit = await api.post(
            "/api/v1/wallet/deposit", json={"amount": 10_000, "method": "mobile_money"}
        )
        assert deposit.status_code == 200
        assert deposit.json()["data"]["wallet"]["balance"] == 10_000

        added = await api.post("/api/v1/cart/add/L1", json={"quantity": 2})
        assert added.json()["data"]["totals"]["total"] == 10_000

        placed = await api.post(
            "/api/v1/orders/place", json={"shipping_address": "Plot 12, Kampala Road"}
        )
        assert placed.status_code == 201
        data = placed.json()["data"]
        assert data["wallet_balance"] == 0
        assert data["wallet_locked_balance"] == 10_000
        order_id = data["orders"][0]["order_id"]

        early = await api.post(f"/api/v1/orders/{order_id}/confirm-delivery")
        assert early.status_code == 409
        assert early.json()["code"] == 4002

        wire.orders.set_status(order_id, OrderStatus.SHIPPED)
        wire.db.checkpoint()
        confirmed = await api.post(f"/api/v1/orders/{order_id}/confirm-delivery")
        assert confirmed.status_code == 200
        assert confirmed.json()["data"]["escrow"]["status"] == "released"
        assert wire.balances(buyer_id) == (0, 0)
        assert wire.balances("vendor-1") == (10_000, 0)

    async def test_add_without_body_adds_one(self, api: AsyncClient) -> None:
        resp = await api.post("/api/v1/cart/add/L1")
        assert resp.json()["data"]["items"][0]["quantity"] == 1

    async def test_place_requires_address(self, api: AsyncClient) -> None:
        resp = await api.post("/api/v1/orders/place", json={"shipping_address": "x"})
        assert resp.status_code == 422
        assert "shipping_address" in resp.json()["message"]

    async def test_place_with_empty_cart(self, api: AsyncClient) -> None:
        resp = await api.post(
            "/api/v1/orders/place", json={"shipping_address": "Plot 12, Kampala Road"}
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 3003

    async def test_insufficient_funds(self, api: AsyncClient) -> None:
        await api.post("/api/v1/cart/add/L1", json={"quantity": 1})
        resp = await api.post(
            "/api/v1/orders/place", json={"shipping_address": "Plot 12, Kampala Road"}
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001

    async def test_deposit_must_be_positive(self, api: AsyncClient) -> None:
        resp = await api.post("/api/v1/wallet/deposit", json={"amount": 0})
        assert resp.status_code == 422
        assert resp.json()["code"] == 9003

    @pytest.mark.parametrize("path", ["/api/v1/wallet/deposit", "/api/v1/wallet/withdraw"])
    async def test_amount_has_an_upper_bound(
        self, api: AsyncClient, wire: Marketplace, path: str
    ) -> None:
        resp = await api.post(path, json={"amount": 10**12 + 1})
        assert resp.status_code == 422
        assert resp.json()["code"] == 9003
        assert wire.wallets.entries == []

    async def test_dispute_and_admin_refund(
        self, api: AsyncClient, wire: Marketplace, buyer: UserModel
    ) -> None:
        wire.wallets.fund(str(buyer.id), 5_000)
        wire.carts.rows[(str(buyer.id), "L1")] = 1
        wire.db.checkpoint()
        placed = await api.post(
            "/api/v1/orders/place", json={"shipping_address": "Plot 12, Kampala Road"}
        )
        order_id = placed.json()["data"]["orders"][0]["order_id"]
        await api.post(f"/api/v1/orders/{order_id}/pay-with-wallet")

        opened = await api.post(
            f"/api/v1/disputes/{order_id}",
            json={"reason": "Wrong item", "description": "Received a kettle instead of a phone."},
        )
        assert opened.status_code == 201
        dispute_id = opened.json()["data"]["dispute_id"]

        forbidden = await api.post(
            f"/api/v1/admin/disputes/{dispute_id}/resolve", json={"outcome": "refund"}
        )
        assert forbidden.status_code == 403
        assert forbidden.json()["code"] == 1007

        app.dependency_overrides[get_current_user] = lambda: _user("admin")
        resolved = await api.post(
            f"/api/v1/admin/disputes/{dispute_id}/resolve", json={"outcome": "refund"}
        )
        assert resolved.status_code == 200
        assert resolved.json()["data"]["outcome"] == "refund"

        again = await api.post(
            f"/api/v1/admin/disputes/{dispute_id}/resolve", json={"outcome": "refund"}
        )
        assert again.status_code == 409
        assert again.json()["code"] == 5002
        assert wire.balances(str(buyer.id)) == (5_000, 0)


class TestWishlistAndCategories:
    async def test_save_then_move_to_cart(self, api: AsyncClient, wire: Marketplace) -> None:
        saved = await api.post("/api/v1/wishlist/add/L1")
        assert saved.status_code == 200
        assert saved.json()["data"] == {"listing_id": "L1", "in_wishlist": True, "count": 1}

        listed = await api.get("/api/v1/wishlist")
        assert [i["listing_id"] for i in listed.json()["data"]["items"]] == ["L1"]

        moved = await api.post("/api/v1/wishlist/move-to-cart/L1")
        assert moved.status_code == 200
        assert moved.json()["data"]["wishlist_count"] == 0
        assert moved.json()["data"]["cart"]["items"][0]["quantity"] == 1

        count = await api.get("/api/v1/wishlist/count")
        assert count.json()["data"] == {"count": 0}

    async def test_remove_unsaved_is_404(self, api: AsyncClient) -> None:
        resp = await api.delete("/api/v1/wishlist/remove/L1")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3006

    async def test_wishlist_requires_login(self, anon: AsyncClient) -> None:
        resp = await anon.get("/api/v1/wishlist")
        assert resp.status_code == 401

    async def test_categories_are_public(self, anon: AsyncClient) -> None:
        listed = await anon.get("/api/v1/categories")
        assert listed.json()["data"]["items"] == [
            {"slug": "electronics", "name": "Electronics", "listing_count": 1}
        ]
        found = await anon.get("/api/v1/categories/Electronics")
        assert [i["listing_id"] for i in found.json()["data"]["listings"]["items"]] == ["L1"]

        missing = await anon.get("/api/v1/categories/garden")
        assert missing.status_code == 404
        assert missing.json()["code"] == 3005


class TestLogout:
    async def test_logout_acknowledges(self, api: AsyncClient) -> None:
        resp = await api.post("/api/v1/auth/logout")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Logged out"
        assert resp.json()["data"] is None

    async def test_logout_requires_token(self, anon: AsyncClient) -> None:
        resp = await anon.post("/api/v1/auth/logout")
        assert resp.status_code == 401
