"""OrderApplicationService: order placement and every order status change.

Each write method is one transaction: the order row is locked with
SELECT ... FOR UPDATE, the transition is checked against the state machine,
applied with a conditional UPDATE, and the matching escrow/ledger/stock
moves run before a single commit. Any failure rolls all of it back.

Orders belonging to another buyer or vendor are reported as not found.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bm_cart.application.schemas import CartItemOut, TotalsOut
from src.bm_cart.domain.aggregator import compute_totals, group_by_vendor
from src.bm_cart.domain.models import CartItem, CartTotals
from src.bm_cart.domain.rate_rules import FlatRateRules, RateRulesProtocol
from src.bm_cart.domain.repository import CartRepositoryProtocol
from src.bm_cart.infrastructure.persistence import CartRepository
from src.bm_catalogue.domain.repository import ListingRepositoryProtocol
from src.bm_catalogue.infrastructure.persistence import ListingRepository
from src.bm_common.enums import OrderStatus
from src.bm_common.errors import (
    EmptyCartError,
    ListingInactiveError,
    ListingNotFoundError,
    OrderNotFoundError,
    OrderTransitionError,
    OutOfStockError,
    ValidationError,
)
from src.bm_common.id_generator import generate_id
from src.bm_common.money import to_display
from src.bm_common.pagination import cursor_decode, cursor_encode
from src.bm_escrow.domain.controller import EscrowController
from src.bm_escrow.domain.models import Escrow
from src.bm_escrow.domain.repository import EscrowRepositoryProtocol
from src.bm_escrow.infrastructure.persistence import EscrowRepository
from src.bm_order.application.schemas import (
    CheckoutGroup,
    CheckoutResponse,
    OrderListResponse,
    OrderOut,
    PlaceOrderResponse,
    VendorDashboardResponse,
)
from src.bm_order.domain.models import Order, OrderItem
from src.bm_order.domain.repository import OrderRepositoryProtocol
from src.bm_order.domain.state_machine import CANCELLABLE
from src.bm_order.domain.transitions import apply_transition
from src.bm_order.infrastructure.persistence import OrderRepository
from src.bm_wallet.domain.repository import WalletRepositoryProtocol
from src.bm_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

_VENDOR_TARGETS = frozenset({OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED})


class OrderApplicationService:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        cart_repo: CartRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        escrow_repo: EscrowRepositoryProtocol | None = None,
        rules: RateRulesProtocol | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._carts: CartRepositoryProtocol = cart_repo or CartRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._rules: RateRulesProtocol = rules or FlatRateRules.from_settings()
        self._escrow = EscrowController(escrow_repo or EscrowRepository(), self._wallets)

    # ------------------------------------------------------------------
    # Checkout and placement
    # ------------------------------------------------------------------

    async def checkout(self, db: AsyncSession, buyer_id: str) -> CheckoutResponse:
        """Read-only preview of the orders place_order would create."""
        items = await self._carts.list_items(db, buyer_id)
        if not items:
            raise EmptyCartError()
        available = [item for item in items if item.is_purchasable]
        unavailable = [item for item in items if not item.is_purchasable]

        groups: list[CheckoutGroup] = []
        grand_total = 0
        for vendor_id, group in group_by_vendor(available).items():
            totals = compute_totals(group, self._rules)
            grand_total += totals.total
            groups.append(
                CheckoutGroup(
                    vendor_id=vendor_id,
                    items=[CartItemOut.from_domain(item) for item in group],
                    totals=TotalsOut.from_totals(totals, settings.DEFAULT_CURRENCY),
                )
            )

        wallet = await self._wallets.get_by_owner(db, buyer_id)
        balance = wallet.balance if wallet else 0
        sufficient = balance >= grand_total
        return CheckoutResponse(
            groups=groups,
            unavailable_items=[CartItemOut.from_domain(item) for item in unavailable],
            grand_total=grand_total,
            grand_total_display=to_display(grand_total, settings.DEFAULT_CURRENCY),
            wallet_balance=balance,
            sufficient_funds=sufficient,
            can_place_order=sufficient and not unavailable,
        )

    async def place_order(
        self,
        db: AsyncSession,
        buyer_id: str,
        shipping_address: str,
        notes: str | None = None,
    ) -> PlaceOrderResponse:
        """Turn the cart into one pending order per vendor with funds held in escrow."""
        try:
            # Claiming removes the cart rows, so a concurrent placement finds nothing
            items = await self._carts.claim_items(db, buyer_id)
            if not items:
                raise EmptyCartError()
            if any(item.vendor_id == buyer_id for item in items):
                raise ValidationError("Vendors cannot buy their own listings")

            wallet = await self._wallets.get_or_create(db, buyer_id, settings.DEFAULT_CURRENCY)
            placed: list[Order] = []
            for vendor_id, group in group_by_vendor(items).items():
                totals = compute_totals(group, self._rules)
                for item in group:
                    await self._reserve_stock(db, item)
                order = await self._orders.save(
                    db, self._new_order(buyer_id, vendor_id, group, totals, shipping_address, notes)
                )
                await self._escrow.hold(db, order, wallet.id)
                placed.append(order)

            wallet_after = await self._wallets.get_by_id(db, wallet.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        grand_total = sum(order.total for order in placed)
        logger.info(
            "Buyer %s placed %d order(s) totalling %d", buyer_id, len(placed), grand_total
        )
        return PlaceOrderResponse(
            orders=[OrderOut.from_domain(order) for order in placed],
            grand_total=grand_total,
            grand_total_display=to_display(grand_total, settings.DEFAULT_CURRENCY),
            wallet_balance=wallet_after.balance if wallet_after else 0,
            wallet_locked_balance=wallet_after.locked_balance if wallet_after else 0,
        )

    async def _reserve_stock(self, db: AsyncSession, item: CartItem) -> None:
        if await self._listings.reserve_stock(db, item.listing_id, item.quantity) is not None:
            return
        listing = await self._listings.get_by_id(db, item.listing_id)
        if listing is None:
            raise ListingNotFoundError(item.listing_id)
        if not listing.is_active:
            raise ListingInactiveError(item.listing_id)
        raise OutOfStockError(item.listing_id, item.quantity, listing.stock)

    @staticmethod
    def _new_order(
        buyer_id: str,
        vendor_id: str,
        group: list[CartItem],
        totals: CartTotals,
        shipping_address: str,
        notes: str | None,
    ) -> Order:
        return Order(
            id=generate_id(),
            buyer_id=buyer_id,
            vendor_id=vendor_id,
            status=OrderStatus.PENDING.value,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            tax=totals.tax,
            total=totals.total,
            currency=settings.DEFAULT_CURRENCY,
            shipping_address=shipping_address,
            notes=notes,
            items=[
                OrderItem(
                    listing_id=item.listing_id,
                    title=item.title,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in group
            ],
        )

    # ------------------------------------------------------------------
    # Buyer transitions
    # ------------------------------------------------------------------

    async def pay_with_wallet(self, db: AsyncSession, buyer_id: str, order_id: str) -> OrderOut:
        """pending -> paid. Funds were locked at placement, so no money moves here."""
        try:
            order = await self._lock_buyer_order(db, buyer_id, order_id)
            updated = await apply_transition(db, self._orders, order, OrderStatus.PAID)
            escrow = await self._escrow.get(db, order_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return OrderOut.from_domain(updated, escrow)

    async def cancel_order(
        self, db: AsyncSession, buyer_id: str, order_id: str, reason: str | None = None
    ) -> OrderOut:
        try:
            order = await self._lock_buyer_order(db, buyer_id, order_id)
            updated, escrow = await self._cancel(db, order, reason or "Cancelled by buyer")
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return OrderOut.from_domain(updated, escrow)

    async def confirm_delivery(self, db: AsyncSession, buyer_id: str, order_id: str) -> OrderOut:
        """shipped -> delivered, releasing the escrow to the vendor."""
        try:
            order = await self._lock_buyer_order(db, buyer_id, order_id)
            updated = await apply_transition(db, self._orders, order, OrderStatus.DELIVERED)
            escrow = await self._escrow.release(db, updated)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return OrderOut.from_domain(updated, escrow)

    # ------------------------------------------------------------------
    # Vendor transitions
    # ------------------------------------------------------------------

    async def vendor_update_status(
        self,
        db: AsyncSession,
        vendor_id: str,
        order_id: str,
        target: str,
        tracking_number: str | None = None,
        reason: str | None = None,
    ) -> OrderOut:
        target_status = OrderStatus(target)
        if target_status not in _VENDOR_TARGETS:
            raise ValidationError(f"Vendors cannot set order status to {target}")
        try:
            order = await self._orders.get_for_update(db, order_id)
            if order is None or order.vendor_id != vendor_id:
                raise OrderNotFoundError(order_id)
            if target_status is OrderStatus.CANCELLED:
                updated, escrow = await self._cancel(db, order, reason or "Cancelled by vendor")
            else:
                updated = await apply_transition(
                    db, self._orders, order, target_status, tracking_number=tracking_number
                )
                escrow = await self._escrow.get(db, order_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return OrderOut.from_domain(updated, escrow)

    # ------------------------------------------------------------------
    # Helpers (caller owns the transaction)
    # ------------------------------------------------------------------

    async def _cancel(
        self, db: AsyncSession, order: Order, reason: str
    ) -> tuple[Order, Escrow]:
        if OrderStatus(order.status) not in CANCELLABLE:
            raise OrderTransitionError(order.id, order.status, OrderStatus.CANCELLED.value)
        updated = await apply_transition(
            db, self._orders, order, OrderStatus.CANCELLED, cancel_reason=reason
        )
        escrow = await self._escrow.refund(db, updated)
        for item in updated.items:
            await self._listings.restore_stock(db, item.listing_id, item.quantity)
        return updated, escrow

    async def _lock_buyer_order(self, db: AsyncSession, buyer_id: str, order_id: str) -> Order:
        order = await self._orders.get_for_update(db, order_id)
        if order is None or order.buyer_id != buyer_id:
            raise OrderNotFoundError(order_id)
        return order

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_order(self, db: AsyncSession, buyer_id: str, order_id: str) -> OrderOut:
        order = await self._orders.get_by_id(db, order_id)
        if order is None or order.buyer_id != buyer_id:
            raise OrderNotFoundError(order_id)
        return OrderOut.from_domain(order, await self._escrow.get(db, order_id))

    async def get_vendor_order(self, db: AsyncSession, vendor_id: str, order_id: str) -> OrderOut:
        order = await self._orders.get_by_id(db, order_id)
        if order is None or order.vendor_id != vendor_id:
            raise OrderNotFoundError(order_id)
        return OrderOut.from_domain(order, await self._escrow.get(db, order_id))

    async def list_orders(
        self,
        db: AsyncSession,
        buyer_id: str,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> OrderListResponse:
        orders = await self._orders.list_by_buyer(
            db, buyer_id, status, cursor_decode(cursor), limit + 1
        )
        return self._page(orders, limit)

    async def list_vendor_orders(
        self,
        db: AsyncSession,
        vendor_id: str,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> OrderListResponse:
        orders = await self._orders.list_by_vendor(
            db, vendor_id, status, cursor_decode(cursor), limit + 1
        )
        return self._page(orders, limit)

    @staticmethod
    def _page(orders: list[Order], limit: int) -> OrderListResponse:
        has_more = len(orders) > limit
        page = orders[:limit]
        return OrderListResponse(
            items=[OrderOut.from_domain(order) for order in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def vendor_dashboard(self, db: AsyncSession, vendor_id: str) -> VendorDashboardResponse:
        total_listings, active_listings = await self._listings.count_for_vendor(db, vendor_id)
        stats = await self._orders.vendor_stats(db, vendor_id)
        wallet = await self._wallets.get_by_owner(db, vendor_id)
        return VendorDashboardResponse(
            total_listings=total_listings,
            active_listings=active_listings,
            total_orders=stats.total_orders,
            pending_orders=stats.pending_orders,
            total_sales=stats.total_sales,
            total_sales_display=to_display(stats.total_sales, settings.DEFAULT_CURRENCY),
            wallet_balance=wallet.balance if wallet else 0,
        )
