"""CartApplicationService: cart edits plus a priced view.

Stock is checked when an item is added or its quantity changed, and again
when the order is placed; the cart itself never reserves stock.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bm_cart.application.schemas import (
    CartItemOut,
    CartResponse,
    CartSummaryResponse,
    TotalsOut,
)
from src.bm_cart.domain.aggregator import compute_cart_totals, group_by_vendor
from src.bm_cart.domain.models import CartItem
from src.bm_cart.domain.rate_rules import FlatRateRules, RateRulesProtocol
from src.bm_cart.domain.repository import CartRepositoryProtocol
from src.bm_cart.infrastructure.persistence import CartRepository
from src.bm_catalogue.domain.repository import ListingRepositoryProtocol
from src.bm_catalogue.infrastructure.persistence import ListingRepository
from src.bm_common.errors import (
    ListingInactiveError,
    ListingNotFoundError,
    NotFoundError,
    OutOfStockError,
)

logger = logging.getLogger(__name__)


class CartApplicationService:
    def __init__(
        self,
        repo: CartRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        rules: RateRulesProtocol | None = None,
    ) -> None:
        self._repo: CartRepositoryProtocol = repo or CartRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._rules: RateRulesProtocol = rules or FlatRateRules.from_settings()

    def _priced(self, items: list[CartItem]) -> TotalsOut:
        purchasable = [item for item in items if item.is_purchasable]
        return TotalsOut.from_totals(
            compute_cart_totals(purchasable, self._rules), settings.DEFAULT_CURRENCY
        )

    async def view(self, db: AsyncSession, buyer_id: str) -> CartResponse:
        items = await self._repo.list_items(db, buyer_id)
        return CartResponse(
            items=[CartItemOut.from_domain(item) for item in items],
            totals=self._priced(items),
            vendor_count=len(group_by_vendor(items)),
            has_unavailable_items=any(not item.is_purchasable for item in items),
        )

    async def summary(self, db: AsyncSession, buyer_id: str) -> CartSummaryResponse:
        items = await self._repo.list_items(db, buyer_id)
        return CartSummaryResponse(
            item_count=sum(item.quantity for item in items),
            distinct_items=len(items),
            totals=self._priced(items),
        )

    async def add(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int
    ) -> CartResponse:
        try:
            listing = await self._listings.get_by_id(db, listing_id)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if not listing.is_active:
                raise ListingInactiveError(listing_id)
            existing = await self._repo.get_quantity(db, buyer_id, listing_id) or 0
            if existing + quantity > listing.stock:
                raise OutOfStockError(listing_id, existing + quantity, listing.stock)
            await self._repo.add_quantity(db, buyer_id, listing_id, quantity)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.debug("Buyer %s added %d x %s to cart", buyer_id, quantity, listing_id)
        return await self.view(db, buyer_id)

    async def update(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int
    ) -> CartResponse:
        try:
            listing = await self._listings.get_by_id(db, listing_id)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if not listing.is_active:
                raise ListingInactiveError(listing_id)
            if quantity > listing.stock:
                raise OutOfStockError(listing_id, quantity, listing.stock)
            if not await self._repo.set_quantity(db, buyer_id, listing_id, quantity):
                raise NotFoundError("Cart item", listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return await self.view(db, buyer_id)

    async def remove(self, db: AsyncSession, buyer_id: str, listing_id: str) -> CartResponse:
        try:
            if not await self._repo.remove(db, buyer_id, listing_id):
                raise NotFoundError("Cart item", listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return await self.view(db, buyer_id)

    async def clear(self, db: AsyncSession, buyer_id: str) -> int:
        try:
            removed = await self._repo.clear(db, buyer_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return removed
