"""WishlistApplicationService: saved listings and the move into the cart.

Saving is idempotent. Only active listings can be saved, but a saved listing
that is later deactivated stays on the wishlist, shown as out of stock.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bm_cart.application.service import CartApplicationService
from src.bm_catalogue.domain.repository import ListingRepositoryProtocol
from src.bm_catalogue.infrastructure.persistence import ListingRepository
from src.bm_common.errors import (
    ListingInactiveError,
    ListingNotFoundError,
    WishlistItemNotFoundError,
)
from src.bm_wishlist.application.schemas import (
    MoveToCartResponse,
    WishlistItemOut,
    WishlistResponse,
    WishlistStateResponse,
)
from src.bm_wishlist.domain.repository import WishlistRepositoryProtocol
from src.bm_wishlist.infrastructure.persistence import WishlistRepository

logger = logging.getLogger(__name__)


class WishlistApplicationService:
    def __init__(
        self,
        repo: WishlistRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        cart_service: CartApplicationService | None = None,
    ) -> None:
        self._repo: WishlistRepositoryProtocol = repo or WishlistRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._cart = cart_service or CartApplicationService(listing_repo=self._listings)

    async def view(self, db: AsyncSession, buyer_id: str) -> WishlistResponse:
        items = await self._repo.list_items(db, buyer_id)
        return WishlistResponse(
            items=[WishlistItemOut.from_domain(item, settings.DEFAULT_CURRENCY) for item in items],
            count=len(items),
        )

    async def count(self, db: AsyncSession, buyer_id: str) -> int:
        return await self._repo.count(db, buyer_id)

    async def add(self, db: AsyncSession, buyer_id: str, listing_id: str) -> WishlistStateResponse:
        try:
            await self._save(db, buyer_id, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return await self._state(db, buyer_id, listing_id, True)

    async def remove(
        self, db: AsyncSession, buyer_id: str, listing_id: str
    ) -> WishlistStateResponse:
        try:
            if not await self._repo.remove(db, buyer_id, listing_id):
                raise WishlistItemNotFoundError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return await self._state(db, buyer_id, listing_id, False)

    async def toggle(
        self, db: AsyncSession, buyer_id: str, listing_id: str
    ) -> WishlistStateResponse:
        try:
            saved = not await self._repo.remove(db, buyer_id, listing_id)
            if saved:
                await self._save(db, buyer_id, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return await self._state(db, buyer_id, listing_id, saved)

    async def move_to_cart(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int = 1
    ) -> MoveToCartResponse:
        """Add the saved listing to the cart, then drop it from the wishlist.

        The cart add runs first with its own stock and availability checks; if
        it fails the wishlist is left as it was.
        """
        if not await self._repo.contains(db, buyer_id, listing_id):
            raise WishlistItemNotFoundError(listing_id)
        cart = await self._cart.add(db, buyer_id, listing_id, quantity)
        try:
            await self._repo.remove(db, buyer_id, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.debug("Buyer %s moved %s from wishlist to cart", buyer_id, listing_id)
        return MoveToCartResponse(cart=cart, wishlist_count=await self._repo.count(db, buyer_id))

    async def _save(self, db: AsyncSession, buyer_id: str, listing_id: str) -> None:
        listing = await self._listings.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if not listing.is_active:
            raise ListingInactiveError(listing_id)
        await self._repo.add(db, buyer_id, listing_id)

    async def _state(
        self, db: AsyncSession, buyer_id: str, listing_id: str, in_wishlist: bool
    ) -> WishlistStateResponse:
        return WishlistStateResponse(
            listing_id=listing_id,
            in_wishlist=in_wishlist,
            count=await self._repo.count(db, buyer_id),
        )
