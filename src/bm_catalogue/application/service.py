"""ListingApplicationService: public browse/detail, categories and vendor listing CRUD.

Vendors only ever see and mutate their own listings: a listing owned by
someone else is reported as not found.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bm_catalogue.application.schemas import (
    CategoryDetailResponse,
    CategoryListResponse,
    CategoryOut,
    CreateListingRequest,
    ListingListResponse,
    ListingOut,
    UpdateListingRequest,
)
from src.bm_catalogue.domain.models import BrowseFilter, Listing, category_slug
from src.bm_catalogue.domain.repository import ListingRepositoryProtocol
from src.bm_catalogue.infrastructure.persistence import SORTS, ListingRepository
from src.bm_common.errors import CategoryNotFoundError, ListingNotFoundError, ValidationError
from src.bm_common.id_generator import generate_id
from src.bm_common.pagination import cursor_decode, cursor_encode, keyset_decode, keyset_encode

logger = logging.getLogger(__name__)


def _sort_value(listing: Listing, sort: str) -> str | int:
    column = SORTS[sort][0]
    value = getattr(listing, column)
    return value.isoformat() if isinstance(value, datetime) else value


def _parse_keyset(cursor: str | None, sort: str) -> tuple[Any, str] | None:
    decoded = keyset_decode(cursor)
    if decoded is None:
        return None
    value, last_id = decoded
    try:
        if SORTS[sort][2] == "TIMESTAMPTZ":
            # asyncpg needs a datetime object for TIMESTAMPTZ, not an ISO string
            return datetime.fromisoformat(str(value)), last_id
        return int(value), last_id
    except (TypeError, ValueError):
        return None


class ListingApplicationService:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    # ------------------------------------------------------------------
    # Public marketplace
    # ------------------------------------------------------------------

    async def browse(
        self,
        db: AsyncSession,
        filters: BrowseFilter,
        sort: str,
        cursor: str | None,
        limit: int,
    ) -> ListingListResponse:
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise ValidationError("min_price cannot exceed max_price")
        listings = await self._repo.browse(
            db, filters, sort, _parse_keyset(cursor, sort), limit + 1
        )
        has_more = len(listings) > limit
        page = listings[:limit]
        next_cursor = (
            keyset_encode(_sort_value(page[-1], sort), page[-1].id)
            if has_more and page
            else None
        )
        return ListingListResponse(
            items=[ListingOut.from_domain(item, settings.DEFAULT_CURRENCY) for item in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def view(self, db: AsyncSession, listing_id: str) -> ListingOut:
        """Public detail; counts a view. Inactive listings are not visible."""
        try:
            listing = await self._repo.record_view(db, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(listing, settings.DEFAULT_CURRENCY)

    async def categories(self, db: AsyncSession) -> CategoryListResponse:
        return CategoryListResponse(
            items=[CategoryOut.from_domain(c) for c in await self._repo.list_categories(db)]
        )

    async def category(
        self, db: AsyncSession, slug: str, sort: str, cursor: str | None, limit: int
    ) -> CategoryDetailResponse:
        """A category with one page of its active listings."""
        found = await self._repo.get_category(db, category_slug(slug))
        if found is None:
            raise CategoryNotFoundError(slug)
        listings = await self.browse(db, BrowseFilter(category=found.slug), sort, cursor, limit)
        return CategoryDetailResponse(category=CategoryOut.from_domain(found), listings=listings)

    # ------------------------------------------------------------------
    # Vendor listings
    # ------------------------------------------------------------------

    async def list_for_vendor(
        self, db: AsyncSession, vendor_id: str, cursor: str | None, limit: int
    ) -> ListingListResponse:
        listings = await self._repo.list_by_vendor(
            db, vendor_id, cursor_decode(cursor), limit + 1
        )
        has_more = len(listings) > limit
        page = listings[:limit]
        return ListingListResponse(
            items=[ListingOut.from_domain(item, settings.DEFAULT_CURRENCY) for item in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def get_for_vendor(
        self, db: AsyncSession, vendor_id: str, listing_id: str
    ) -> ListingOut:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None or listing.vendor_id != vendor_id:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(listing, settings.DEFAULT_CURRENCY)

    async def create(
        self, db: AsyncSession, vendor_id: str, req: CreateListingRequest
    ) -> ListingOut:
        listing = Listing(
            id=generate_id(),
            vendor_id=vendor_id,
            title=req.title,
            description=req.description,
            category=req.category,
            condition=req.condition,
            price=req.price,
            stock=req.stock,
            is_active=req.is_active,
        )
        try:
            created = await self._repo.create(db, listing)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Vendor %s created listing %s", vendor_id, created.id)
        return ListingOut.from_domain(created, settings.DEFAULT_CURRENCY)

    async def update(
        self,
        db: AsyncSession,
        vendor_id: str,
        listing_id: str,
        req: UpdateListingRequest,
    ) -> ListingOut:
        try:
            updated = await self._repo.update(
                db, listing_id, vendor_id, req.model_dump(exclude_none=True)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(updated, settings.DEFAULT_CURRENCY)

    async def delete(self, db: AsyncSession, vendor_id: str, listing_id: str) -> None:
        try:
            deleted = await self._repo.delete(db, listing_id, vendor_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if not deleted:
            raise ListingNotFoundError(listing_id)
        logger.info("Vendor %s deleted listing %s", vendor_id, listing_id)

    async def toggle_status(
        self, db: AsyncSession, vendor_id: str, listing_id: str
    ) -> ListingOut:
        try:
            listing = await self._repo.toggle_active(db, listing_id, vendor_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(listing, settings.DEFAULT_CURRENCY)
