"""Repository Protocol for listings."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_catalogue.domain.models import BrowseFilter, Category, Listing


class ListingRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def browse(
        self,
        db: AsyncSession,
        filters: BrowseFilter,
        sort: str,
        cursor_key: tuple[Any, str] | None,
        limit: int,
    ) -> list[Listing]: ...

    async def record_view(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def list_by_vendor(
        self,
        db: AsyncSession,
        vendor_id: str,
        cursor_id: str | None,
        limit: int,
    ) -> list[Listing]: ...

    async def create(self, db: AsyncSession, listing: Listing) -> Listing: ...

    async def update(
        self, db: AsyncSession, listing_id: str, vendor_id: str, fields: dict[str, Any]
    ) -> Listing | None: ...

    async def delete(self, db: AsyncSession, listing_id: str, vendor_id: str) -> bool: ...

    async def toggle_active(
        self, db: AsyncSession, listing_id: str, vendor_id: str
    ) -> Listing | None: ...

    async def reserve_stock(
        self, db: AsyncSession, listing_id: str, quantity: int
    ) -> Listing | None:
        """Decrement stock if the listing is active and has enough; None otherwise."""
        ...

    async def restore_stock(self, db: AsyncSession, listing_id: str, quantity: int) -> None: ...

    async def count_for_vendor(self, db: AsyncSession, vendor_id: str) -> tuple[int, int]:
        """(total_listings, active_listings)."""
        ...

    async def list_categories(self, db: AsyncSession) -> list[Category]:
        """Categories that have at least one active listing."""
        ...

    async def get_category(self, db: AsyncSession, slug: str) -> Category | None: ...
