"""Domain models for bm_catalogue: pure dataclasses, no SQLAlchemy dependency."""

import re
from dataclasses import dataclass
from datetime import datetime

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def category_slug(name: str) -> str:
    """Categories are stored as slugs: "Home & Garden" -> "home-garden"."""
    return _NON_SLUG.sub("-", name.lower()).strip("-")


@dataclass
class Listing:
    id: str
    vendor_id: str               # vendor user id
    title: str
    description: str
    category: str
    condition: str               # ListingCondition value
    price: int                   # minor units, > 0
    stock: int                   # >= 0
    is_active: bool = True
    view_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_purchasable(self) -> bool:
        return self.is_active and self.stock > 0


@dataclass
class BrowseFilter:
    search: str | None = None
    category: str | None = None
    min_price: int | None = None
    max_price: int | None = None
    condition: str | None = None
    vendor_id: str | None = None


@dataclass(frozen=True)
class Category:
    slug: str
    listing_count: int   # active listings only

    @property
    def name(self) -> str:
        return self.slug.replace("-", " ").title()
