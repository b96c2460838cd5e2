"""Pydantic schemas for the marketplace and vendor listing APIs."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from src.bm_catalogue.domain.models import Category, Listing, category_slug
from src.bm_common.datetime_utils import iso_or_none
from src.bm_common.money import to_display

ConditionLiteral = Literal["new", "used", "refurbished"]
SortLiteral = Literal["newest", "price_asc", "price_desc", "popular"]


def _to_slug(v: str) -> str:
    slug = category_slug(v)
    if not slug:
        raise ValueError("Category must contain a letter or digit")
    return slug


class CreateListingRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field("", max_length=5000)
    category: str = Field(..., min_length=1, max_length=100)
    condition: ConditionLiteral = "new"
    price: int = Field(..., gt=0, description="Unit price in minor units")
    stock: int = Field(..., ge=0)
    is_active: bool = True

    @field_validator("category")
    @classmethod
    def category_as_slug(cls, v: str) -> str:
        return _to_slug(v)


class UpdateListingRequest(BaseModel):
    title: str | None = Field(None, min_length=3, max_length=255)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, min_length=1, max_length=100)
    condition: ConditionLiteral | None = None
    price: int | None = Field(None, gt=0)
    stock: int | None = Field(None, ge=0)

    @field_validator("category")
    @classmethod
    def category_as_slug(cls, v: str | None) -> str | None:
        return _to_slug(v) if v is not None else None


class ListingOut(BaseModel):
    listing_id: str
    vendor_id: str
    title: str
    description: str
    category: str
    condition: str
    price: int
    price_display: str
    stock: int
    in_stock: bool
    is_active: bool
    view_count: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, listing: Listing, currency: str) -> "ListingOut":
        return cls(
            listing_id=listing.id,
            vendor_id=listing.vendor_id,
            title=listing.title,
            description=listing.description,
            category=listing.category,
            condition=listing.condition,
            price=listing.price,
            price_display=to_display(listing.price, currency),
            stock=listing.stock,
            in_stock=listing.stock > 0,
            is_active=listing.is_active,
            view_count=listing.view_count,
            created_at=iso_or_none(listing.created_at),
            updated_at=iso_or_none(listing.updated_at),
        )


class ListingListResponse(BaseModel):
    items: list[ListingOut]
    next_cursor: str | None
    has_more: bool


class CategoryOut(BaseModel):
    slug: str
    name: str
    listing_count: int

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryOut":
        return cls(slug=category.slug, name=category.name, listing_count=category.listing_count)


class CategoryListResponse(BaseModel):
    items: list[CategoryOut]


class CategoryDetailResponse(BaseModel):
    category: CategoryOut
    listings: ListingListResponse
