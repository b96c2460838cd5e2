"""Pydantic schemas for the bm_wishlist API."""

from pydantic import BaseModel, Field

from src.bm_cart.application.schemas import CartResponse
from src.bm_common.datetime_utils import iso_or_none
from src.bm_common.money import to_display
from src.bm_wishlist.domain.models import WishlistItem


class MoveToCartRequest(BaseModel):
    quantity: int = Field(1, ge=1, le=1000)


class WishlistItemOut(BaseModel):
    listing_id: str
    vendor_id: str
    title: str
    price: int
    price_display: str
    in_stock: bool
    added_at: str | None

    @classmethod
    def from_domain(cls, item: WishlistItem, currency: str) -> "WishlistItemOut":
        return cls(
            listing_id=item.listing_id,
            vendor_id=item.vendor_id,
            title=item.title,
            price=item.price,
            price_display=to_display(item.price, currency),
            in_stock=item.in_stock,
            added_at=iso_or_none(item.created_at),
        )


class WishlistResponse(BaseModel):
    items: list[WishlistItemOut]
    count: int


class WishlistStateResponse(BaseModel):
    listing_id: str
    in_wishlist: bool
    count: int


class MoveToCartResponse(BaseModel):
    cart: CartResponse
    wishlist_count: int
