"""bm_wishlist REST API: buyer wishlist, JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.database import get_db_session
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_current_user
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel
from src.bm_wishlist.application.schemas import MoveToCartRequest
from src.bm_wishlist.application.service import WishlistApplicationService

router = APIRouter(prefix="/wishlist", tags=["wishlist"])

_service = WishlistApplicationService()


@router.get("")
async def view_wishlist(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.view(db, str(current_user.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/count")
async def wishlist_count(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    count = await _service.count(db, str(current_user.id))
    return success_response({"count": count}, get_request_id(request))


@router.post("/add/{listing_id}")
async def add_to_wishlist(
    listing_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.add(db, str(current_user.id), listing_id)
    return success_response(data.model_dump(), get_request_id(request), "Added to wishlist")


@router.delete("/remove/{listing_id}")
async def remove_from_wishlist(
    listing_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.remove(db, str(current_user.id), listing_id)
    return success_response(data.model_dump(), get_request_id(request), "Removed from wishlist")


@router.post("/toggle/{listing_id}")
async def toggle_wishlist(
    listing_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.toggle(db, str(current_user.id), listing_id)
    message = "Added to wishlist" if data.in_wishlist else "Removed from wishlist"
    return success_response(data.model_dump(), get_request_id(request), message)


@router.post("/move-to-cart/{listing_id}")
async def move_to_cart(
    listing_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: MoveToCartRequest | None = None,
) -> ApiResponse:
    quantity = body.quantity if body else 1
    data = await _service.move_to_cart(db, str(current_user.id), listing_id, quantity)
    return success_response(data.model_dump(), get_request_id(request), "Moved to cart")
