"""bm_cart REST API: buyer cart, JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_cart.application.schemas import AddToCartRequest, UpdateCartRequest
from src.bm_cart.application.service import CartApplicationService
from src.bm_common.database import get_db_session
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_current_user
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/cart", tags=["cart"])

_service = CartApplicationService()


@router.get("")
async def view_cart(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.view(db, str(current_user.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/summary")
async def cart_summary(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.summary(db, str(current_user.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/add/{listing_id}")
async def add_to_cart(
    listing_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: AddToCartRequest | None = None,
) -> ApiResponse:
    quantity = body.quantity if body else 1
    data = await _service.add(db, str(current_user.id), listing_id, quantity)
    return success_response(data.model_dump(), get_request_id(request), "Added to cart")


@router.post("/update/{listing_id}")
async def update_cart_item(
    listing_id: str,
    body: UpdateCartRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update(db, str(current_user.id), listing_id, body.quantity)
    return success_response(data.model_dump(), get_request_id(request), "Cart updated")


@router.delete("/remove/{listing_id}")
async def remove_cart_item(
    listing_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.remove(db, str(current_user.id), listing_id)
    return success_response(data.model_dump(), get_request_id(request), "Removed from cart")


@router.post("/clear")
async def clear_cart(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    removed = await _service.clear(db, str(current_user.id))
    return success_response({"removed_items": removed}, get_request_id(request), "Cart cleared")
