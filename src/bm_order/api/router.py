"""Buyer order API: JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.database import get_db_session
from src.bm_common.enums import OrderStatus
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_current_user
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel
from src.bm_order.application.schemas import CancelOrderRequest, PlaceOrderRequest
from src.bm_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()


@router.get("")
async def list_orders(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    order_status: OrderStatus | None = Query(None, alias="status"),
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_orders(
        db,
        str(current_user.id),
        order_status.value if order_status else None,
        cursor,
        limit,
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/checkout")
async def checkout(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.checkout(db, str(current_user.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/place", status_code=status.HTTP_201_CREATED)
async def place_order(
    body: PlaceOrderRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.place_order(
        db, str(current_user.id), body.shipping_address, body.notes
    )
    return success_response(data.model_dump(), get_request_id(request), "Order placed")


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_order(db, str(current_user.id), order_id)
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: CancelOrderRequest | None = None,
) -> ApiResponse:
    data = await _service.cancel_order(
        db, str(current_user.id), order_id, body.reason if body else None
    )
    return success_response(data.model_dump(), get_request_id(request), "Order cancelled")


@router.post("/{order_id}/confirm-delivery")
async def confirm_delivery(
    order_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.confirm_delivery(db, str(current_user.id), order_id)
    return success_response(data.model_dump(), get_request_id(request), "Delivery confirmed")


@router.post("/{order_id}/pay-with-wallet")
async def pay_with_wallet(
    order_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.pay_with_wallet(db, str(current_user.id), order_id)
    return success_response(data.model_dump(), get_request_id(request), "Payment recorded")
