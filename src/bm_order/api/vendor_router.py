"""Vendor order fulfilment and dashboard: vendor role required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.database import get_db_session
from src.bm_common.enums import OrderStatus
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import require_vendor
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel
from src.bm_order.application.schemas import VendorStatusRequest
from src.bm_order.application.service import OrderApplicationService

router = APIRouter(prefix="/vendor", tags=["vendor"])

_service = OrderApplicationService()


@router.get("/dashboard")
async def dashboard(
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.vendor_dashboard(db, str(vendor.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/orders")
async def list_vendor_orders(
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    order_status: OrderStatus | None = Query(None, alias="status"),
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_vendor_orders(
        db,
        str(vendor.id),
        order_status.value if order_status else None,
        cursor,
        limit,
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/orders/{order_id}")
async def get_vendor_order(
    order_id: str,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_vendor_order(db, str(vendor.id), order_id)
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: VendorStatusRequest,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.vendor_update_status(
        db, str(vendor.id), order_id, body.status, body.tracking_number, body.reason
    )
    return success_response(data.model_dump(), get_request_id(request), "Order status updated")
