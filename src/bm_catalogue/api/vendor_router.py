"""Vendor listing management: vendor role required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_catalogue.application.schemas import CreateListingRequest, UpdateListingRequest
from src.bm_catalogue.application.service import ListingApplicationService
from src.bm_common.database import get_db_session
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import require_vendor
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/vendor/listings", tags=["vendor"])

_service = ListingApplicationService()


@router.get("")
async def list_listings(
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_for_vendor(db, str(vendor.id), cursor, limit)
    return success_response(data.model_dump(), get_request_id(request))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: CreateListingRequest,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create(db, str(vendor.id), body)
    return success_response(data.model_dump(), get_request_id(request), "Listing created")


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_for_vendor(db, str(vendor.id), listing_id)
    return success_response(data.model_dump(), get_request_id(request))


@router.put("/{listing_id}")
async def update_listing(
    listing_id: str,
    body: UpdateListingRequest,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update(db, str(vendor.id), listing_id, body)
    return success_response(data.model_dump(), get_request_id(request), "Listing updated")


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: str,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete(db, str(vendor.id), listing_id)
    return success_response(
        {"listing_id": listing_id}, get_request_id(request), "Listing deleted"
    )


@router.post("/{listing_id}/toggle-status")
async def toggle_listing_status(
    listing_id: str,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.toggle_status(db, str(vendor.id), listing_id)
    return success_response(data.model_dump(), get_request_id(request))
