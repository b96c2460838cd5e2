"""Vendor profile API: business details shown to buyers.

Reading is open to any vendor, including one rejected during vetting, so
the vetting status stays visible; editing requires a non-rejected profile.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.database import get_db_session
from src.bm_common.errors import VendorRequiredError
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_current_user, require_vendor
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel
from src.bm_gateway.user.schemas import UpdateVendorProfileRequest, VendorProfileInfo
from src.bm_gateway.user.service import UserService

router = APIRouter(prefix="/vendor/profile", tags=["vendor"])
_service = UserService()


@router.get("", response_model=ApiResponse, summary="Own vendor profile")
async def get_profile(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    profile = await _service.get_vendor_profile(current_user, db)
    if profile is None:
        raise VendorRequiredError("Vendor profile not found")
    return success_response(
        VendorProfileInfo.from_model(profile).model_dump(), get_request_id(request)
    )


@router.put("", response_model=ApiResponse, summary="Update business name or location")
async def update_profile(
    request: Request,
    body: UpdateVendorProfileRequest,
    vendor: Annotated[UserModel, Depends(require_vendor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    profile = await _service.update_vendor_profile(vendor, body, db)
    return success_response(
        VendorProfileInfo.from_model(profile).model_dump(),
        get_request_id(request),
        "Vendor profile updated",
    )
