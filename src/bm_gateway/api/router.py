"""Auth API router: register, login, refresh, logout, current user, profile update.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bm_common.database import get_db_session
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_current_user
from src.bm_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel, VendorProfileModel
from src.bm_gateway.user.schemas import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    UpdateProfileRequest,
    UserInfo,
    VendorProfileInfo,
)
from src.bm_gateway.user.service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


def _user_info(user: UserModel, profile: VendorProfileModel | None) -> UserInfo:
    return UserInfo(
        user_id=str(user.id),
        name=user.name,
        email=user.email,
        phone=user.phone,
        role=user.role,
        vendor_profile=VendorProfileInfo.from_model(profile) if profile is not None else None,
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Register a buyer or vendor",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, profile = await _service.register(body, db)
    data = AuthResponse(
        access_token=create_access_token(str(user.id), user.role),
        refresh_token=create_refresh_token(str(user.id)),
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=_user_info(user, profile),
    )
    return success_response(
        data.model_dump(), get_request_id(request), "User registered successfully"
    )


@router.post("/login", response_model=ApiResponse, summary="Login with email and password")
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.email, body.password, db)
    profile = await _service.get_vendor_profile(user, db)
    data = AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=_user_info(user, profile),
    )
    return success_response(data.model_dump(), get_request_id(request), "Login successful")


@router.post("/refresh", response_model=ApiResponse, summary="Refresh access token")
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token, db)
    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return success_response(data.model_dump(), get_request_id(request), "Token refreshed")


@router.get("/me", response_model=ApiResponse, summary="Current user")
async def me(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    profile = await _service.get_vendor_profile(current_user, db)
    return success_response(
        _user_info(current_user, profile).model_dump(), get_request_id(request)
    )


@router.post("/profile", response_model=ApiResponse, summary="Update name, email or phone")
async def update_profile(
    request: Request,
    body: UpdateProfileRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.update_profile(current_user, body, db)
    profile = await _service.get_vendor_profile(user, db)
    return success_response(_user_info(user, profile).model_dump(), get_request_id(request))


@router.post("/logout", response_model=ApiResponse, summary="End the session")
async def logout(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
) -> ApiResponse:
    """Tokens are stateless: the client discards them and they lapse at expiry."""
    logger.info("User %s logged out", current_user.id)
    return success_response(None, get_request_id(request), "Logged out")
