"""FastAPI auth dependencies: get_current_user, require_vendor, require_admin.

Usage in any protected router:
    from src.bm_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: Annotated[UserModel, Depends(get_current_user)]):
        ...
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.database import get_db_session
from src.bm_common.enums import VettingStatus
from src.bm_common.errors import (
    AccountDisabledError,
    AdminRequiredError,
    InvalidCredentialsError,
    VendorRequiredError,
)
from src.bm_gateway.auth.jwt_handler import decode_token
from src.bm_gateway.user.db_models import UserModel, VendorProfileModel

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the active UserModel.

    Raises HTTP 401 if the token is missing, invalid, expired, or names no user.
    Raises AccountDisabledError (403) if the user account is disabled.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_vendor(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Vendor-only routes: caller must hold a vendor role and a non-rejected profile."""
    if not current_user.is_vendor:
        raise VendorRequiredError()
    result = await db.execute(
        select(VendorProfileModel).where(VendorProfileModel.user_id == current_user.id)
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        raise VendorRequiredError("Vendor profile not found")
    if profile.vetting_status == VettingStatus.REJECTED.value:
        raise VendorRequiredError("Vendor profile was rejected during vetting")
    return current_user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user
