"""User domain service: register, login, refresh, profile.

All DB operations use the injected AsyncSession. Registration is a write
path and owns its transaction (commit on success, rollback on any error).
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bm_common.enums import UserRole, VendorType, VettingStatus
from src.bm_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    PhoneExistsError,
    VendorRequiredError,
)
from src.bm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.bm_gateway.auth.password import hash_password, verify_password
from src.bm_gateway.user.db_models import UserModel, VendorProfileModel
from src.bm_gateway.user.schemas import (
    RegisterRequest,
    UpdateProfileRequest,
    UpdateVendorProfileRequest,
)
from src.bm_wallet.domain.repository import WalletRepositoryProtocol
from src.bm_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    def __init__(self, wallet_repo: WalletRepositoryProtocol | None = None) -> None:
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    async def register(
        self, req: RegisterRequest, db: AsyncSession
    ) -> tuple[UserModel, VendorProfileModel | None]:
        """Create the user, its vendor profile (vendor roles) and its wallet in one transaction."""
        try:
            await self._ensure_unique(db, req.email, req.phone)

            user = UserModel(
                name=req.name,
                email=req.email,
                phone=req.phone,
                password_hash=hash_password(req.password),
                role=req.role,
                is_active=True,
            )
            db.add(user)
            await db.flush()  # Get user.id without committing

            profile: VendorProfileModel | None = None
            if UserRole(req.role).is_vendor:
                profile = VendorProfileModel(
                    user_id=user.id,
                    vendor_type=(
                        VendorType.CHINA_SUPPLIER.value
                        if req.role == UserRole.VENDOR_INTERNATIONAL.value
                        else VendorType.LOCAL_RETAIL.value
                    ),
                    business_name=req.business_name or f"{req.name}'s Store",
                    country=req.country or "Uganda",
                    city=req.city or "Kampala",
                    vetting_status=VettingStatus.PENDING.value,
                )
                db.add(profile)
                await db.flush()

            # Buyers pay from it, vendors are paid into it
            await self._wallets.get_or_create(db, str(user.id), settings.DEFAULT_CURRENCY)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(user)
        logger.info("Registered user %s with role %s", user.id, user.role)
        return user, profile

    async def login(
        self, email: str, password: str, db: AsyncSession
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        result = await db.execute(select(UserModel).where(UserModel.email == email))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id), user.role),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Validate a refresh token and issue a new access token for an active user."""
        payload = decode_token(refresh_token, expected_type="refresh")
        try:
            user_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            raise InvalidRefreshTokenError() from None
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidRefreshTokenError()
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(str(user.id), user.role)

    async def get_vendor_profile(
        self, user: UserModel, db: AsyncSession
    ) -> VendorProfileModel | None:
        if not user.is_vendor:
            return None
        result = await db.execute(
            select(VendorProfileModel).where(VendorProfileModel.user_id == user.id)
        )
        return result.scalar_one_or_none()

    async def update_profile(
        self, user: UserModel, req: UpdateProfileRequest, db: AsyncSession
    ) -> UserModel:
        try:
            await self._ensure_unique(
                db,
                req.email if req.email and req.email != user.email else None,
                req.phone if req.phone and req.phone != user.phone else None,
            )
            if req.name is not None:
                user.name = req.name
            if req.email is not None:
                user.email = req.email
            if req.phone is not None:
                user.phone = req.phone
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(user)
        return user

    async def update_vendor_profile(
        self, user: UserModel, req: UpdateVendorProfileRequest, db: AsyncSession
    ) -> VendorProfileModel:
        try:
            profile = await self.get_vendor_profile(user, db)
            if profile is None:
                raise VendorRequiredError("Vendor profile not found")
            for field, value in req.model_dump(exclude_none=True).items():
                setattr(profile, field, value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(profile)
        logger.info("Vendor %s updated their profile", user.id)
        return profile

    async def _ensure_unique(
        self, db: AsyncSession, email: str | None, phone: str | None
    ) -> None:
        # DB UNIQUE constraints are the final guard
        if email is not None:
            result = await db.execute(select(UserModel).where(UserModel.email == email))
            if result.scalar_one_or_none() is not None:
                raise EmailExistsError()
        if phone is not None:
            result = await db.execute(select(UserModel).where(UserModel.phone == phone))
            if result.scalar_one_or_none() is not None:
                raise PhoneExistsError()
