"""Pydantic request/response schemas for bm_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

import re
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from src.bm_gateway.auth.password import BCRYPT_MAX_BYTES
from src.bm_gateway.user.db_models import VendorProfileModel

_PHONE_RE = re.compile(r"^\+?[0-9]{7,15}$")


def _check_phone(v: str) -> str:
    v = v.replace(" ", "")
    if not _PHONE_RE.match(v):
        raise ValueError("Phone must be 7-15 digits, optionally prefixed with +")
    return v


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., max_length=20)
    password: str = Field(..., min_length=8)
    password_confirmation: str
    role: Literal["buyer", "vendor_local", "vendor_international"] = "buyer"
    # Vendor-only profile fields
    business_name: str | None = Field(None, max_length=255)
    country: str | None = Field(None, max_length=100)
    city: str | None = Field(None, max_length=100)

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.password_confirmation:
            raise ValueError("Password confirmation does not match")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v: str | None) -> str | None:
        return _check_phone(v) if v is not None else None


class VendorProfileInfo(BaseModel):
    vendor_type: str
    business_name: str
    country: str
    city: str
    vetting_status: str

    @classmethod
    def from_model(cls, profile: VendorProfileModel) -> "VendorProfileInfo":
        return cls(
            vendor_type=profile.vendor_type,
            business_name=profile.business_name,
            country=profile.country,
            city=profile.city,
            vetting_status=profile.vetting_status,
        )


class UpdateVendorProfileRequest(BaseModel):
    """Vendor type and vetting status are not self-service."""

    business_name: str | None = Field(None, min_length=2, max_length=255)
    country: str | None = Field(None, min_length=2, max_length=100)
    city: str | None = Field(None, min_length=2, max_length=100)


class UserInfo(BaseModel):
    user_id: str
    name: str
    email: str
    phone: str
    role: str
    vendor_profile: VendorProfileInfo | None = None


class AuthResponse(BaseModel):
    """Register and login both hand back a token pair plus the user."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800
    user: UserInfo


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int = 1800
