"""Unit tests for bm_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.bm_gateway.user.schemas import RegisterRequest, UpdateProfileRequest


def _register(**overrides: object) -> RegisterRequest:
    data: dict[str, object] = {
        "name": "Amina Nakato",
        "email": "amina@example.com",
        "phone": "+256700000001",
        "password": "SecurePass1",
        "password_confirmation": "SecurePass1",
    }
    data.update(overrides)
    return RegisterRequest(**data)  # type: ignore[arg-type]


class TestRegisterRequest:
    def test_defaults_to_buyer(self) -> None:
        assert _register().role == "buyer"

    def test_vendor_role(self) -> None:
        req = _register(role="vendor_local", business_name="Nakato Electronics")
        assert req.business_name == "Nakato Electronics"

    def test_admin_cannot_self_register(self) -> None:
        with pytest.raises(ValidationError):
            _register(role="admin")

    def test_password_confirmation_must_match(self) -> None:
        with pytest.raises(ValidationError):
            _register(password_confirmation="SomethingElse1")

    def test_password_too_short(self) -> None:
        with pytest.raises(ValidationError):
            _register(password="short", password_confirmation="short")

    def test_password_over_bcrypt_limit(self) -> None:
        long = "a" * 73
        with pytest.raises(ValidationError):
            _register(password=long, password_confirmation=long)

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            _register(email="not-an-email")

    def test_phone_spaces_are_stripped(self) -> None:
        assert _register(phone="+256 700 000 001").phone == "+256700000001"

    def test_phone_letters_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _register(phone="call-me")


class TestUpdateProfileRequest:
    def test_all_optional(self) -> None:
        req = UpdateProfileRequest()
        assert req.name is None and req.email is None and req.phone is None

    def test_phone_validated(self) -> None:
        with pytest.raises(ValidationError):
            UpdateProfileRequest(phone="12")
