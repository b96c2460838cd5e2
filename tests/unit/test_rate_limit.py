"""Rate limit request classification and client bucketing."""

import time

import pytest
from jose import jwt
from starlette.requests import Request

from config.settings import settings
from src.bm_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.bm_gateway.middleware.rate_limit import classify, client_key


def _request(
    path: str, method: str = "GET", headers: dict[str, str] | None = None
) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("10.0.0.7", 5123),
        "server": ("test", 80),
        "scheme": "http",
    }
    return Request(scope)


class TestClassify:
    def test_auth(self) -> None:
        group, limit = classify(_request("/api/v1/auth/login", "POST"))
        assert group == "auth"
        assert limit == 5

    def test_write(self) -> None:
        assert classify(_request("/api/v1/orders/place", "POST"))[0] == "write"
        assert classify(_request("/api/v1/vendor/listings/1", "DELETE"))[0] == "write"

    def test_read(self) -> None:
        assert classify(_request("/api/v1/marketplace"))[0] == "read"


class TestClientKey:
    def test_bearer_subject(self) -> None:
        token = create_access_token("user-42")
        req = _request("/api/v1/cart", headers={"Authorization": f"Bearer {token}"})
        assert client_key(req, "read") == "user:user-42"

    def test_auth_group_always_uses_ip(self) -> None:
        token = create_access_token("user-42")
        req = _request("/api/v1/auth/login", headers={"Authorization": f"Bearer {token}"})
        assert client_key(req, "auth") == "ip:10.0.0.7"

    def test_forwarded_for_ignored_without_trusted_proxy(self) -> None:
        keys = {
            client_key(_request("/api/v1/auth/login", "POST", {"X-Forwarded-For": ip}), "auth")
            for ip in ("9.9.9.1", "9.9.9.2")
        }
        assert keys == {"ip:10.0.0.7"}

    def test_forwarded_for_behind_trusted_proxy(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "TRUSTED_PROXIES", ["10.0.0.7", "10.0.0.1"])
        req = _request("/api/v1/cart", headers={"X-Forwarded-For": "1.1.1.1, 41.210.1.1, 10.0.0.1"})
        # Only the hop appended by our own proxy is trusted
        assert client_key(req, "read") == "ip:41.210.1.1"

    def test_trusted_proxy_without_header(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "TRUSTED_PROXIES", ["10.0.0.7"])
        assert client_key(_request("/api/v1/cart"), "read") == "ip:10.0.0.7"

    def test_garbage_token_falls_back_to_ip(self) -> None:
        req = _request("/api/v1/cart", headers={"Authorization": "Bearer not-a-jwt"})
        assert client_key(req, "read") == "ip:10.0.0.7"

    def test_token_signed_with_other_key_falls_back_to_ip(self) -> None:
        keys = set()
        for n in range(3):
            forged = jwt.encode(
                {"sub": f"someone-{n}", "type": "access", "exp": int(time.time()) + 600},
                "not-our-secret",
                algorithm="HS256",
            )
            req = _request("/api/v1/cart", headers={"Authorization": f"Bearer {forged}"})
            keys.add(client_key(req, "read"))
        assert keys == {"ip:10.0.0.7"}

    def test_refresh_token_is_not_a_bucket(self) -> None:
        token = create_refresh_token("user-42")
        req = _request("/api/v1/cart", headers={"Authorization": f"Bearer {token}"})
        assert client_key(req, "read") == "ip:10.0.0.7"
