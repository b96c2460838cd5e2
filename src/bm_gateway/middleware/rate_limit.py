"""Redis fixed-window rate limiting middleware.

Rules (requests per minute, from settings):
  - auth endpoints:   RATE_LIMIT_AUTH_PER_MIN per client IP  (anti brute-force)
  - write requests:   RATE_LIMIT_WRITE_PER_MIN per client     (POST/PUT/DELETE)
  - read requests:    RATE_LIMIT_READ_PER_MIN per client

The client key is the subject of a valid access token, otherwise the client
IP. X-Forwarded-For is only read when the peer is one of TRUSTED_PROXIES.
Key pattern: "ratelimit:{client}:{group}:{window}".

Exceptions raised inside BaseHTTPMiddleware bypass the app's exception
handlers, so the 429 envelope is rendered here directly.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.bm_common.errors import InvalidCredentialsError, RateLimitError
from src.bm_common.redis_client import get_redis
from src.bm_common.response import error_response
from src.bm_gateway.auth.jwt_handler import decode_token
from src.bm_gateway.middleware.request_log import get_request_id

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})


def classify(request: Request) -> tuple[str, int]:
    """Return (endpoint_group, limit) for a request."""
    if "/auth/" in request.url.path:
        return "auth", settings.RATE_LIMIT_AUTH_PER_MIN
    if request.method in ("POST", "PUT", "PATCH", "DELETE"):
        return "write", settings.RATE_LIMIT_WRITE_PER_MIN
    return "read", settings.RATE_LIMIT_READ_PER_MIN


def _peer_ip(request: Request) -> str:
    peer = request.client.host if request.client else "unknown"
    if peer not in settings.TRUSTED_PROXIES:
        return peer
    # Walk X-Forwarded-For from the right, skipping our own proxies
    hops = [hop.strip() for hop in request.headers.get("x-forwarded-for", "").split(",")]
    for hop in reversed(hops):
        if hop and hop not in settings.TRUSTED_PROXIES:
            return hop
    return peer


def client_key(request: Request, group: str) -> str:
    if group != "auth":
        auth = request.headers.get("authorization", "")
        if auth.lower().startswith("bearer "):
            try:
                sub = decode_token(auth[7:], expected_type="access").get("sub")
            except InvalidCredentialsError:
                sub = None
            if sub:
                return f"user:{sub}"
    return f"ip:{_peer_ip(request)}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        group, limit = classify(request)
        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{client_key(request, group)}:{group}:{window}"

        redis = await get_redis()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, _WINDOW_SECONDS)

        if count > limit:
            logger.warning("Rate limit exceeded for %s (%d > %d)", key, count, limit)
            err = RateLimitError()
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message, get_request_id(request)).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
