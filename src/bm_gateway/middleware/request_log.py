"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency, and a short
request ID. The request_id is injected into request.state so handlers and
exception handlers can echo it in the ApiResponse envelope, and is returned
in the X-Request-ID response header.

Log format:
    INFO [POST] /api/v1/orders/place → 200 (23ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("bm.request")


def get_request_id(request: Request) -> str | None:
    """request_id injected by RequestLogMiddleware, or None outside it."""
    return getattr(request.state, "request_id", None)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request.state.request_id
        logger.info(
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        return response
