"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.bm_admin.api.router import router as admin_router
from src.bm_cart.api.router import router as cart_router
from src.bm_catalogue.api.category_router import router as category_router
from src.bm_catalogue.api.router import router as marketplace_router
from src.bm_catalogue.api.vendor_router import router as vendor_listings_router
from src.bm_common.database import engine
from src.bm_common.errors import AppError
from src.bm_common.redis_client import close_redis, get_redis
from src.bm_common.response import error_response
from src.bm_dispute.api.router import router as dispute_router
from src.bm_gateway.api.router import router as auth_router
from src.bm_gateway.api.vendor_router import router as vendor_profile_router
from src.bm_gateway.middleware.rate_limit import RateLimitMiddleware
from src.bm_gateway.middleware.request_log import RequestLogMiddleware, get_request_id
from src.bm_order.api.router import router as order_router
from src.bm_order.api.vendor_router import router as vendor_orders_router
from src.bm_wallet.api.router import router as wallet_router
from src.bm_wishlist.api.router import router as wishlist_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_VALIDATION_ERROR_CODE = 9003


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.RATE_LIMIT_ENABLED:
        await get_redis()
    logger.info("%s started", settings.APP_NAME)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Last added runs first: RequestLog must wrap RateLimit so 429s carry a request_id
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("AppError %d on %s: %s", exc.code, request.url.path, exc.message)
    resp = error_response(exc.code, exc.message, get_request_id(request))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
    resp = error_response(_VALIDATION_ERROR_CODE, message, get_request_id(request))
    return JSONResponse(status_code=422, content=resp.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    resp = error_response(exc.status_code, str(exc.detail), get_request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=resp.model_dump(),
        headers=getattr(exc, "headers", None),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(marketplace_router, prefix="/api/v1")
app.include_router(category_router, prefix="/api/v1")
app.include_router(cart_router, prefix="/api/v1")
app.include_router(wishlist_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(dispute_router, prefix="/api/v1")
app.include_router(vendor_listings_router, prefix="/api/v1")
app.include_router(vendor_orders_router, prefix="/api/v1")
app.include_router(vendor_profile_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
