"""Public category API: categories are derived from active listings."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_catalogue.application.schemas import SortLiteral
from src.bm_catalogue.application.service import ListingApplicationService
from src.bm_common.database import get_db_session
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.middleware.request_log import get_request_id

router = APIRouter(prefix="/categories", tags=["marketplace"])

_service = ListingApplicationService()


@router.get("")
async def list_categories(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.categories(db)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/{slug}")
async def get_category(
    slug: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    sort: SortLiteral = Query("newest"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.category(db, slug, sort, cursor, limit)
    return success_response(data.model_dump(), get_request_id(request))
