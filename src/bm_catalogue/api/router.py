"""Public marketplace API: no authentication required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_catalogue.application.schemas import ConditionLiteral, SortLiteral
from src.bm_catalogue.application.service import ListingApplicationService
from src.bm_catalogue.domain.models import BrowseFilter, category_slug
from src.bm_common.database import get_db_session
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.middleware.request_log import get_request_id

router = APIRouter(prefix="/marketplace", tags=["marketplace"])

_service = ListingApplicationService()


@router.get("")
async def browse_listings(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    search: str | None = Query(None, max_length=100),
    category: str | None = Query(None),
    min_price: int | None = Query(None, ge=0),
    max_price: int | None = Query(None, ge=0),
    condition: ConditionLiteral | None = Query(None),
    vendor_id: str | None = Query(None),
    sort: SortLiteral = Query("newest"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    filters = BrowseFilter(
        search=search or None,
        category=category_slug(category) if category else None,
        min_price=min_price,
        max_price=max_price,
        condition=condition,
        vendor_id=vendor_id,
    )
    data = await _service.browse(db, filters, sort, cursor, limit)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.view(db, listing_id)
    return success_response(data.model_dump(), get_request_id(request))
