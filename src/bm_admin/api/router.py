"""Admin REST API: admin role required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_admin.application.service import AdminService
from src.bm_common.database import get_db_session
from src.bm_common.enums import DisputeStatus
from src.bm_common.response import ApiResponse, success_response
from src.bm_dispute.application.schemas import ResolveDisputeRequest
from src.bm_gateway.auth.dependencies import require_admin
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.get("/disputes")
async def list_disputes(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    dispute_status: DisputeStatus | None = Query(None, alias="status"),
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_disputes(
        db, dispute_status.value if dispute_status else None, cursor, limit
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/disputes/{dispute_id}/review")
async def review_dispute(
    dispute_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.review_dispute(db, dispute_id)
    return success_response(data.model_dump(), get_request_id(request), "Dispute under review")


@router.post("/disputes/{dispute_id}/resolve")
async def resolve_dispute(
    dispute_id: str,
    body: ResolveDisputeRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.resolve_dispute(
        db, str(admin.id), dispute_id, body.outcome, body.resolution_note
    )
    return success_response(data.model_dump(), get_request_id(request), "Dispute resolved")


@router.get("/invariants")
async def verify_invariants(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.verify_all_invariants(db)
    return success_response(result, get_request_id(request))
