"""Dispute API for buyers and vendors: JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.database import get_db_session
from src.bm_common.enums import DisputeStatus
from src.bm_common.response import ApiResponse, success_response
from src.bm_dispute.application.schemas import AddEvidenceRequest, OpenDisputeRequest
from src.bm_dispute.application.service import DisputeResolver
from src.bm_gateway.auth.dependencies import get_current_user
from src.bm_gateway.middleware.request_log import get_request_id
from src.bm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/disputes", tags=["disputes"])

_resolver = DisputeResolver()


@router.get("")
async def list_disputes(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    dispute_status: DisputeStatus | None = Query(None, alias="status"),
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _resolver.list_disputes(
        db,
        str(current_user.id),
        dispute_status.value if dispute_status else None,
        cursor,
        limit,
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/{order_id}", status_code=status.HTTP_201_CREATED)
async def open_dispute(
    order_id: str,
    body: OpenDisputeRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _resolver.open_dispute(
        db, str(current_user.id), order_id, body.reason, body.description
    )
    return success_response(data.model_dump(), get_request_id(request), "Dispute opened")


@router.get("/{dispute_id}")
async def get_dispute(
    dispute_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _resolver.get_dispute(
        db, str(current_user.id), dispute_id, is_admin=current_user.is_admin
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/{dispute_id}/add-evidence", status_code=status.HTTP_201_CREATED)
async def add_evidence(
    dispute_id: str,
    body: AddEvidenceRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _resolver.add_evidence(
        db, str(current_user.id), dispute_id, body.kind, body.content
    )
    return success_response(data.model_dump(), get_request_id(request), "Evidence added")
