"""Pydantic schemas for the dispute APIs (buyer/vendor and admin)."""

from typing import Literal

from pydantic import BaseModel, Field

from src.bm_common.datetime_utils import iso_or_none
from src.bm_dispute.domain.models import Dispute, Evidence


class OpenDisputeRequest(BaseModel):
    reason: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10, max_length=5000)


class AddEvidenceRequest(BaseModel):
    kind: Literal["text", "image", "document"] = "text"
    content: str = Field(..., min_length=1, max_length=5000, description="Text or file URL")


class ResolveDisputeRequest(BaseModel):
    outcome: Literal["refund", "release"]
    resolution_note: str | None = Field(None, max_length=2000)


class EvidenceOut(BaseModel):
    evidence_id: int
    submitted_by: str
    kind: str
    content: str
    created_at: str | None

    @classmethod
    def from_domain(cls, evidence: Evidence) -> "EvidenceOut":
        return cls(
            evidence_id=evidence.id,
            submitted_by=evidence.submitted_by,
            kind=evidence.kind,
            content=evidence.content,
            created_at=iso_or_none(evidence.created_at),
        )


class DisputeOut(BaseModel):
    dispute_id: str
    order_id: str
    buyer_id: str
    vendor_id: str
    reason: str
    description: str
    status: str
    outcome: str | None
    resolution_note: str | None
    resolved_by: str | None
    evidence: list[EvidenceOut]
    created_at: str | None
    resolved_at: str | None

    @classmethod
    def from_domain(cls, dispute: Dispute) -> "DisputeOut":
        return cls(
            dispute_id=dispute.id,
            order_id=dispute.order_id,
            buyer_id=dispute.buyer_id,
            vendor_id=dispute.vendor_id,
            reason=dispute.reason,
            description=dispute.description,
            status=dispute.status,
            outcome=dispute.outcome,
            resolution_note=dispute.resolution_note,
            resolved_by=dispute.resolved_by,
            evidence=[EvidenceOut.from_domain(e) for e in dispute.evidence],
            created_at=iso_or_none(dispute.created_at),
            resolved_at=iso_or_none(dispute.resolved_at),
        )


class DisputeListResponse(BaseModel):
    items: list[DisputeOut]
    next_cursor: str | None
    has_more: bool
