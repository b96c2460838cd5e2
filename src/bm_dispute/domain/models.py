"""Domain models for bm_dispute: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.bm_common.enums import DisputeStatus


@dataclass
class Evidence:
    id: int
    dispute_id: str
    submitted_by: str
    kind: str                    # EvidenceKind value
    content: str
    created_at: datetime | None = None


@dataclass
class Dispute:
    id: str
    order_id: str
    buyer_id: str
    vendor_id: str
    reason: str
    description: str
    status: str                  # DisputeStatus value
    outcome: str | None = None   # DisputeOutcome value once resolved
    resolution_note: str | None = None
    resolved_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    resolved_at: datetime | None = None
    evidence: list[Evidence] = field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        return self.status == DisputeStatus.RESOLVED.value

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.vendor_id)
