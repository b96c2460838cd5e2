"""Global enums: must match DB CHECK constraints exactly (see alembic/versions)."""

from enum import Enum


class UserRole(str, Enum):
    BUYER = "buyer"
    VENDOR_LOCAL = "vendor_local"
    VENDOR_INTERNATIONAL = "vendor_international"
    ADMIN = "admin"

    @property
    def is_vendor(self) -> bool:
        return self in (UserRole.VENDOR_LOCAL, UserRole.VENDOR_INTERNATIONAL)


class VendorType(str, Enum):
    LOCAL_RETAIL = "local_retail"
    CHINA_SUPPLIER = "china_supplier"


class VettingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ListingCondition(str, Enum):
    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"
    REFUNDED = "refunded"


class EscrowStatus(str, Enum):
    HELD = "held"
    RELEASED = "released"
    REFUNDED = "refunded"


class DisputeStatus(str, Enum):
    OPEN = "open"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"


class DisputeOutcome(str, Enum):
    REFUND = "refund"
    RELEASE = "release"


class EvidenceKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    DOCUMENT = "document"


class LedgerEntryType(str, Enum):
    # External money in/out (payment gateway)
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    # Buyer side: balance -> locked on order placement
    ORDER_LOCK = "ORDER_LOCK"
    # Buyer side: locked -> balance on cancel / refund outcome
    ESCROW_REFUND = "ESCROW_REFUND"
    # Vendor side: escrow paid out on delivery / release outcome
    ESCROW_RELEASE = "ESCROW_RELEASE"
