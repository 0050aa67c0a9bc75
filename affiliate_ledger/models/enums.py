"""
Enumerations shared by ledger models.
"""

from enum import StrEnum


class AffiliateStatus(StrEnum):
    """Affiliate account status."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    PENDING = "pending"


class PaymentStatus(StrEnum):
    """Payment status of a referred signup."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class WithdrawalStatus(StrEnum):
    """
    Withdrawal request status.

    pending -> approved | rejected | paid
    approved -> paid
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class DiscountKind(StrEnum):
    """Shape of a coupon discount."""

    FIXED = "fixed"
    PER_PLAN = "per_plan"
