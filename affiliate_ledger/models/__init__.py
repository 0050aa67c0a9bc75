"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.base import Base
from affiliate_ledger.models.coupon import Coupon
from affiliate_ledger.models.enums import (
    AffiliateStatus,
    DiscountKind,
    PaymentStatus,
    WithdrawalStatus,
)
from affiliate_ledger.models.payment_claim import PaymentClaim
from affiliate_ledger.models.referral import Referral
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest

__all__ = [
    # Base
    "Base",
    # Enums
    "AffiliateStatus",
    "DiscountKind",
    "PaymentStatus",
    "WithdrawalStatus",
    # Models
    "Affiliate",
    "Coupon",
    "PaymentClaim",
    "Referral",
    "WithdrawalRequest",
]
