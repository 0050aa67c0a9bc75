"""
Data access layer.

Repositories flush but never commit; services own the transaction.
"""

from affiliate_ledger.repositories.affiliate_repository import (
    AGGREGATE_FIELDS,
    AffiliateRepository,
)
from affiliate_ledger.repositories.base import BaseRepository
from affiliate_ledger.repositories.coupon_repository import CouponRepository
from affiliate_ledger.repositories.payment_claim_repository import (
    PaymentClaimRepository,
)
from affiliate_ledger.repositories.referral_repository import ReferralRepository
from affiliate_ledger.repositories.withdrawal_repository import (
    RESERVED_STATUSES,
    SETTLED_STATUSES,
    WithdrawalRepository,
)

__all__ = [
    "AGGREGATE_FIELDS",
    "RESERVED_STATUSES",
    "SETTLED_STATUSES",
    "AffiliateRepository",
    "BaseRepository",
    "CouponRepository",
    "PaymentClaimRepository",
    "ReferralRepository",
    "WithdrawalRepository",
]
