"""
Referral services package.

Contains modular services for referral processing:
- commission: commission tier lookup
- payment_event: PaymentConfirmed event delivered by the payment callback
- referral_recorder: idempotent crediting of confirmed payments
- query_manager: referral read models
"""

from affiliate_ledger.services.referral.commission import calculate_commission
from affiliate_ledger.services.referral.payment_event import (
    PaymentConfirmed,
    ReferredContacts,
)
from affiliate_ledger.services.referral.query_manager import ReferralQueryManager
from affiliate_ledger.services.referral.referral_recorder import (
    RecordOutcome,
    RecordStatus,
    ReferralRecorder,
)


__all__ = [
    "calculate_commission",
    "PaymentConfirmed",
    "ReferredContacts",
    "ReferralQueryManager",
    "RecordOutcome",
    "RecordStatus",
    "ReferralRecorder",
]
