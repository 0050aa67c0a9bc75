"""
Payment confirmation event.

Delivered by the payment callback after the gateway verified a charge.
The same event may be delivered more than once.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from affiliate_ledger.config.business_constants import UNKNOWN_BUSINESS_NAME


@dataclass(frozen=True)
class ReferredContacts:
    """Contact numbers of the referred business owner."""

    phone: str = ""
    whatsapp: str = ""


@dataclass(frozen=True)
class PaymentConfirmed:
    """A verified payment, possibly made with an affiliate code."""

    transaction_ref: str
    plan_type: str
    discount_amount: Decimal
    referred_user_id: str
    referred_business_id: str
    affiliate_username: str | None = None
    referred_business_name: str = UNKNOWN_BUSINESS_NAME
    referred_contacts: ReferredContacts = field(default_factory=ReferredContacts)
