"""
Affiliate services package.

- identity: IdentityProvider interface of the external auth service
- affiliate_directory: signup, lookup, bank details, account status
"""

from affiliate_ledger.services.affiliate.affiliate_directory import (
    AffiliateDirectory,
    AffiliateRegistration,
    BankDetails,
)
from affiliate_ledger.services.affiliate.identity import IdentityProvider

__all__ = [
    "AffiliateDirectory",
    "AffiliateRegistration",
    "BankDetails",
    "IdentityProvider",
]
