"""
Portal facades.

- affiliate_portal: affiliate self-service
- admin_portal: admin dashboard actions
- results: OperationResult returned by every write
"""

from affiliate_ledger.services.portal.admin_portal import (
    AdminPortal,
    AffiliateOverview,
)
from affiliate_ledger.services.portal.affiliate_portal import (
    AffiliateDashboard,
    AffiliatePortal,
)
from affiliate_ledger.services.portal.results import ErrorKind, OperationResult

__all__ = [
    "AdminPortal",
    "AffiliateDashboard",
    "AffiliateOverview",
    "AffiliatePortal",
    "ErrorKind",
    "OperationResult",
]
