"""
Ledger services package.

- aggregates: the only writer of affiliate total_referrals/total_earnings
- totals_rebuilder: recompute those totals from referrals and withdrawals
"""

from affiliate_ledger.services.ledger.aggregates import AffiliateAggregates
from affiliate_ledger.services.ledger.totals_rebuilder import (
    RebuildReport,
    TotalsDrift,
    TotalsRebuilder,
)

__all__ = [
    "AffiliateAggregates",
    "RebuildReport",
    "TotalsDrift",
    "TotalsRebuilder",
]
