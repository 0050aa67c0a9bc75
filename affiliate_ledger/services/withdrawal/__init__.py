"""
Withdrawal services package.

This package provides modular withdrawal management functionality:
- withdrawal_state_machine: allowed status transitions
- withdrawal_request_handler: withdrawal request creation
- withdrawal_lifecycle_handler: approval, rejection, payout
- withdrawal_query_service: queries and history

All components are re-exported for easy importing.
"""

from affiliate_ledger.services.withdrawal.withdrawal_lifecycle_handler import (
    WithdrawalLifecycleHandler,
)
from affiliate_ledger.services.withdrawal.withdrawal_query_service import (
    WithdrawalQueryService,
)
from affiliate_ledger.services.withdrawal.withdrawal_request_handler import (
    WithdrawalRequestHandler,
)
from affiliate_ledger.services.withdrawal.withdrawal_state_machine import (
    ALLOWED_TRANSITIONS,
    can_transition,
    settles_on_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "WithdrawalLifecycleHandler",
    "WithdrawalQueryService",
    "WithdrawalRequestHandler",
    "can_transition",
    "settles_on_transition",
]
