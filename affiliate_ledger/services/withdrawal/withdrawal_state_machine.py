"""
Withdrawal status transitions.

    pending  -> approved | rejected | paid
    approved -> paid

rejected and paid are terminal. Entering approved or paid straight from
pending settles the amount (it comes off total_earnings once);
approved -> paid only records the payout.
"""

from affiliate_ledger.models.enums import WithdrawalStatus


ALLOWED_TRANSITIONS: dict[WithdrawalStatus, frozenset[WithdrawalStatus]] = {
    WithdrawalStatus.PENDING: frozenset(
        {
            WithdrawalStatus.APPROVED,
            WithdrawalStatus.REJECTED,
            WithdrawalStatus.PAID,
        }
    ),
    WithdrawalStatus.APPROVED: frozenset({WithdrawalStatus.PAID}),
    WithdrawalStatus.REJECTED: frozenset(),
    WithdrawalStatus.PAID: frozenset(),
}

SETTLING_STATUSES = frozenset({WithdrawalStatus.APPROVED, WithdrawalStatus.PAID})


def can_transition(current: str, new: str) -> bool:
    """Whether a request in status current may move to new."""
    try:
        return WithdrawalStatus(new) in ALLOWED_TRANSITIONS[WithdrawalStatus(current)]
    except ValueError:
        return False


def settles_on_transition(current: str, new: str) -> bool:
    """Whether moving current -> new takes the amount off total_earnings."""
    return (
        current == WithdrawalStatus.PENDING.value
        and new in SETTLING_STATUSES
    )
