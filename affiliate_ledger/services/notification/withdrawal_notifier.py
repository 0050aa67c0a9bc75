"""
Withdrawal notifications.

Tells affiliates that an admin acted on their withdrawal request.
Delivery is best effort.
"""

from typing import Protocol

from loguru import logger

from affiliate_ledger.config.business_constants import CURRENCY_SYMBOL
from affiliate_ledger.models.enums import WithdrawalStatus
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest


STATUS_MESSAGES = {
    WithdrawalStatus.APPROVED.value: "Your withdrawal of {amount} has been approved.",
    WithdrawalStatus.PAID.value: "Your withdrawal of {amount} has been paid.",
    WithdrawalStatus.REJECTED.value: (
        "Your withdrawal of {amount} was rejected. Reason: {reason}"
    ),
}


def format_status_message(withdrawal: WithdrawalRequest, status: str) -> str:
    """Human readable message for a status change."""
    template = STATUS_MESSAGES.get(
        status, "Your withdrawal of {amount} is now {status}."
    )
    return template.format(
        amount=f"{CURRENCY_SYMBOL}{withdrawal.amount:,.2f}",
        reason=withdrawal.rejection_reason or "-",
        status=status,
    )


class Notifier(Protocol):
    """Outbound notification channel (email, SMS, ...)."""

    async def withdrawal_status_changed(
        self, withdrawal: WithdrawalRequest, status: str
    ) -> None:
        ...


class LoggingNotifier:
    """Notifier that only writes the message to the log."""

    async def withdrawal_status_changed(
        self, withdrawal: WithdrawalRequest, status: str
    ) -> None:
        logger.bind(
            withdrawal_id=withdrawal.id,
            affiliate_email=withdrawal.affiliate_email,
            status=status,
        ).info(
            format_status_message(withdrawal, status)
        )
