"""Notification services."""

from affiliate_ledger.services.notification.withdrawal_notifier import (
    LoggingNotifier,
    Notifier,
    format_status_message,
)

__all__ = ["LoggingNotifier", "Notifier", "format_status_message"]
