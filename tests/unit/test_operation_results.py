"""
Tests for portal results, balance summary and notification texts.
"""

from decimal import Decimal

import pytest

from affiliate_ledger.models.withdrawal_request import WithdrawalRequest
from affiliate_ledger.services.balance_calculator import BalanceSummary
from affiliate_ledger.services.notification.withdrawal_notifier import (
    format_status_message,
)
from affiliate_ledger.services.portal.results import (
    ErrorKind,
    OperationResult,
    error_kind_for,
)
from affiliate_ledger.utils.exceptions import (
    AffiliateNotFound,
    IdentityAlreadyExists,
    IdentityProviderError,
    InsufficientBalance,
    InvalidAmount,
    InvalidTransition,
    MissingBankDetails,
    PendingRequestExists,
    UsernameTaken,
    WithdrawalNotFound,
)


class TestErrorKinds:
    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (InvalidAmount(Decimal("0")), ErrorKind.VALIDATION),
            (MissingBankDetails(1), ErrorKind.VALIDATION),
            (UsernameTaken("kemi"), ErrorKind.CONFLICT),
            (PendingRequestExists(1), ErrorKind.CONFLICT),
            (InsufficientBalance(Decimal("10"), Decimal("5")), ErrorKind.CONFLICT),
            (InvalidTransition(1, "paid", "rejected"), ErrorKind.CONFLICT),
            (IdentityAlreadyExists("kemi@example.com"), ErrorKind.CONFLICT),
            (AffiliateNotFound(9), ErrorKind.NOT_FOUND),
            (WithdrawalNotFound(9), ErrorKind.NOT_FOUND),
            (IdentityProviderError("provider down"), ErrorKind.INFRASTRUCTURE),
        ],
    )
    def test_classification(self, error, kind):
        assert error_kind_for(error) is kind

    def test_from_error_carries_code_and_message(self):
        result = OperationResult.from_error(
            InsufficientBalance(Decimal("3000"), Decimal("2000"))
        )

        assert result.success is False
        assert result.error_code == "INSUFFICIENT_BALANCE"
        assert "2000.00" in result.error_message
        assert result.value is None

    def test_infrastructure_is_generic(self):
        result = OperationResult.infrastructure()

        assert result.error_kind is ErrorKind.INFRASTRUCTURE
        assert "try again" in result.error_message


class TestBalanceSummary:
    def test_available_never_negative(self):
        summary = BalanceSummary(
            completed_commission=Decimal("1000"),
            pending_withdrawals=Decimal("0"),
            approved_withdrawals=Decimal("0"),
            paid_withdrawals=Decimal("3000"),
        )

        assert summary.available == Decimal("0")

    def test_figures(self):
        summary = BalanceSummary(
            completed_commission=Decimal("8000"),
            pending_withdrawals=Decimal("1000"),
            approved_withdrawals=Decimal("2000"),
            paid_withdrawals=Decimal("500"),
        )

        assert summary.reserved == Decimal("3500")
        assert summary.settled == Decimal("2500")
        assert summary.available == Decimal("4500")


class TestStatusMessages:
    def test_rejected_includes_reason(self):
        withdrawal = WithdrawalRequest(
            amount=Decimal("2000"), rejection_reason="Account name mismatch"
        )

        message = format_status_message(withdrawal, "rejected")

        assert "₦2,000.00" in message
        assert "Account name mismatch" in message

    def test_paid(self):
        withdrawal = WithdrawalRequest(amount=Decimal("4000"))

        assert "paid" in format_status_message(withdrawal, "paid")
