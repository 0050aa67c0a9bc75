"""Integration tests for the affiliate and admin portals."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from affiliate_ledger.repositories import AffiliateRepository
from affiliate_ledger.services.affiliate import BankDetails
from affiliate_ledger.services.ledger import AffiliateAggregates
from affiliate_ledger.services.portal import (
    AdminPortal,
    AffiliatePortal,
    ErrorKind,
)
from affiliate_ledger.services.referral import RecordStatus


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []

    async def withdrawal_status_changed(self, withdrawal, status):
        self.sent.append((withdrawal.id, status))


class FailingNotifier:
    async def withdrawal_status_changed(self, withdrawal, status):
        raise RuntimeError("SMTP unreachable")


@pytest.fixture
def portal(session, identity_provider):
    return AffiliatePortal(session, identity_provider)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def admin(session, notifier):
    return AdminPortal(session, notifier=notifier)


class TestAffiliatePortal:
    @pytest.mark.asyncio
    async def test_sign_up(self, portal, make_registration):
        result = await portal.sign_up(make_registration("kemi"))

        assert result.success is True
        assert result.value.username == "kemi"
        assert result.error_kind is None

    @pytest.mark.asyncio
    async def test_sign_up_conflict(self, portal, make_registration):
        await portal.sign_up(make_registration("kemi"))

        result = await portal.sign_up(make_registration("Kemi", email="k2@example.com"))

        assert result.success is False
        assert result.error_kind is ErrorKind.CONFLICT
        assert result.error_code == "USERNAME_TAKEN"

    @pytest.mark.asyncio
    async def test_sign_up_validation(self, portal, make_registration):
        result = await portal.sign_up(make_registration("no_underscores"))

        assert result.error_kind is ErrorKind.VALIDATION
        assert result.error_code == "INVALID_USERNAME"

    @pytest.mark.asyncio
    async def test_username_availability(self, portal, make_registration):
        await portal.sign_up(make_registration("kemi"))

        assert await portal.is_username_available("kemi") is False
        assert await portal.is_username_available("tunde") is True

    @pytest.mark.asyncio
    async def test_save_bank_details_not_found(self, portal, bank_details):
        result = await portal.save_bank_details(999, bank_details)

        assert result.error_kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_save_bank_details_invalid(self, portal, create_affiliate):
        affiliate_id = await create_affiliate("kemi", with_bank=False)

        result = await portal.save_bank_details(
            affiliate_id, BankDetails(account_name="", bank_name="GTBank", account_number="1")
        )

        assert result.error_kind is ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_request_withdrawal_errors(
        self, portal, create_affiliate, credit_payments
    ):
        no_bank_id = await create_affiliate("tunde", with_bank=False)
        kemi_id = await create_affiliate("kemi")
        await credit_payments("kemi", 1)

        missing_bank = await portal.request_withdrawal(no_bank_id, Decimal("10"))
        too_much = await portal.request_withdrawal(kemi_id, Decimal("5000"))
        unknown = await portal.request_withdrawal(999, Decimal("10"))
        not_a_number = await portal.request_withdrawal(kemi_id, "NaN")

        assert missing_bank.error_kind is ErrorKind.VALIDATION
        assert missing_bank.error_code == "MISSING_BANK_DETAILS"
        assert too_much.error_kind is ErrorKind.CONFLICT
        assert too_much.error_code == "INSUFFICIENT_BALANCE"
        assert unknown.error_kind is ErrorKind.NOT_FOUND
        assert not_a_number.error_kind is ErrorKind.VALIDATION
        assert not_a_number.error_code == "INVALID_AMOUNT"

    @pytest.mark.asyncio
    async def test_request_withdrawal_infrastructure(self, portal):
        portal.request_handler.request_withdrawal = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection reset"))
        )

        result = await portal.request_withdrawal(1, Decimal("10"))

        assert result.success is False
        assert result.error_kind is ErrorKind.INFRASTRUCTURE
        assert "connection reset" not in result.error_message

    @pytest.mark.asyncio
    async def test_dashboard(self, portal, create_affiliate, credit_payments):
        affiliate_id = await create_affiliate("kemi")
        await credit_payments("kemi", 2)
        await portal.request_withdrawal(affiliate_id, Decimal("1500"))

        dashboard = await portal.get_dashboard(affiliate_id)

        assert dashboard.affiliate.username == "kemi"
        assert dashboard.affiliate.total_referrals == 2
        assert dashboard.balance.completed_commission == Decimal("4000")
        assert dashboard.balance.available == Decimal("2500")
        assert dashboard.has_pending_withdrawal is True
        assert len(dashboard.referrals) == 2
        assert len(dashboard.withdrawals) == 1

    @pytest.mark.asyncio
    async def test_dashboard_unknown_affiliate(self, portal):
        assert await portal.get_dashboard(999) is None

    @pytest.mark.asyncio
    async def test_dashboard_degrades_on_store_error(self, portal):
        portal.balance_calculator.get_balance_summary = AsyncMock(
            side_effect=SQLAlchemyError("down")
        )
        portal.directory.affiliate_repo.get_by_id = AsyncMock(return_value=object())

        assert await portal.get_dashboard(1) is None


class TestAdminPortal:
    @pytest.mark.asyncio
    async def test_list_affiliates_uses_ledger(
        self, session, admin, create_affiliate, credit_payments
    ):
        kemi_id = await create_affiliate("kemi")
        await create_affiliate("tunde")
        await credit_payments("kemi", 2)
        # Corrupt the cached counters; the overview must not trust them
        await AffiliateAggregates(session).overwrite(kemi_id, 0, Decimal("0"))
        await session.commit()

        overviews = {o.affiliate.username: o for o in await admin.list_affiliates()}

        assert overviews["kemi"].total_referrals == 2
        assert overviews["kemi"].total_earned == Decimal("4000")
        assert overviews["kemi"].cache_in_sync is False
        assert overviews["tunde"].total_referrals == 0
        assert overviews["tunde"].total_earned == Decimal("0")

    @pytest.mark.asyncio
    async def test_earnings_drift_detected(
        self, session, admin, portal, create_affiliate, credit_payments
    ):
        kemi_id = await create_affiliate("kemi")
        await credit_payments("kemi", 2)
        request = await portal.request_withdrawal(kemi_id, Decimal("1500"))
        await admin.transition_withdrawal(request.value.id, "paid", "admin@store")

        [in_sync] = await admin.list_affiliates()
        assert in_sync.settled_withdrawals == Decimal("1500")
        assert in_sync.ledger_earnings == Decimal("2500")
        assert in_sync.cache_in_sync is True

        # Referral count still right, earnings wrong
        await AffiliateAggregates(session).overwrite(kemi_id, 2, Decimal("4000"))
        await session.commit()

        [drifted] = await admin.list_affiliates()
        assert drifted.total_referrals == drifted.affiliate.total_referrals
        assert drifted.cache_in_sync is False

    @pytest.mark.asyncio
    async def test_transition_notifies(
        self, admin, notifier, portal, create_affiliate, credit_payments
    ):
        affiliate_id = await create_affiliate("kemi")
        await credit_payments("kemi", 1)
        request = await portal.request_withdrawal(affiliate_id, Decimal("2000"))
        withdrawal_id = request.value.id

        result = await admin.transition_withdrawal(withdrawal_id, "approved", "admin@store")

        assert result.success is True
        assert result.value.status == "approved"
        assert notifier.sent == [(withdrawal_id, "approved")]

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_block(
        self, session, portal, create_affiliate, credit_payments
    ):
        admin = AdminPortal(session, notifier=FailingNotifier())
        affiliate_id = await create_affiliate("kemi")
        await credit_payments("kemi", 1)
        request = await portal.request_withdrawal(affiliate_id, Decimal("2000"))

        result = await admin.transition_withdrawal(request.value.id, "paid", "admin@store")

        assert result.success is True
        assert result.value.status == "paid"

    @pytest.mark.asyncio
    async def test_transition_errors(
        self, admin, notifier, portal, create_affiliate, credit_payments
    ):
        affiliate_id = await create_affiliate("kemi")
        await credit_payments("kemi", 1)
        request = await portal.request_withdrawal(affiliate_id, Decimal("2000"))
        withdrawal_id = request.value.id
        await admin.transition_withdrawal(withdrawal_id, "paid", "admin@store")

        illegal = await admin.transition_withdrawal(withdrawal_id, "rejected", "admin", "late")
        missing = await admin.transition_withdrawal(404, "approved", "admin")

        assert illegal.error_kind is ErrorKind.CONFLICT
        assert illegal.error_code == "INVALID_TRANSITION"
        assert missing.error_kind is ErrorKind.NOT_FOUND
        assert notifier.sent == [(withdrawal_id, "paid")]

    @pytest.mark.asyncio
    async def test_reject_without_reason(
        self, admin, portal, create_affiliate, credit_payments
    ):
        affiliate_id = await create_affiliate("kemi")
        await credit_payments("kemi", 1)
        request = await portal.request_withdrawal(affiliate_id, Decimal("2000"))

        result = await admin.transition_withdrawal(request.value.id, "rejected", "admin")

        assert result.error_kind is ErrorKind.VALIDATION
        assert result.error_code == "MISSING_REJECTION_REASON"

    @pytest.mark.asyncio
    async def test_list_withdrawals(self, admin, portal, create_affiliate, credit_payments):
        affiliate_id = await create_affiliate("kemi")
        await credit_payments("kemi", 1)
        await portal.request_withdrawal(affiliate_id, Decimal("100"))

        assert len(await admin.list_withdrawals()) == 1
        assert len(await admin.list_withdrawals(status="pending")) == 1
        assert await admin.list_withdrawals(status="paid") == []
        assert await admin.list_withdrawals(status="bogus") == []

    @pytest.mark.asyncio
    async def test_list_referrals(self, admin, create_affiliate, credit_payments):
        await create_affiliate("kemi")
        await credit_payments("kemi", 3)

        referrals = await admin.list_referrals(limit=2)

        assert len(referrals) == 2

    @pytest.mark.asyncio
    async def test_list_referrals_degrades(self, admin):
        admin.referral_queries.referral_repo.list_recent = AsyncMock(
            side_effect=SQLAlchemyError("down")
        )

        assert await admin.list_referrals() == []

    @pytest.mark.asyncio
    async def test_suspend_stops_crediting(
        self, session, admin, create_affiliate, recorder, make_payment
    ):
        affiliate_id = await create_affiliate("kemi")

        result = await admin.set_affiliate_status(affiliate_id, "suspended")
        outcome = await recorder.record(make_payment("txn-1"))

        assert result.success is True
        assert outcome.status is RecordStatus.INACTIVE_AFFILIATE
        affiliate = await AffiliateRepository(session).get_by_id(affiliate_id)
        assert affiliate.total_referrals == 0

    @pytest.mark.asyncio
    async def test_set_status_errors(self, admin, create_affiliate):
        affiliate_id = await create_affiliate("kemi")

        assert (await admin.set_affiliate_status(affiliate_id, "banned")).error_kind is (
            ErrorKind.VALIDATION
        )
        assert (await admin.set_affiliate_status(999, "active")).error_kind is (
            ErrorKind.NOT_FOUND
        )
