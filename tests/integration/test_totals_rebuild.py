"""Integration tests for rebuilding cached affiliate totals."""

from decimal import Decimal

import pytest

from affiliate_ledger.repositories import AffiliateRepository
from affiliate_ledger.services.ledger import AffiliateAggregates, TotalsRebuilder
from affiliate_ledger.services.portal import AdminPortal
from affiliate_ledger.services.withdrawal import (
    WithdrawalLifecycleHandler,
    WithdrawalRequestHandler,
)
from affiliate_ledger.utils.exceptions import AffiliateNotFound


async def cached_totals(session, affiliate_id):
    affiliate = await AffiliateRepository(session).get_by_id(affiliate_id)
    return affiliate.total_referrals, affiliate.total_earnings


@pytest.fixture
def ledger_with_withdrawals(session, create_affiliate, credit_payments):
    """kemi: 3 referrals, 1000 approved, 500 pending."""

    async def _build() -> int:
        affiliate_id = await create_affiliate("kemi")
        await credit_payments("kemi", 3)
        handler = WithdrawalRequestHandler(session)
        first = await handler.request_withdrawal(affiliate_id, Decimal("1000"))
        await WithdrawalLifecycleHandler(session).update_withdrawal_status(
            first.id, "approved", "admin"
        )
        await handler.request_withdrawal(affiliate_id, Decimal("500"))
        return affiliate_id

    return _build


class TestTotalsRebuilder:
    @pytest.mark.asyncio
    async def test_no_drift(self, session, ledger_with_withdrawals):
        affiliate_id = await ledger_with_withdrawals()

        report = await TotalsRebuilder(session).rebuild_totals()

        assert report.checked == 1
        assert report.corrected == 0
        assert await cached_totals(session, affiliate_id) == (3, Decimal("5000"))

    @pytest.mark.asyncio
    async def test_dry_run_reports_only(self, session, ledger_with_withdrawals):
        affiliate_id = await ledger_with_withdrawals()
        await AffiliateAggregates(session).overwrite(affiliate_id, 7, Decimal("123"))
        await session.commit()

        report = await TotalsRebuilder(session).rebuild_totals(dry_run=True)

        assert report.corrected == 1
        drift = report.drifts[0]
        assert drift.cached_referrals == 7
        assert drift.ledger_referrals == 3
        assert drift.ledger_earnings == Decimal("5000")
        assert await cached_totals(session, affiliate_id) == (7, Decimal("123"))

    @pytest.mark.asyncio
    async def test_repairs_drift(self, session, ledger_with_withdrawals, create_affiliate):
        affiliate_id = await ledger_with_withdrawals()
        other_id = await create_affiliate("tunde")
        await AffiliateAggregates(session).overwrite(affiliate_id, 0, Decimal("0"))
        await session.commit()

        report = await TotalsRebuilder(session).rebuild_totals()

        assert report.checked == 2
        assert [d.affiliate_id for d in report.drifts] == [affiliate_id]
        # Pending withdrawals are not settled and stay in total_earnings
        assert await cached_totals(session, affiliate_id) == (3, Decimal("5000"))
        assert await cached_totals(session, other_id) == (0, Decimal("0"))

    @pytest.mark.asyncio
    async def test_single_affiliate(self, session, ledger_with_withdrawals):
        affiliate_id = await ledger_with_withdrawals()
        await AffiliateAggregates(session).overwrite(affiliate_id, 1, Decimal("1"))
        await session.commit()

        report = await TotalsRebuilder(session).rebuild_totals(affiliate_id)

        assert report.checked == 1
        assert await cached_totals(session, affiliate_id) == (3, Decimal("5000"))

    @pytest.mark.asyncio
    async def test_unknown_affiliate(self, session):
        with pytest.raises(AffiliateNotFound):
            await TotalsRebuilder(session).rebuild_totals(404)

    @pytest.mark.asyncio
    async def test_admin_portal_rebuild(self, session, ledger_with_withdrawals):
        affiliate_id = await ledger_with_withdrawals()
        await AffiliateAggregates(session).overwrite(affiliate_id, 0, Decimal("0"))
        await session.commit()

        result = await AdminPortal(session).rebuild_totals()

        assert result.success is True
        assert result.value.corrected == 1
