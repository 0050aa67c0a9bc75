"""
Admin portal.

Affiliate overview, withdrawal disposition and account status.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.referral import Referral
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest
from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.referral_repository import ReferralRepository
from affiliate_ledger.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from affiliate_ledger.services.affiliate.affiliate_directory import (
    AffiliateDirectory,
)
from affiliate_ledger.services.ledger.totals_rebuilder import (
    RebuildReport,
    TotalsRebuilder,
)
from affiliate_ledger.services.notification.withdrawal_notifier import (
    LoggingNotifier,
    Notifier,
)
from affiliate_ledger.services.portal.results import OperationResult
from affiliate_ledger.services.referral.query_manager import ReferralQueryManager
from affiliate_ledger.services.withdrawal.withdrawal_lifecycle_handler import (
    WithdrawalLifecycleHandler,
)
from affiliate_ledger.services.withdrawal.withdrawal_query_service import (
    WithdrawalQueryService,
)
from affiliate_ledger.utils.exceptions import AffiliateLedgerError


@dataclass
class AffiliateOverview:
    """One row of the admin affiliate table."""

    affiliate: Affiliate
    total_referrals: int
    total_earned: Decimal
    settled_withdrawals: Decimal = Decimal("0")

    @property
    def ledger_earnings(self) -> Decimal:
        """Unsettled commission as the ledger sees it."""
        return max(Decimal("0"), self.total_earned - self.settled_withdrawals)

    @property
    def cache_in_sync(self) -> bool:
        """Whether both cached counters match the ledger."""
        return (
            self.affiliate.total_referrals == self.total_referrals
            and self.affiliate.total_earnings == self.ledger_earnings
        )


class AdminPortal:
    """Facade used by the admin UI."""

    def __init__(
        self, session: AsyncSession, notifier: Notifier | None = None
    ) -> None:
        """
        Initialize admin portal.

        Args:
            session: Database session
            notifier: Channel for withdrawal status notifications
        """
        self.session = session
        self.notifier = notifier or LoggingNotifier()
        self.affiliate_repo = AffiliateRepository(session)
        self.referral_repo = ReferralRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.directory = AffiliateDirectory(session)
        self.lifecycle_handler = WithdrawalLifecycleHandler(session)
        self.withdrawal_queries = WithdrawalQueryService(session)
        self.referral_queries = ReferralQueryManager(session)
        self.totals_rebuilder = TotalsRebuilder(session)

    async def list_affiliates(self) -> list[AffiliateOverview]:
        """
        List affiliates with totals recomputed from the ledger.

        Returns:
            Affiliate overviews, newest first (empty on store error)
        """
        try:
            affiliates = await self.affiliate_repo.list_all()
            totals = await self.referral_repo.get_ledger_totals()
            settled = await self.withdrawal_repo.get_settled_totals()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to load affiliates: {e}")
            return []

        overviews = []
        for affiliate in affiliates:
            row = totals.get(affiliate.id, {})
            overviews.append(
                AffiliateOverview(
                    affiliate=affiliate,
                    total_referrals=int(row.get("count", 0)),
                    total_earned=row.get("completed_commission", Decimal("0")),
                    settled_withdrawals=settled.get(affiliate.id, Decimal("0")),
                )
            )
        return overviews

    async def list_withdrawals(
        self, status: str | None = None
    ) -> list[WithdrawalRequest]:
        """List withdrawal requests, optionally by status."""
        try:
            return await self.withdrawal_queries.list_all_withdrawals(status)
        except AffiliateLedgerError as e:
            logger.warning(f"Invalid withdrawal filter: {e.message}")
            return []

    async def list_referrals(self, limit: int = 100) -> list[Referral]:
        """List most recent referrals."""
        return await self.referral_queries.get_recent_referrals(limit=limit)

    async def transition_withdrawal(
        self,
        withdrawal_id: int,
        new_status: str,
        admin: str,
        rejection_reason: str | None = None,
        transaction_reference: str | None = None,
    ) -> OperationResult[WithdrawalRequest]:
        """
        Approve, reject or pay out a withdrawal request.

        The affiliate is notified after the change is committed; a
        notification failure does not undo the transition.
        """
        try:
            withdrawal = await self.lifecycle_handler.update_withdrawal_status(
                withdrawal_id,
                new_status,
                admin,
                rejection_reason=rejection_reason,
                transaction_reference=transaction_reference,
            )
        except AffiliateLedgerError as e:
            logger.bind(withdrawal_id=withdrawal_id, code=e.code).info(
                f"Withdrawal transition refused: {e.message}"
            )
            return OperationResult.from_error(e)
        except SQLAlchemyError:
            logger.exception(
                f"Withdrawal transition failed for {withdrawal_id}"
            )
            return OperationResult.infrastructure()

        try:
            await self.notifier.withdrawal_status_changed(withdrawal, new_status)
        except Exception as e:
            logger.bind(withdrawal_id=withdrawal_id, status=new_status).exception(
                f"Failed to notify affiliate about withdrawal {withdrawal_id}: {e}"
            )

        return OperationResult.ok(withdrawal)

    async def set_affiliate_status(
        self, affiliate_id: int, status: str
    ) -> OperationResult[Affiliate]:
        """Suspend or reactivate an affiliate."""
        try:
            affiliate = await self.directory.set_status(affiliate_id, status)
        except AffiliateLedgerError as e:
            return OperationResult.from_error(e)
        except SQLAlchemyError:
            logger.exception(f"Failed to set status of affiliate {affiliate_id}")
            return OperationResult.infrastructure()
        return OperationResult.ok(affiliate)

    async def rebuild_totals(
        self, affiliate_id: int | None = None, dry_run: bool = False
    ) -> OperationResult[RebuildReport]:
        """Recompute cached affiliate totals from the ledger."""
        try:
            report = await self.totals_rebuilder.rebuild_totals(
                affiliate_id, dry_run=dry_run
            )
        except AffiliateLedgerError as e:
            return OperationResult.from_error(e)
        except SQLAlchemyError:
            logger.exception("Affiliate totals rebuild failed")
            return OperationResult.infrastructure()
        return OperationResult.ok(report)
