"""
Rebuild cached affiliate totals from the ledger.

total_earnings is a cache; referrals and withdrawal requests are the
source of truth. Drift can appear after manual DB edits or a crash
between systems, and this module repairs it.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.referral_repository import ReferralRepository
from affiliate_ledger.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from affiliate_ledger.services.ledger.aggregates import AffiliateAggregates
from affiliate_ledger.utils.db_decorators import with_rollback_on_error
from affiliate_ledger.utils.exceptions import AffiliateNotFound


@dataclass
class TotalsDrift:
    """Difference found for one affiliate."""

    affiliate_id: int
    username: str
    cached_referrals: int
    cached_earnings: Decimal
    ledger_referrals: int
    ledger_earnings: Decimal


@dataclass
class RebuildReport:
    """Result of a rebuild run."""

    checked: int = 0
    drifts: list[TotalsDrift] = field(default_factory=list)
    dry_run: bool = False

    @property
    def corrected(self) -> int:
        """Number of affiliates whose totals were (or would be) fixed."""
        return len(self.drifts)


class TotalsRebuilder:
    """Recompute total_referrals and total_earnings from the ledger."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize rebuilder.

        Args:
            session: Database session
        """
        self.session = session
        self.affiliate_repo = AffiliateRepository(session)
        self.referral_repo = ReferralRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.aggregates = AffiliateAggregates(session)

    @with_rollback_on_error
    async def rebuild_totals(
        self, affiliate_id: int | None = None, dry_run: bool = False
    ) -> RebuildReport:
        """
        Recompute cached totals and update rows that drifted.

        total_referrals = count(referrals)
        total_earnings = max(0, completed commission - approved/paid
        withdrawals)

        Args:
            affiliate_id: Only rebuild this affiliate (all when None)
            dry_run: Report drift without writing

        Returns:
            RebuildReport listing every drifted affiliate

        Raises:
            AffiliateNotFound: If affiliate_id is given and unknown
        """
        if affiliate_id is not None:
            affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
            if affiliate is None:
                raise AffiliateNotFound(affiliate_id)
            affiliates = [affiliate]
        else:
            affiliates = await self.affiliate_repo.list_all()

        referral_totals = await self.referral_repo.get_ledger_totals(affiliate_id)
        settled_totals = await self.withdrawal_repo.get_settled_totals(affiliate_id)

        report = RebuildReport(dry_run=dry_run)

        for affiliate in affiliates:
            report.checked += 1
            referral_row = referral_totals.get(affiliate.id, {})
            ledger_referrals = int(referral_row.get("count", 0))
            completed = referral_row.get("completed_commission", Decimal("0"))
            settled = settled_totals.get(affiliate.id, Decimal("0"))
            ledger_earnings = max(Decimal("0"), completed - settled)

            if (
                affiliate.total_referrals == ledger_referrals
                and affiliate.total_earnings == ledger_earnings
            ):
                continue

            drift = TotalsDrift(
                affiliate_id=affiliate.id,
                username=affiliate.username,
                cached_referrals=affiliate.total_referrals,
                cached_earnings=affiliate.total_earnings,
                ledger_referrals=ledger_referrals,
                ledger_earnings=ledger_earnings,
            )
            report.drifts.append(drift)

            logger.bind(
                affiliate_id=affiliate.id,
                cached_referrals=affiliate.total_referrals,
                ledger_referrals=ledger_referrals,
                cached_earnings=str(affiliate.total_earnings),
                ledger_earnings=str(ledger_earnings),
            ).warning(
                f"Affiliate totals drifted for {affiliate.username}"
            )

            if not dry_run:
                await self.aggregates.overwrite(
                    affiliate.id, ledger_referrals, ledger_earnings
                )

        if not dry_run and report.drifts:
            await self.session.commit()

        logger.bind(
            checked=report.checked,
            corrected=report.corrected,
            dry_run=dry_run,
        ).info(
            "Affiliate totals rebuild finished"
        )
        return report
