"""
Affiliate self-service portal.

Signup, bank details, withdrawal requests and the dashboard read model.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.referral import Referral
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest
from affiliate_ledger.services.affiliate.affiliate_directory import (
    AffiliateDirectory,
    AffiliateRegistration,
    BankDetails,
)
from affiliate_ledger.services.affiliate.identity import IdentityProvider
from affiliate_ledger.services.balance_calculator import (
    BalanceCalculator,
    BalanceSummary,
)
from affiliate_ledger.services.portal.results import OperationResult
from affiliate_ledger.services.referral.query_manager import ReferralQueryManager
from affiliate_ledger.services.withdrawal.withdrawal_query_service import (
    WithdrawalQueryService,
)
from affiliate_ledger.services.withdrawal.withdrawal_request_handler import (
    WithdrawalRequestHandler,
)
from affiliate_ledger.utils.exceptions import AffiliateLedgerError


@dataclass
class AffiliateDashboard:
    """Everything the affiliate dashboard shows."""

    affiliate: Affiliate
    balance: BalanceSummary
    referrals: list[Referral] = field(default_factory=list)
    withdrawals: list[WithdrawalRequest] = field(default_factory=list)

    @property
    def has_pending_withdrawal(self) -> bool:
        return self.balance.pending_withdrawals > Decimal("0")


class AffiliatePortal:
    """Facade used by the affiliate-facing UI."""

    def __init__(
        self,
        session: AsyncSession,
        identity_provider: IdentityProvider | None = None,
    ) -> None:
        """
        Initialize affiliate portal.

        Args:
            session: Database session
            identity_provider: Auth service used at signup
        """
        self.session = session
        self.directory = AffiliateDirectory(session, identity_provider)
        self.balance_calculator = BalanceCalculator(session)
        self.request_handler = WithdrawalRequestHandler(session)
        self.withdrawal_queries = WithdrawalQueryService(session)
        self.referral_queries = ReferralQueryManager(session)

    async def is_username_available(self, username: str) -> bool:
        """Username check for the signup form (False on store error)."""
        try:
            return await self.directory.is_username_available(username)
        except SQLAlchemyError as e:
            logger.warning(f"Username availability check failed: {e}")
            return False

    async def sign_up(
        self, registration: AffiliateRegistration
    ) -> OperationResult[Affiliate]:
        """
        Register a new affiliate.

        Returns:
            OperationResult with the affiliate on success
        """
        try:
            affiliate = await self.directory.create_affiliate(registration)
        except AffiliateLedgerError as e:
            logger.bind(username=registration.username, code=e.code).info(
                f"Affiliate signup refused: {e.message}"
            )
            return OperationResult.from_error(e)
        except SQLAlchemyError:
            logger.exception(
                f"Affiliate signup failed for {registration.username}"
            )
            return OperationResult.infrastructure()
        return OperationResult.ok(affiliate)

    async def save_bank_details(
        self, affiliate_id: int, details: BankDetails
    ) -> OperationResult[Affiliate]:
        """Replace the affiliate's payout bank details."""
        try:
            affiliate = await self.directory.record_bank_details(
                affiliate_id, details
            )
        except AffiliateLedgerError as e:
            return OperationResult.from_error(e)
        except SQLAlchemyError:
            logger.exception(
                f"Failed to save bank details for affiliate {affiliate_id}"
            )
            return OperationResult.infrastructure()
        return OperationResult.ok(affiliate)

    async def request_withdrawal(
        self, affiliate_id: int, amount: Decimal | int | str
    ) -> OperationResult[WithdrawalRequest]:
        """Submit a withdrawal request."""
        try:
            withdrawal = await self.request_handler.request_withdrawal(
                affiliate_id, amount
            )
        except AffiliateLedgerError as e:
            logger.bind(affiliate_id=affiliate_id, code=e.code).info(
                f"Withdrawal request refused: {e.message}"
            )
            return OperationResult.from_error(e)
        except SQLAlchemyError:
            logger.exception(
                f"Withdrawal request failed for affiliate {affiliate_id}"
            )
            return OperationResult.infrastructure()
        return OperationResult.ok(withdrawal)

    async def get_dashboard(
        self, affiliate_id: int
    ) -> AffiliateDashboard | None:
        """
        Build the dashboard read model.

        Returns:
            AffiliateDashboard, or None if the affiliate is unknown or the
            store is unavailable
        """
        try:
            affiliate = await self.directory.affiliate_repo.get_by_id(
                affiliate_id
            )
            if affiliate is None:
                return None
            balance = await self.balance_calculator.get_balance_summary(
                affiliate_id
            )
        except SQLAlchemyError as e:
            logger.warning(
                f"Failed to load dashboard for affiliate {affiliate_id}: {e}"
            )
            return None

        return AffiliateDashboard(
            affiliate=affiliate,
            balance=balance,
            referrals=await self.referral_queries.get_affiliate_referrals(
                affiliate_id
            ),
            withdrawals=await self.withdrawal_queries.list_affiliate_withdrawals(
                affiliate_id
            ),
        )
