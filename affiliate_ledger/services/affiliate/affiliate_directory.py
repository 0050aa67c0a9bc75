"""
Affiliate directory.

Signup, lookup, bank details and account status of affiliates.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.enums import AffiliateStatus
from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.services.affiliate.identity import IdentityProvider
from affiliate_ledger.services.coupon.coupon_binder import CouponBinder
from affiliate_ledger.utils.db_decorators import with_rollback_on_error
from affiliate_ledger.utils.exceptions import (
    AffiliateNotFound,
    EmailTaken,
    IdentityAlreadyExists,
    IdentityProviderError,
    InvalidBankDetails,
    LedgerValidationError,
    UsernameTaken,
)
from affiliate_ledger.utils.validation import (
    is_valid_username,
    normalize_username,
    validate_email,
    validate_username,
)


@dataclass
class AffiliateRegistration:
    """Signup form of a new affiliate."""

    username: str
    full_name: str
    email: str
    password: str
    phone: str | None = None
    whatsapp: str | None = None

    def __repr__(self) -> str:
        # Keep the password out of logs
        return (
            f"AffiliateRegistration(username={self.username!r}, "
            f"email={self.email!r})"
        )


@dataclass(frozen=True)
class BankDetails:
    """Payout bank account."""

    account_name: str
    bank_name: str
    account_number: str

    def cleaned(self) -> "BankDetails":
        """
        Strip whitespace and require every field.

        Raises:
            InvalidBankDetails: If any field is blank
        """
        cleaned = BankDetails(
            account_name=(self.account_name or "").strip(),
            bank_name=(self.bank_name or "").strip(),
            account_number=(self.account_number or "").strip(),
        )
        if not (
            cleaned.account_name and cleaned.bank_name and cleaned.account_number
        ):
            raise InvalidBankDetails(
                "Account name, bank name and account number are all required"
            )
        return cleaned


class AffiliateDirectory:
    """Registry of affiliates."""

    def __init__(
        self,
        session: AsyncSession,
        identity_provider: IdentityProvider | None = None,
    ) -> None:
        """
        Initialize affiliate directory.

        Args:
            session: Database session
            identity_provider: Auth service, required for create_affiliate
        """
        self.session = session
        self.identity_provider = identity_provider
        self.affiliate_repo = AffiliateRepository(session)
        self.coupon_binder = CouponBinder(session)

    async def is_username_available(self, username: str) -> bool:
        """
        Check whether a username can be registered.

        Args:
            username: Candidate username

        Returns:
            False if the username is malformed or already used
        """
        if not is_valid_username(username):
            return False
        return await self.affiliate_repo.get_by_username(username) is None

    async def lookup_by_username(self, username: str) -> Affiliate | None:
        """Find an affiliate by username (case-insensitive)."""
        if not normalize_username(username):
            return None
        return await self.affiliate_repo.get_by_username(username)

    async def lookup_by_external_identity(
        self, external_identity_id: str
    ) -> Affiliate | None:
        """Find an affiliate by identity-provider user ID."""
        if not external_identity_id:
            return None
        return await self.affiliate_repo.get_by_external_identity(
            external_identity_id
        )

    async def get_affiliate(self, affiliate_id: int) -> Affiliate:
        """
        Get affiliate by ID.

        Raises:
            AffiliateNotFound: If no affiliate has this ID
        """
        affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
        if affiliate is None:
            raise AffiliateNotFound(affiliate_id)
        return affiliate

    @with_rollback_on_error
    async def create_affiliate(
        self, registration: AffiliateRegistration
    ) -> Affiliate:
        """
        Register an affiliate and bind its coupon.

        Creating the external identity and the affiliate row are two
        systems. If a previous attempt created the identity but not the
        row, the provider reports the identity exists; the caller is then
        re-authenticated and either the existing affiliate for that
        identity is reused or the row is created for it. If the row was
        committed but the coupon was not bound, a retry with the same
        username, email and password finishes the signup.

        Args:
            registration: Signup form

        Returns:
            Created (or reused) affiliate

        Raises:
            InvalidUsername: Username not alphanumeric or too short/long
            InvalidEmail: Malformed email
            UsernameTaken: Username already registered
            EmailTaken: An affiliate already exists for the email
            IdentityProviderError: Provider failure or rejected credentials
        """
        if self.identity_provider is None:
            raise RuntimeError("AffiliateDirectory needs an identity provider to sign up")

        username = validate_username(registration.username)
        email = validate_email(registration.email)
        full_name = (registration.full_name or "").strip()
        if not full_name:
            raise LedgerValidationError("Full name is required")

        taken = await self.affiliate_repo.get_by_username(username)
        if taken is not None:
            resumed = await self._resume_signup(
                taken, email, registration.password
            )
            if resumed is None:
                raise UsernameTaken(username)
            return resumed
        if await self.affiliate_repo.get_by_email(email) is not None:
            raise EmailTaken(email)

        try:
            identity_id = await self.identity_provider.create_identity(
                email, registration.password
            )
        except IdentityAlreadyExists:
            logger.bind(username=username).info(
                f"Identity already exists for {email}, re-authenticating"
            )
            identity_id = await self.identity_provider.authenticate(
                email, registration.password
            )
            existing = await self.affiliate_repo.get_by_external_identity(
                identity_id
            )
            if existing is not None:
                logger.bind(affiliate_id=existing.id).info(
                    f"Reusing affiliate {existing.username} for identity"
                )
                await self.coupon_binder.bind_coupon_for_username(
                    existing.username, existing.id
                )
                return existing

        affiliate = await self._insert_affiliate(
            username=username,
            full_name=full_name,
            email=email,
            phone=(registration.phone or "").strip() or None,
            whatsapp=(registration.whatsapp or "").strip() or None,
            external_identity_id=identity_id,
        )

        await self.coupon_binder.bind_coupon_for_username(
            affiliate.username, affiliate.id
        )

        logger.bind(affiliate_id=affiliate.id, email=email).info(
            f"Affiliate created: {affiliate.username}"
        )
        return affiliate

    async def _resume_signup(
        self, affiliate: Affiliate, email: str, password: str
    ) -> Affiliate | None:
        """
        Rebind the coupon of an affiliate whose signup was interrupted.

        Returns None unless the email matches and the provider
        authenticates the caller to this affiliate's own identity.
        """
        if affiliate.email != email:
            return None
        try:
            identity_id = await self.identity_provider.authenticate(
                email, password
            )
        except IdentityProviderError:
            return None
        if identity_id != affiliate.external_identity_id:
            return None

        logger.bind(affiliate_id=affiliate.id).info(
            f"Resuming signup of affiliate {affiliate.username}"
        )
        await self.coupon_binder.bind_coupon_for_username(
            affiliate.username, affiliate.id
        )
        return affiliate

    async def _insert_affiliate(self, **data: object) -> Affiliate:
        """Insert and commit, mapping unique violations to domain errors."""
        try:
            affiliate = await self.affiliate_repo.create(
                total_referrals=0,
                total_earnings=0,
                status=AffiliateStatus.ACTIVE.value,
                **data,
            )
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup
            await self.session.rollback()
            username = str(data["username"])
            if await self.affiliate_repo.get_by_username(username) is not None:
                raise UsernameTaken(username) from None
            email = str(data["email"])
            if await self.affiliate_repo.get_by_email(email) is not None:
                raise EmailTaken(email) from None
            existing = await self.affiliate_repo.get_by_external_identity(
                str(data["external_identity_id"])
            )
            if existing is not None:
                return existing
            raise
        return affiliate

    @with_rollback_on_error
    async def record_bank_details(
        self, affiliate_id: int, details: BankDetails
    ) -> Affiliate:
        """
        Replace the affiliate's payout bank details.

        Args:
            affiliate_id: Affiliate ID
            details: New bank details (all fields required)

        Returns:
            Updated affiliate

        Raises:
            InvalidBankDetails: If any field is blank
            AffiliateNotFound: If no affiliate has this ID
        """
        cleaned = details.cleaned()

        affiliate = await self.affiliate_repo.update(
            affiliate_id,
            bank_account_name=cleaned.account_name,
            bank_name=cleaned.bank_name,
            bank_account_number=cleaned.account_number,
        )
        if affiliate is None:
            raise AffiliateNotFound(affiliate_id)

        await self.session.commit()

        logger.bind(affiliate_id=affiliate_id).info(
            "Affiliate bank details updated"
        )
        return affiliate

    @with_rollback_on_error
    async def set_status(
        self, affiliate_id: int, status: str
    ) -> Affiliate:
        """
        Change account status (suspend, reactivate).

        Suspended affiliates keep their balance but earn no new
        commission.

        Args:
            affiliate_id: Affiliate ID
            status: active, suspended or pending

        Returns:
            Updated affiliate

        Raises:
            LedgerValidationError: Unknown status
            AffiliateNotFound: If no affiliate has this ID
        """
        try:
            new_status = AffiliateStatus(status)
        except ValueError:
            raise LedgerValidationError(
                f"Unknown affiliate status: {status!r}"
            ) from None

        affiliate = await self.affiliate_repo.update(
            affiliate_id, status=new_status.value
        )
        if affiliate is None:
            raise AffiliateNotFound(affiliate_id)

        await self.session.commit()

        logger.bind(
            affiliate_id=affiliate_id,
            username=affiliate.username,
        ).info(
            f"Affiliate status changed to {new_status.value}"
        )
        return affiliate
