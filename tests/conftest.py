"""Pytest configuration and shared fixtures for all tests."""

import os

# Minimal environment before any affiliate_ledger import reads settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("WITHDRAWAL_LOCK_RETRY_DELAY", "0")

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from affiliate_ledger.models import Affiliate, Base
from affiliate_ledger.services.affiliate import (
    AffiliateDirectory,
    AffiliateRegistration,
    BankDetails,
)
from affiliate_ledger.services.referral import PaymentConfirmed, ReferralRecorder
from affiliate_ledger.utils.exceptions import (
    IdentityAlreadyExists,
    IdentityProviderError,
)


class FakeIdentityProvider:
    """In-memory identity provider."""

    def __init__(self) -> None:
        self.identities: dict[str, tuple[str, str]] = {}
        self.create_calls = 0

    async def create_identity(self, email: str, password: str) -> str:
        self.create_calls += 1
        if email in self.identities:
            raise IdentityAlreadyExists(email)
        uid = f"uid-{len(self.identities) + 1}"
        self.identities[email] = (password, uid)
        return uid

    async def authenticate(self, email: str, password: str) -> str:
        record = self.identities.get(email)
        if record is None or record[0] != password:
            raise IdentityProviderError("Invalid email or password")
        return record[1]


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Database session bound to the test engine."""
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def identity_provider():
    """Fake external identity provider."""
    return FakeIdentityProvider()


@pytest.fixture
def directory(session, identity_provider):
    """AffiliateDirectory wired to the fake identity provider."""
    return AffiliateDirectory(session, identity_provider)


@pytest.fixture
def recorder(session):
    """ReferralRecorder bound to the test session."""
    return ReferralRecorder(session)


@pytest.fixture
def bank_details():
    """Complete payout bank details."""
    return BankDetails(
        account_name="Kemi Adeyemi",
        bank_name="GTBank",
        account_number="0123456789",
    )


def _registration(username: str, email: str | None = None) -> AffiliateRegistration:
    """Signup form with sensible defaults."""
    return AffiliateRegistration(
        username=username,
        full_name=f"{username.title()} Adeyemi",
        email=email or f"{username.lower()}@example.com",
        password="s3cret-pass",
        phone="+2348000000000",
        whatsapp="+2348000000000",
    )


def _payment(
    transaction_ref: str,
    affiliate_username: str | None = "kemi",
    plan_type: str = "business",
    discount_amount: Decimal | str = Decimal("2000"),
) -> PaymentConfirmed:
    """Confirmed payment event with sensible defaults."""
    return PaymentConfirmed(
        transaction_ref=transaction_ref,
        affiliate_username=affiliate_username,
        plan_type=plan_type,
        discount_amount=Decimal(str(discount_amount)),
        referred_user_id=f"user-{transaction_ref}",
        referred_business_id=f"biz-{transaction_ref}",
        referred_business_name="Mama Put Kitchen",
    )


@pytest.fixture
def make_registration():
    """Factory for signup forms."""
    return _registration


@pytest.fixture
def make_payment():
    """Factory for confirmed payment events."""
    return _payment


@pytest.fixture
def create_affiliate(directory, bank_details):
    """
    Factory registering an affiliate and returning its ID.

    Tests keep IDs rather than instances; a rollback expires instances
    and reading them afterwards would need a lazy load.
    """

    async def _create(username: str = "kemi", with_bank: bool = True) -> int:
        affiliate: Affiliate = await directory.create_affiliate(
            _registration(username)
        )
        affiliate_id = affiliate.id
        if with_bank:
            await directory.record_bank_details(affiliate_id, bank_details)
        return affiliate_id

    return _create


@pytest.fixture
def credit_payments(recorder):
    """Factory recording business/2000 payments for an affiliate."""

    async def _credit(username: str, count: int, prefix: str = "txn") -> None:
        for i in range(count):
            await recorder.record(
                _payment(f"{prefix}-{username}-{i}", affiliate_username=username)
            )

    return _credit
