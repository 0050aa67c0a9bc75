"""
Affiliate model.

Represents a registered partner who earns commission for referring
paying customers.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import AffiliateStatus
from affiliate_ledger.models.types import MoneyType


class Affiliate(Base):
    """
    Affiliate entity.

    Aggregate counters (total_referrals, total_earnings) are written only
    through affiliate_ledger.services.ledger.aggregates.

    Attributes:
        id: Primary key
        username: Unique lowercase alphanumeric username (immutable)
        full_name: Display name
        email: Unique lowercase email
        phone: Contact number
        whatsapp: WhatsApp number (optional)
        external_identity_id: Identity issued by the auth provider
        bank_account_name: Payout account holder
        bank_name: Payout bank
        bank_account_number: Payout account number
        total_referrals: Count of credited referrals
        total_earnings: Credited commission minus settled withdrawals
        status: active, suspended or pending
        created_at: Signup timestamp
        updated_at: Last modification timestamp
    """

    __tablename__ = "affiliates"
    __table_args__ = (
        CheckConstraint(
            "total_referrals >= 0", name="total_referrals_non_negative"
        ),
        CheckConstraint(
            "total_earnings >= 0", name="total_earnings_non_negative"
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    username: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    whatsapp: Mapped[str | None] = mapped_column(String(50), nullable=True)
    external_identity_id: Mapped[str] = mapped_column(
        String(128), unique=True, index=True, nullable=False
    )

    # Bank details (required before first withdrawal)
    bank_account_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    bank_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank_account_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    # Aggregates
    total_referrals: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=AffiliateStatus.ACTIVE.value,
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    @property
    def has_bank_details(self) -> bool:
        """Whether all payout fields are filled in."""
        return bool(
            self.bank_account_name
            and self.bank_name
            and self.bank_account_number
        )

    @property
    def is_active(self) -> bool:
        """Whether the affiliate may earn commission."""
        return self.status == AffiliateStatus.ACTIVE.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Affiliate(id={self.id}, username={self.username!r}, "
            f"total_referrals={self.total_referrals}, "
            f"total_earnings={self.total_earnings})>"
        )
