"""
Referral model.

One successful, commission-bearing signup or upgrade attributed to an
affiliate.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import PaymentStatus
from affiliate_ledger.models.types import MoneyType


class Referral(Base):
    """Referral model - credited referrals of paying businesses."""

    __tablename__ = "referrals"
    __table_args__ = (
        Index("idx_referrals_affiliate_status", "affiliate_id", "payment_status"),
        Index("idx_referrals_affiliate_created", "affiliate_id", "created_at"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Affiliate (who referred)
    affiliate_id: Mapped[int] = mapped_column(
        ForeignKey("affiliates.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    affiliate_username: Mapped[str] = mapped_column(String(50), nullable=False)

    # Payment transaction that produced this referral
    transaction_ref: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )

    # Referred business
    referred_user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    referred_business_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    referred_business_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    referred_user_phone: Mapped[str] = mapped_column(
        String(50), default="", nullable=False
    )
    referred_user_whatsapp: Mapped[str] = mapped_column(
        String(50), default="", nullable=False
    )

    # Commercial facts
    plan_type: Mapped[str] = mapped_column(String(30), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    payment_status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.COMPLETED.value, nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Referral(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"plan_type={self.plan_type!r}, "
            f"commission={self.commission_amount})>"
        )
