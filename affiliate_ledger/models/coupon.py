"""
Coupon model.

Redeemable discount code consumed by checkout. Affiliate coupons are
keyed by the affiliate's username.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import DiscountKind
from affiliate_ledger.models.types import MoneyType


class Coupon(Base):
    """
    Coupon entity.

    The discount is stored as a tagged pair: discount_kind says whether
    fixed_amount or plan_amounts applies.
    """

    __tablename__ = "coupons"

    # Lowercase code is the primary key
    code: Mapped[str] = mapped_column(String(50), primary_key=True)

    # Discount
    discount_kind: Mapped[str] = mapped_column(
        String(20), default=DiscountKind.PER_PLAN.value, nullable=False
    )
    fixed_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    # Plan id -> amount as string, e.g. {"business": "2000"}
    plan_amounts: Mapped[dict[str, str] | None] = mapped_column(
        JSON, nullable=True
    )
    plan_type: Mapped[str] = mapped_column(
        String(20), default="all", nullable=False
    )

    # Usage
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Owner (affiliate coupons only)
    affiliate_id: Mapped[int | None] = mapped_column(
        ForeignKey("affiliates.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

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
    def is_exhausted(self) -> bool:
        """Whether usage limit has been reached."""
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Coupon(code={self.code!r}, kind={self.discount_kind!r}, "
            f"active={self.is_active})>"
        )
