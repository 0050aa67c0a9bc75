"""
WithdrawalRequest model.

An affiliate's request to convert accrued commission into a bank payout.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import WithdrawalStatus
from affiliate_ledger.models.types import MoneyType


PENDING_ONLY = text("status = 'pending'")


class WithdrawalRequest(Base):
    """
    WithdrawalRequest entity.

    Bank details are copied from the affiliate at request time so later
    edits do not change where an accepted payout goes.

    Attributes:
        id: Primary key
        affiliate_id: Requesting affiliate
        affiliate_username: Denormalized username
        affiliate_email: Denormalized email (for notifications)
        amount: Requested amount
        bank_account_name: Snapshot of payout account holder
        bank_name: Snapshot of payout bank
        bank_account_number: Snapshot of payout account number
        status: pending, approved, rejected or paid
        requested_at: When the affiliate submitted the request
        processed_at: When an admin last transitioned it
        processed_by: Admin identity that transitioned it
        rejection_reason: Reason given on rejection
        transaction_reference: Bank transfer reference set on payout
    """

    __tablename__ = "withdrawal_requests"
    __table_args__ = (
        CheckConstraint("amount > 0", name="withdrawal_amount_positive"),
        # At most one pending request per affiliate
        Index(
            "uq_withdrawal_requests_one_pending",
            "affiliate_id",
            unique=True,
            postgresql_where=PENDING_ONLY,
            sqlite_where=PENDING_ONLY,
        ),
        Index("idx_withdrawal_requests_status", "status", "requested_at"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Affiliate reference
    affiliate_id: Mapped[int] = mapped_column(
        ForeignKey("affiliates.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    affiliate_username: Mapped[str] = mapped_column(String(50), nullable=False)
    affiliate_email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Amount
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Bank details snapshot
    bank_account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_account_number: Mapped[str] = mapped_column(String(50), nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default=WithdrawalStatus.PENDING.value, nullable=False
    )

    # Processing
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    transaction_reference: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<WithdrawalRequest(id={self.id}, "
            f"affiliate_id={self.affiliate_id}, amount={self.amount}, "
            f"status={self.status!r})>"
        )
