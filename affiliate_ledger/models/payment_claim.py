"""
PaymentClaim model.

Idempotency marker for payment confirmations. The primary key is the
gateway transaction reference, so a second insert for the same payment
fails with an integrity error.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base


class PaymentClaim(Base):
    """Claim on a payment transaction reference."""

    __tablename__ = "payment_claims"

    transaction_ref: Mapped[str] = mapped_column(String(255), primary_key=True)
    affiliate_id: Mapped[int] = mapped_column(
        ForeignKey("affiliates.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PaymentClaim(transaction_ref={self.transaction_ref!r}, "
            f"affiliate_id={self.affiliate_id})>"
        )
