"""
Exception hierarchy for the affiliate ledger.

Errors are grouped by how the caller should react:
- validation: fix the input and retry
- conflict: change intent, retrying will not help
- not found: the referenced record does not exist
"""

from decimal import Decimal


class AffiliateLedgerError(Exception):
    """Base class for all ledger errors."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class LedgerValidationError(AffiliateLedgerError):
    """Input rejected before touching the store."""

    code = "VALIDATION_ERROR"


class InvalidUsername(LedgerValidationError):
    code = "INVALID_USERNAME"


class InvalidEmail(LedgerValidationError):
    code = "INVALID_EMAIL"


class InvalidAmount(LedgerValidationError):
    code = "INVALID_AMOUNT"

    def __init__(self, amount: Decimal) -> None:
        super().__init__(f"Withdrawal amount must be a positive number, got {amount}")
        self.amount = amount


class MissingBankDetails(LedgerValidationError):
    code = "MISSING_BANK_DETAILS"

    def __init__(self, affiliate_id: int) -> None:
        super().__init__("Please add your bank details before withdrawing")
        self.affiliate_id = affiliate_id


class InvalidBankDetails(LedgerValidationError):
    code = "INVALID_BANK_DETAILS"


class MissingRejectionReason(LedgerValidationError):
    code = "MISSING_REJECTION_REASON"

    def __init__(self) -> None:
        super().__init__("A rejection reason is required")


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class LedgerConflictError(AffiliateLedgerError):
    """Request conflicts with current state."""

    code = "CONFLICT"


class UsernameTaken(LedgerConflictError):
    code = "USERNAME_TAKEN"

    def __init__(self, username: str) -> None:
        super().__init__(f"Username '{username}' is already taken")
        self.username = username


class EmailTaken(LedgerConflictError):
    code = "EMAIL_TAKEN"

    def __init__(self, email: str) -> None:
        super().__init__(f"An affiliate account already exists for {email}")
        self.email = email


class PendingRequestExists(LedgerConflictError):
    code = "PENDING_REQUEST_EXISTS"

    def __init__(self, affiliate_id: int) -> None:
        super().__init__(
            "You already have a pending withdrawal request. "
            "Please wait for it to be processed."
        )
        self.affiliate_id = affiliate_id


class InsufficientBalance(LedgerConflictError):
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, requested: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient balance. Available: {available:.2f}, "
            f"requested: {requested:.2f}"
        )
        self.requested = requested
        self.available = available


class InvalidTransition(LedgerConflictError):
    code = "INVALID_TRANSITION"

    def __init__(self, withdrawal_id: int, current: str, requested: str) -> None:
        super().__init__(
            f"Withdrawal {withdrawal_id} cannot move from "
            f"'{current}' to '{requested}'"
        )
        self.withdrawal_id = withdrawal_id
        self.current = current
        self.requested = requested


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class LedgerNotFoundError(AffiliateLedgerError):
    code = "NOT_FOUND"


class AffiliateNotFound(LedgerNotFoundError):
    code = "AFFILIATE_NOT_FOUND"

    def __init__(self, affiliate_id: int | str) -> None:
        super().__init__(f"Affiliate {affiliate_id} not found")
        self.affiliate_id = affiliate_id


class WithdrawalNotFound(LedgerNotFoundError):
    code = "WITHDRAWAL_NOT_FOUND"

    def __init__(self, withdrawal_id: int) -> None:
        super().__init__(f"Withdrawal request {withdrawal_id} not found")
        self.withdrawal_id = withdrawal_id


# ---------------------------------------------------------------------------
# Identity provider
# ---------------------------------------------------------------------------


class IdentityProviderError(AffiliateLedgerError):
    """The external identity provider refused or failed a call."""

    code = "IDENTITY_PROVIDER_ERROR"


class IdentityAlreadyExists(IdentityProviderError):
    """An identity is already registered for this email."""

    code = "IDENTITY_ALREADY_EXISTS"

    def __init__(self, email: str) -> None:
        super().__init__(f"Identity already exists for {email}")
        self.email = email
