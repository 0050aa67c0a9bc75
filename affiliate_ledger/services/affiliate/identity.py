"""
Identity provider interface.

Affiliates sign in through an external auth service. The ledger only
needs to create an identity at signup and, when a previous signup got
halfway, prove the caller owns the existing one.
"""

from typing import Protocol


class IdentityProvider(Protocol):
    """External authentication service."""

    async def create_identity(self, email: str, password: str) -> str:
        """
        Register a new identity.

        Returns:
            Provider user ID

        Raises:
            IdentityAlreadyExists: If the email is already registered
            IdentityProviderError: On any other provider failure
        """
        ...

    async def authenticate(self, email: str, password: str) -> str:
        """
        Verify credentials of an existing identity.

        Returns:
            Provider user ID

        Raises:
            IdentityProviderError: If the credentials are rejected
        """
        ...
