"""
Affiliate repository.

Data access layer for Affiliate model.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.repositories.base import BaseRepository
from affiliate_ledger.utils.validation import normalize_username


# Written only by affiliate_ledger.services.ledger.aggregates
AGGREGATE_FIELDS = frozenset({"total_referrals", "total_earnings"})


class AffiliateRepository(BaseRepository[Affiliate]):
    """Affiliate repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate repository."""
        super().__init__(Affiliate, session)

    async def get_by_id(self, id: Any) -> Affiliate | None:
        """
        Get affiliate by ID, refreshing aggregates from the database.

        Aggregates are changed with UPDATE statements, so a cached
        instance in the identity map may hold stale totals.

        Args:
            id: Affiliate ID

        Returns:
            Affiliate or None if not found
        """
        return await self.session.get(
            Affiliate, id, populate_existing=True
        )

    async def get_by_username(self, username: str) -> Affiliate | None:
        """
        Get affiliate by username (case-insensitive).

        Args:
            username: Affiliate username

        Returns:
            Affiliate or None if not found
        """
        stmt = (
            select(Affiliate)
            .where(Affiliate.username == normalize_username(username))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Affiliate | None:
        """
        Get affiliate by email.

        Args:
            email: Email address (compared lowercase)

        Returns:
            Affiliate or None if not found
        """
        stmt = select(Affiliate).where(
            Affiliate.email == email.strip().lower()
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_external_identity(
        self, external_identity_id: str
    ) -> Affiliate | None:
        """
        Get affiliate by identity-provider user ID.

        Args:
            external_identity_id: Identity issued by the auth provider

        Returns:
            Affiliate or None if not found
        """
        stmt = (
            select(Affiliate)
            .where(Affiliate.external_identity_id == external_identity_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_update(
        self, affiliate_id: int, nowait: bool = False
    ) -> Affiliate | None:
        """
        Get affiliate with a row lock (SELECT FOR UPDATE).

        Serializes writers that must check-then-act on one affiliate.
        SQLite ignores the lock clause.

        Args:
            affiliate_id: Affiliate ID
            nowait: Fail immediately instead of waiting for the lock

        Returns:
            Affiliate or None if not found
        """
        stmt = (
            select(Affiliate)
            .where(Affiliate.id == affiliate_id)
            .with_for_update(nowait=nowait)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Affiliate]:
        """
        Get all affiliates, newest first.

        Returns:
            List of affiliates
        """
        stmt = (
            select(Affiliate)
            .order_by(Affiliate.created_at.desc(), Affiliate.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, id: Any, **data: Any) -> Affiliate | None:
        """
        Update affiliate profile fields.

        Raises:
            ValueError: If an aggregate field is passed; aggregates are
                changed only through AffiliateAggregates
        """
        forbidden = AGGREGATE_FIELDS.intersection(data)
        if forbidden:
            raise ValueError(
                f"Aggregate fields cannot be updated directly: {sorted(forbidden)}"
            )
        if "username" in data:
            raise ValueError("Username is immutable")
        return await super().update(id, **data)
