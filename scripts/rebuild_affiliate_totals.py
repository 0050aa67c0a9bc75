#!/usr/bin/env python3
"""
Rebuild cached affiliate totals from the ledger.

Recomputes for every affiliate (or one):
- total_referrals = number of referrals
- total_earnings  = completed commission - approved/paid withdrawals

Only affiliates whose cached values drifted are updated.

Usage:
    python scripts/rebuild_affiliate_totals.py --dry-run       # Preview
    python scripts/rebuild_affiliate_totals.py --apply         # Fix all
    python scripts/rebuild_affiliate_totals.py --apply --affiliate-id 7
"""

import argparse
import asyncio
import sys

from loguru import logger
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from affiliate_ledger.config.database import build_session_maker
from affiliate_ledger.config.settings import settings
from affiliate_ledger.services.ledger.totals_rebuilder import TotalsRebuilder
from affiliate_ledger.utils.exceptions import AffiliateNotFound


# Configure logger
logger.remove()
logger.add(sys.stderr, level="INFO", format="{time:HH:mm:ss} | {level} | {message}")


async def rebuild_affiliate_totals(
    affiliate_id: int | None = None, dry_run: bool = True
) -> int:
    """
    Run the rebuild and print a summary.

    Returns:
        Number of affiliates whose totals drifted
    """
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        poolclass=NullPool,
    )
    session_maker = build_session_maker(engine)

    logger.info("=" * 60)
    logger.info("REBUILD AFFILIATE TOTALS")
    logger.info(f"Mode: {'DRY RUN (preview only)' if dry_run else 'APPLY CHANGES'}")
    logger.info("=" * 60)

    try:
        async with session_maker() as session:
            report = await TotalsRebuilder(session).rebuild_totals(
                affiliate_id, dry_run=dry_run
            )
    finally:
        await engine.dispose()

    for drift in report.drifts:
        logger.warning(
            f"  {drift.username} (id={drift.affiliate_id}): "
            f"referrals {drift.cached_referrals} -> {drift.ledger_referrals}, "
            f"earnings {drift.cached_earnings} -> {drift.ledger_earnings}"
        )

    logger.info(f"Checked: {report.checked}")
    logger.info(f"Drifted: {report.corrected}")
    if report.drifts and dry_run:
        logger.info("Run with --apply to write the corrected totals.")
    elif report.drifts:
        logger.success(f"Updated {report.corrected} affiliates")

    return report.corrected


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Rebuild cached affiliate totals from referrals and withdrawals"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview drift without writing",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Write corrected totals",
    )
    parser.add_argument(
        "--affiliate-id",
        type=int,
        default=None,
        help="Only rebuild this affiliate",
    )

    args = parser.parse_args()

    if not args.dry_run and not args.apply:
        parser.error("specify --dry-run to preview or --apply to make changes")

    try:
        asyncio.run(
            rebuild_affiliate_totals(
                affiliate_id=args.affiliate_id, dry_run=not args.apply
            )
        )
    except AffiliateNotFound as e:
        logger.error(e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()
