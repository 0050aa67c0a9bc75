"""
Logging configuration.

Configures the loguru logger with a stderr sink and an optional rotating
file sink.
"""

import sys

from loguru import logger

from affiliate_ledger.config.settings import settings


def setup_logging() -> None:
    """Configure logger sinks from settings."""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            level=settings.log_level,
            encoding="utf-8",
        )

    logger.info("Affiliate ledger logging configured")
