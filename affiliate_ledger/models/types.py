"""
Standard type definitions for database models.

Provides a consistent type for monetary fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for commissions, discounts, withdrawals
# Precision: 18 digits total, 2 after decimal point (Naira, kobo)
# Range: up to 9,999,999,999,999,999.99
MoneyType = DECIMAL(18, 2)
