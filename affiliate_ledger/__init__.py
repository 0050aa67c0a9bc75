"""
Affiliate referral and commission ledger.

Tracks who referred a paying customer, credits commission, derives a
spendable balance and runs the withdrawal approval workflow.
"""

__version__ = "1.0.0"
