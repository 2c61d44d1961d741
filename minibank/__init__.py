"""
Minibank

An in-memory multi-currency ledger with PIN-gated deposits, withdrawals
and transfers, Decimal arithmetic and an append-only history per account.
"""

from decimal import getcontext

# Set global decimal context for financial precision
getcontext().prec = 28

__version__ = "1.0.0"
