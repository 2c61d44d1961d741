"""
Ledger Error Taxonomy

Every rejected ledger operation raises one of these. Callers catch
LedgerError (or a specific subclass) and recover; no ledger operation
changes state before raising.
"""

from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger errors"""


class AccountNotFoundError(LedgerError):
    """Account id is not present in the ledger"""

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class InvalidPinError(LedgerError):
    """Supplied PIN does not match the account's PIN"""

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__("Invalid PIN")


class InvalidPinFormatError(LedgerError):
    """PIN is not exactly four digits"""

    def __init__(self):
        super().__init__("PIN must be exactly four digits")


class InvalidCurrencyError(LedgerError):
    """Currency code is not in the registry"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Invalid currency: {code}")


class CurrencyBalanceNotFoundError(LedgerError):
    """Account has never held the currency (distinct from a zero balance)"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"No balance found for currency: {code}")


class InsufficientFundsError(LedgerError):
    """Withdrawal or transfer amount exceeds the current balance"""

    def __init__(self, available: Decimal, requested: Decimal, currency_code: str):
        self.available = available
        self.requested = requested
        self.currency_code = currency_code
        super().__init__(
            f"Insufficient funds: available {available} {currency_code}, "
            f"requested {requested} {currency_code}"
        )


class SameAccountError(LedgerError):
    """Transfer source and destination are the same account"""

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__("Cannot transfer to the same account")


class InvalidAmountError(LedgerError):
    """Amount rejected by the configured amount policy"""

    def __init__(self, amount: Decimal, reason: Optional[str] = None):
        self.amount = amount
        self.reason = reason or "amount must not be negative"
        super().__init__(f"Invalid amount {amount}: {self.reason}")
