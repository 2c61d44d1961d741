"""
Account Module

An account is an integer identity with an owner, one balance per currency,
a PIN and its own transaction history. Accounts are created and mutated
only through the Ledger.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass, field
from typing import Dict, Tuple
import hashlib
import hmac
import re
import secrets

from .errors import CurrencyBalanceNotFoundError, InvalidPinFormatError
from .transactions import Transaction, TransactionLog

PIN_PATTERN = re.compile(r"[0-9]{4}")

_SCRYPT_R = 8
_SCRYPT_P = 1


def validate_pin_format(pin: str) -> None:
    """Reject anything that is not exactly four ASCII digits"""
    if not isinstance(pin, str) or not PIN_PATTERN.fullmatch(pin):
        raise InvalidPinFormatError()


def _generate_salt() -> str:
    """Generate random salt for PIN hashing"""
    return secrets.token_hex(16)


def _hash_pin(pin: str, salt: str, n: int) -> str:
    return hashlib.scrypt(
        pin.encode('utf-8'),
        salt=salt.encode('utf-8'),
        n=n, r=_SCRYPT_R, p=_SCRYPT_P,
        dklen=32
    ).hex()


@dataclass(frozen=True)
class PinDigest:
    """Salted scrypt digest of a PIN; the PIN itself is never stored"""
    salt: str
    digest: str
    n: int

    @classmethod
    def create(cls, pin: str, n: int) -> 'PinDigest':
        salt = _generate_salt()
        return cls(salt=salt, digest=_hash_pin(pin, salt, n), n=n)

    def matches(self, pin: str) -> bool:
        """Exact comparison, constant time"""
        if not isinstance(pin, str):
            return False
        candidate = _hash_pin(pin, self.salt, self.n)
        return hmac.compare_digest(candidate, self.digest)

    def __repr__(self) -> str:
        return "PinDigest(<redacted>)"


@dataclass
class Account:
    """
    Ledger account.
    A balance entry exists for a currency only once the account has held it.
    """
    id: int
    owner: str
    created_at: datetime
    pin: PinDigest = field(repr=False)
    _balances: Dict[str, Decimal] = field(default_factory=dict, repr=False)
    transactions: TransactionLog = field(default_factory=TransactionLog, repr=False)

    def __post_init__(self):
        if self.id < 1:
            raise ValueError("Account id must be >= 1")

    def pin_matches(self, pin: str) -> bool:
        return self.pin.matches(pin)

    def has_balance(self, currency_code: str) -> bool:
        """Check if the account has ever held this currency"""
        return currency_code in self._balances

    def balance(self, currency_code: str) -> Decimal:
        """
        Current balance in one currency

        Raises:
            CurrencyBalanceNotFoundError: If the account never held the currency
        """
        try:
            return self._balances[currency_code]
        except KeyError:
            raise CurrencyBalanceNotFoundError(currency_code) from None

    def balance_or_zero(self, currency_code: str) -> Decimal:
        return self._balances.get(currency_code, Decimal('0'))

    @property
    def balances(self) -> Dict[str, Decimal]:
        """Copy of all balance entries"""
        return dict(self._balances)

    @property
    def currency_codes(self) -> Tuple[str, ...]:
        return tuple(self._balances)

    def record(self, transaction: Transaction) -> None:
        """
        Append a transaction and set the balance it resulted in.
        Only the entry for the transaction's currency changes.
        """
        self.transactions.append(transaction)
        self._balances[transaction.currency.code] = transaction.resulting_balance
