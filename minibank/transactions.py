"""
Transaction History Module

Immutable records of balance-affecting events and the append-only,
time-ordered log each account keeps of them.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
from enum import Enum

from .currency import Currency


class TransactionKind(Enum):
    """Kinds of balance-affecting events"""
    OPEN_ACCOUNT = "open_account"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_OUT = "transfer_out"  # counterparty = receiving account
    TRANSFER_IN = "transfer_in"    # counterparty = sending account

    @property
    def is_transfer(self) -> bool:
        return self in (TransactionKind.TRANSFER_OUT, TransactionKind.TRANSFER_IN)


@dataclass(frozen=True)
class Transaction:
    """
    One recorded movement on an account.
    signed_amount is negative for money leaving the account.
    """
    timestamp: datetime
    kind: TransactionKind
    signed_amount: Decimal
    resulting_balance: Decimal
    currency: Currency
    counterparty: Optional[int] = None

    def __post_init__(self):
        if self.kind.is_transfer and self.counterparty is None:
            raise ValueError(f"{self.kind.value} transaction requires a counterparty")
        if not self.kind.is_transfer and self.counterparty is not None:
            raise ValueError(f"{self.kind.value} transaction cannot have a counterparty")

    @property
    def currency_code(self) -> str:
        return self.currency.code

    @property
    def description(self) -> str:
        """Human-readable label"""
        if self.kind == TransactionKind.OPEN_ACCOUNT:
            return "Account opening"
        if self.kind == TransactionKind.DEPOSIT:
            return "Deposit"
        if self.kind == TransactionKind.WITHDRAW:
            return "Withdrawal"
        if self.kind == TransactionKind.TRANSFER_OUT:
            return f"Transfer to account {self.counterparty}"
        return f"Transfer from account {self.counterparty}"


class TransactionLog:
    """
    Append-only, time-ordered sequence of transactions for one account.
    Entries can be read but never removed or replaced.
    """

    def __init__(self):
        self._entries: List[Transaction] = []

    def append(self, transaction: Transaction) -> None:
        """
        Append a transaction

        Raises:
            ValueError: If the transaction is older than the last entry
        """
        if self._entries and transaction.timestamp < self._entries[-1].timestamp:
            raise ValueError(
                f"Transaction at {transaction.timestamp.isoformat()} predates "
                f"last entry at {self._entries[-1].timestamp.isoformat()}"
            )
        self._entries.append(transaction)

    def last(self) -> Optional[Transaction]:
        """Most recent transaction, or None for an empty log"""
        return self._entries[-1] if self._entries else None

    def entries(self) -> Tuple[Transaction, ...]:
        """Snapshot of all entries in append order"""
        return tuple(self._entries)

    def for_currency(self, code: str) -> Tuple[Transaction, ...]:
        """Entries recorded in one currency"""
        return tuple(t for t in self._entries if t.currency.code == code)

    def net_amount(self, code: str) -> Decimal:
        """Signed sum of every entry in one currency, opening included"""
        return sum((t.signed_amount for t in self.for_currency(code)), Decimal('0'))

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Transaction:
        return self._entries[index]
