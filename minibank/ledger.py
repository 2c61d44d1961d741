"""
Ledger Module

The Ledger owns every account, assigns account ids and is the only code
that changes balances. Every balance-reading or balance-changing
operation passes the PIN gate first. Transfers validate both sides fully
before either account is touched, so a transfer is applied completely
or not at all.
"""

from decimal import Decimal
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple, Union

from .accounts import Account, PinDigest, validate_pin_format
from .audit import AuditTrail, AuditEventType
from .config import MinibankConfig, get_config
from .currency import Currency, CurrencyRegistry, exact_sum, quantize, to_decimal
from .errors import (
    AccountNotFoundError, InsufficientFundsError, InvalidAmountError,
    InvalidPinError, SameAccountError
)
from .logging_config import get_logger, log_action
from .transactions import Transaction, TransactionKind

Amount = Union[Decimal, int, float, str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Ledger:
    """
    In-memory multi-currency ledger
    """

    def __init__(
        self,
        currencies: Optional[CurrencyRegistry] = None,
        config: Optional[MinibankConfig] = None,
        audit_trail: Optional[AuditTrail] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.config = config or get_config()
        self._currencies = currencies if currencies is not None else CurrencyRegistry()
        self._audit_trail = audit_trail or AuditTrail(enabled=self.config.enable_audit_logging)
        self._clock = clock or _utc_now
        self._accounts: Dict[int, Account] = {}
        self._next_id = 1
        self._last_timestamp: Optional[datetime] = None
        self.logger = get_logger("minibank.ledger")

    @property
    def currencies(self) -> CurrencyRegistry:
        return self._currencies

    @property
    def audit_trail(self) -> AuditTrail:
        return self._audit_trail

    def __len__(self) -> int:
        return len(self._accounts)

    # Account lifecycle

    def create_account(
        self,
        owner: str,
        initial_balance: Amount,
        currency_code: str,
        pin: str
    ) -> int:
        """
        Open an account funded in one currency

        Args:
            owner: Account holder's name
            initial_balance: Opening balance
            currency_code: Code of the opening currency
            pin: Four-digit PIN

        Returns:
            The new account's id

        Raises:
            InvalidCurrencyError: Unknown currency code
            InvalidPinFormatError: PIN is not four digits (require_numeric_pin)
            InvalidAmountError: Negative opening balance (allow_negative_opening_balance)
        """
        code = self._currencies.validate(currency_code)
        if self.config.require_numeric_pin:
            validate_pin_format(pin)
        currency = self._currencies.lookup(code)
        amount = self._to_amount(initial_balance, currency)
        if amount < 0 and not self.config.allow_negative_opening_balance:
            raise InvalidAmountError(amount, "opening balance must not be negative")

        account_id = self._next_id
        timestamp = self._now()
        account = Account(
            id=account_id,
            owner=owner,
            created_at=timestamp,
            pin=PinDigest.create(pin, self.config.pin_hash_n)
        )
        account.record(Transaction(
            timestamp=timestamp,
            kind=TransactionKind.OPEN_ACCOUNT,
            signed_amount=amount,
            resulting_balance=amount,
            currency=currency
        ))

        self._accounts[account_id] = account
        self._next_id += 1

        log_action(
            self.logger, "info", f"Account {account_id} created",
            action="create_account", resource=f"account:{account_id}",
            extra={"currency": code, "opening_balance": str(amount)}
        )
        self._audit_trail.log_event(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            metadata={
                "owner": owner,
                "currency": code,
                "opening_balance": amount
            }
        )
        return account_id

    def account_exists(self, account_id: int) -> bool:
        """Raw existence check; no PIN required"""
        return account_id in self._accounts

    def verify_pin(self, account_id: int, pin: str) -> None:
        """
        PIN gate

        Raises:
            AccountNotFoundError: No such account
            InvalidPinError: PIN does not match
        """
        self._authorize(account_id, pin)

    def get_owner(self, account_id: int, pin: str) -> str:
        return self._authorize(account_id, pin).owner

    # Balance queries

    def get_balance(self, account_id: int, currency_code: str, pin: str) -> Decimal:
        """
        Current balance of one currency

        Raises:
            AccountNotFoundError, InvalidPinError
            CurrencyBalanceNotFoundError: Account never held the currency
        """
        account = self._authorize(account_id, pin)
        return account.balance(currency_code)

    def get_balances(self, account_id: int, pin: str) -> Dict[str, Decimal]:
        """Every balance entry of an account"""
        return self._authorize(account_id, pin).balances

    def list_transactions(self, account_id: int, pin: str) -> Tuple[Transaction, ...]:
        """Read-only snapshot of the account's history, oldest first"""
        return self._authorize(account_id, pin).transactions.entries()

    # Balance operations

    def deposit(self, account_id: int, amount: Amount, currency_code: str, pin: str) -> Decimal:
        """
        Add money to an account

        Creates the currency's balance entry at zero when the account
        has never held it.

        Returns:
            New balance in that currency

        Raises:
            AccountNotFoundError, InvalidPinError, InvalidCurrencyError
            InvalidAmountError: Negative amount (allow_negative_deposit)
        """
        account = self._authorize(account_id, pin)
        code = self._currencies.validate(currency_code)
        currency = self._currencies.lookup(code)
        value = self._to_amount(amount, currency)
        if value < 0 and not self.config.allow_negative_deposit:
            raise InvalidAmountError(value, "deposit amount must not be negative")

        new_balance = self._add(account.balance_or_zero(code), value)
        account.record(Transaction(
            timestamp=self._now(),
            kind=TransactionKind.DEPOSIT,
            signed_amount=value,
            resulting_balance=new_balance,
            currency=currency
        ))

        self._log_movement(
            AuditEventType.DEPOSIT_POSTED, "deposit", account_id,
            {"currency": code, "amount": value, "balance": new_balance}
        )
        return new_balance

    def withdraw(self, account_id: int, amount: Amount, currency_code: str, pin: str) -> Decimal:
        """
        Take money out of an account

        Returns:
            New balance in that currency

        Raises:
            AccountNotFoundError, InvalidPinError, InvalidCurrencyError
            InvalidAmountError: Negative amount
            CurrencyBalanceNotFoundError: Account never held the currency
            InsufficientFundsError: Balance is lower than the amount
        """
        account = self._authorize(account_id, pin)
        code = self._currencies.validate(currency_code)
        currency = self._currencies.lookup(code)
        value = self._to_amount(amount, currency)
        if value < 0:
            raise InvalidAmountError(value, "withdrawal amount must not be negative")

        current = account.balance(code)
        if current < value:
            raise InsufficientFundsError(current, value, code)

        new_balance = self._add(current, -value)
        account.record(Transaction(
            timestamp=self._now(),
            kind=TransactionKind.WITHDRAW,
            signed_amount=-value,
            resulting_balance=new_balance,
            currency=currency
        ))

        self._log_movement(
            AuditEventType.WITHDRAWAL_POSTED, "withdraw", account_id,
            {"currency": code, "amount": value, "balance": new_balance}
        )
        return new_balance

    def transfer(
        self,
        from_id: int,
        to_id: int,
        amount: Amount,
        currency_code: str,
        pin: str
    ) -> None:
        """
        Move money between two accounts

        Only the sender's PIN is checked. Both transaction entries are built
        before either account changes, then both are recorded together with
        the same timestamp.

        Raises:
            SameAccountError: from_id == to_id (checked before the PIN gate)
            AccountNotFoundError, InvalidPinError, InvalidCurrencyError
            InvalidAmountError: Negative amount
            CurrencyBalanceNotFoundError: Sender never held the currency
            InsufficientFundsError: Sender's balance is lower than the amount
        """
        if from_id == to_id:
            raise SameAccountError(from_id)

        sender = self._authorize(from_id, pin)
        receiver = self._get_account(to_id)
        code = self._currencies.validate(currency_code)
        currency = self._currencies.lookup(code)
        value = self._to_amount(amount, currency)
        if value < 0:
            raise InvalidAmountError(value, "transfer amount must not be negative")

        sender_balance = sender.balance(code)
        if sender_balance < value:
            raise InsufficientFundsError(sender_balance, value, code)

        timestamp = self._now()
        outgoing = Transaction(
            timestamp=timestamp,
            kind=TransactionKind.TRANSFER_OUT,
            signed_amount=-value,
            resulting_balance=self._add(sender_balance, -value),
            currency=currency,
            counterparty=to_id
        )
        incoming = Transaction(
            timestamp=timestamp,
            kind=TransactionKind.TRANSFER_IN,
            signed_amount=value,
            resulting_balance=self._add(receiver.balance_or_zero(code), value),
            currency=currency,
            counterparty=from_id
        )

        sender.record(outgoing)
        receiver.record(incoming)

        self._log_movement(
            AuditEventType.TRANSFER_POSTED, "transfer", from_id,
            {"to_account": to_id, "currency": code, "amount": value},
            entity_type="transfer"
        )

    # Internals

    def _get_account(self, account_id: int) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def _authorize(self, account_id: int, pin: str) -> Account:
        account = self._get_account(account_id)
        if not account.pin_matches(pin):
            log_action(
                self.logger, "warning", f"PIN rejected for account {account_id}",
                action="verify_pin", resource=f"account:{account_id}"
            )
            self._audit_trail.log_event(
                event_type=AuditEventType.PIN_REJECTED,
                entity_type="account",
                entity_id=account_id
            )
            raise InvalidPinError(account_id)
        return account

    def _to_amount(self, value: Amount, currency: Currency) -> Decimal:
        try:
            return quantize(to_decimal(value), currency)
        except ValueError as e:
            raise InvalidAmountError(value, str(e)) from e
        except ArithmeticError:
            # Too many digits to hold at the currency's precision
            raise InvalidAmountError(value, "amount exceeds the supported precision") from None

    def _add(self, balance: Decimal, amount: Decimal) -> Decimal:
        try:
            return exact_sum(balance, amount)
        except ValueError as e:
            raise InvalidAmountError(amount, str(e)) from e

    def _now(self) -> datetime:
        # Never hand out a timestamp older than the previous one
        timestamp = self._clock()
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            timestamp = self._last_timestamp
        self._last_timestamp = timestamp
        return timestamp

    def _log_movement(
        self,
        event_type: AuditEventType,
        action: str,
        account_id: int,
        details: Dict,
        entity_type: str = "account"
    ) -> None:
        log_action(
            self.logger, "info", f"{action.capitalize()} posted on account {account_id}",
            action=action, resource=f"account:{account_id}",
            extra={k: str(v) for k, v in details.items()}
        )
        self._audit_trail.log_event(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=account_id,
            metadata=details
        )
