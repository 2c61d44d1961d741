"""
Test suite for accounts module

Tests PIN format rules, PIN digests and the account balance map.
"""

import pytest
from decimal import Decimal
from datetime import datetime, timezone

from minibank.accounts import Account, PinDigest, validate_pin_format
from minibank.currency import Currency
from minibank.errors import CurrencyBalanceNotFoundError, InvalidPinFormatError
from minibank.transactions import Transaction, TransactionKind

TRY = Currency("TRY", "Türk Lirası", "₺")
USD = Currency("USD", "Amerikan Doları", "$")
NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
FAST_N = 16  # Cheap scrypt cost for tests


class TestPinFormat:
    """Test four-digit PIN validation"""

    def test_valid_pins(self):
        """Test four ASCII digits pass"""
        for pin in ["0000", "1234", "9876"]:
            validate_pin_format(pin)

    def test_invalid_pins(self):
        """Test everything else is rejected"""
        for pin in ["", "123", "12345", "12a4", " 123", "١٢٣٤", None, 1234]:
            with pytest.raises(InvalidPinFormatError, match="four digits"):
                validate_pin_format(pin)


class TestPinDigest:
    """Test salted PIN digests"""

    def test_matches_exact_pin_only(self):
        """Test only the original PIN matches"""
        digest = PinDigest.create("1234", FAST_N)

        assert digest.matches("1234")
        assert not digest.matches("4321")
        assert not digest.matches("1234 ")
        assert not digest.matches("")
        assert not digest.matches(None)

    def test_repr_hides_pin(self):
        """Test the PIN never shows up in the repr"""
        digest = PinDigest.create("1234", FAST_N)

        assert "1234" not in repr(digest)

    def test_salts_differ(self):
        """Test the same PIN gives different digests per account"""
        first = PinDigest.create("1234", FAST_N)
        second = PinDigest.create("1234", FAST_N)

        assert first.salt != second.salt
        assert first.digest != second.digest


class TestAccount:
    """Test the account balance map"""

    def setup_method(self):
        self.account = Account(
            id=1,
            owner="Ayşe",
            created_at=NOW,
            pin=PinDigest.create("1234", FAST_N)
        )

    def test_fresh_account_has_no_balances(self):
        """Test absence of a balance entry is an error, not zero"""
        assert self.account.balances == {}
        assert not self.account.has_balance("TRY")

        with pytest.raises(CurrencyBalanceNotFoundError, match="TRY"):
            self.account.balance("TRY")

        assert self.account.balance_or_zero("TRY") == Decimal('0')

    def test_record_sets_balance_and_appends(self):
        """Test recording a transaction updates only its currency"""
        self.account.record(Transaction(
            timestamp=NOW,
            kind=TransactionKind.OPEN_ACCOUNT,
            signed_amount=Decimal('1000'),
            resulting_balance=Decimal('1000'),
            currency=TRY
        ))
        self.account.record(Transaction(
            timestamp=NOW,
            kind=TransactionKind.DEPOSIT,
            signed_amount=Decimal('25'),
            resulting_balance=Decimal('25'),
            currency=USD
        ))

        assert self.account.balance("TRY") == Decimal('1000')
        assert self.account.balance("USD") == Decimal('25')
        assert self.account.currency_codes == ("TRY", "USD")
        assert len(self.account.transactions) == 2

    def test_balances_is_a_copy(self):
        """Test callers cannot mutate balances through the property"""
        self.account.record(Transaction(
            timestamp=NOW,
            kind=TransactionKind.OPEN_ACCOUNT,
            signed_amount=Decimal('10'),
            resulting_balance=Decimal('10'),
            currency=TRY
        ))

        balances = self.account.balances
        balances["TRY"] = Decimal('999999')

        assert self.account.balance("TRY") == Decimal('10')

    def test_pin_matches(self):
        """Test PIN checking delegates to the digest"""
        assert self.account.pin_matches("1234")
        assert not self.account.pin_matches("0000")

    def test_invalid_id(self):
        """Test ids start at 1"""
        with pytest.raises(ValueError, match=">= 1"):
            Account(id=0, owner="X", created_at=NOW, pin=PinDigest.create("1234", FAST_N))
