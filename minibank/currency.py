"""
Multi-Currency Support Module

Holds the fixed registry of supported currencies and the Decimal helpers
used for every monetary value. NEVER uses float for monetary values.
"""

from decimal import Decimal, Inexact, InvalidOperation, ROUND_HALF_UP, localcontext
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Tuple, Union
import re

from .errors import InvalidCurrencyError


@dataclass(frozen=True)
class Currency:
    """Supported currency with display metadata"""
    code: str
    name: str
    symbol: str
    precision: int = 2  # Minor-unit digits


class CurrencyCode(str):
    """
    Currency code that has been checked against a registry.
    Only CurrencyRegistry.validate() should create these.
    """
    __slots__ = ()


DEFAULT_CURRENCIES: Tuple[Currency, ...] = (
    Currency("TRY", "Türk Lirası", "₺"),
    Currency("USD", "Amerikan Doları", "$"),
    Currency("EUR", "Euro", "€"),
)

_CURRENCY_SYMBOLS = frozenset(c.symbol for c in DEFAULT_CURRENCIES)

_PLAIN_NUMBER = re.compile(r'^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$')
_DOT_DECIMAL_GROUPED = re.compile(r'^[+-]?[0-9]{1,3}(,[0-9]{3})+(\.[0-9]+)?$')
_COMMA_DECIMAL_GROUPED = re.compile(r'^[+-]?[0-9]{1,3}(\.[0-9]{3})+,[0-9]+$')
_COMMA_DECIMAL = re.compile(r'^[+-]?[0-9]+,[0-9]{1,2}$')


class CurrencyRegistry:
    """
    Closed catalog of currencies, populated once at construction.
    There is no API for adding or removing currencies afterwards.
    """

    def __init__(self, currencies: Iterable[Currency] = DEFAULT_CURRENCIES):
        self._currencies: Dict[str, Currency] = {}
        for currency in currencies:
            if currency.code in self._currencies:
                raise ValueError(f"Duplicate currency code: {currency.code}")
            self._currencies[currency.code] = currency

    def is_supported(self, code: str) -> bool:
        """Check if a currency code is registered"""
        return code in self._currencies

    def lookup(self, code: str) -> Currency:
        """
        Get currency metadata by code

        Raises:
            InvalidCurrencyError: If the code is not registered
        """
        try:
            return self._currencies[code]
        except (KeyError, TypeError):
            raise InvalidCurrencyError(code) from None

    def validate(self, code: str) -> CurrencyCode:
        """Turn a raw code into a CurrencyCode, rejecting unknown codes"""
        if isinstance(code, CurrencyCode) and code in self._currencies:
            return code
        if not self.is_supported(code):
            raise InvalidCurrencyError(code)
        return CurrencyCode(code)

    def codes(self) -> Tuple[str, ...]:
        """Registered codes in registration order"""
        return tuple(self._currencies)

    def __contains__(self, code: object) -> bool:
        return code in self._currencies

    def __iter__(self) -> Iterator[Currency]:
        return iter(self._currencies.values())

    def __len__(self) -> int:
        return len(self._currencies)


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """
    Safely convert a number or numeric string to Decimal, handling common formats

    Args:
        value: Decimal, int, float or string representation of a number

    Returns:
        Decimal value

    Raises:
        ValueError: If value cannot be converted to a finite Decimal
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # Go through str() so 0.1 stays 0.1
        result = Decimal(str(value))
    elif isinstance(value, str):
        result = _decimal_from_string(value)
    else:
        raise ValueError(f"Cannot convert {value!r} to Decimal")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def _decimal_from_string(value: str) -> Decimal:
    # Drop whitespace and known currency symbols; anything else must be numeric
    clean_value = value.strip()
    for symbol in _CURRENCY_SYMBOLS:
        clean_value = clean_value.replace(symbol, '')
    clean_value = clean_value.strip()
    if not clean_value:
        raise ValueError("Value must be a non-empty string")

    if _PLAIN_NUMBER.match(clean_value):
        pass
    elif _DOT_DECIMAL_GROUPED.match(clean_value):
        # 1,234.56
        clean_value = clean_value.replace(',', '')
    elif _COMMA_DECIMAL_GROUPED.match(clean_value):
        # 1.234,56 (European format)
        clean_value = clean_value.replace('.', '').replace(',', '.')
    elif _COMMA_DECIMAL.match(clean_value):
        # 12,5
        clean_value = clean_value.replace(',', '.')
    else:
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal") from None


def quantize(amount: Decimal, currency: Currency) -> Decimal:
    """Round a Decimal to the currency's precision (half-up)"""
    return amount.quantize(
        Decimal('0.1') ** currency.precision,
        rounding=ROUND_HALF_UP
    )


def exact_sum(*amounts: Decimal) -> Decimal:
    """
    Add amounts without rounding

    Raises:
        ValueError: If the result needs more digits than the context precision
    """
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            return sum(amounts, Decimal(0))
        except Inexact:
            raise ValueError("Result exceeds the supported precision") from None


def format_amount(amount: Decimal, currency: Currency) -> str:
    """Format for display, e.g. '1,500.00 ₺'"""
    return f"{quantize(amount, currency):,.{currency.precision}f} {currency.symbol}"
