"""
Currency Amount Module

Fixed-point handling of currency amounts. Every balance and transaction
amount is a Decimal quantized to two places. NEVER uses float for monetary
values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Union
import re
import unicodedata

from .errors import InvalidAmountError

# Set global decimal context for financial precision
getcontext().prec = 28

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest amount or balance the ledger holds; well inside the context precision
MAX_AMOUNT = Decimal("999999999999999.99")

# Plain digits or well-formed thousands groups, optional fraction
AMOUNT_PATTERN = re.compile(r"[+-]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|[+-]?\.\d+", re.ASCII)

AmountLike = Union[Decimal, int, float, str]


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert a value to a Decimal rounded to two places

    Floats go through str() so that binary representation error does not
    leak into the ledger.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    try:
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Too many digits for the context precision
        raise InvalidAmountError(f"Amount out of range: {value!r}")
    if abs(amount) > MAX_AMOUNT:
        raise InvalidAmountError(f"Amount out of range: {value!r}")
    return amount


def decimal_from_string(value: str) -> Decimal:
    """
    Convert user-typed text to Decimal

    Accepts surrounding whitespace, a leading currency symbol and thousands
    separators ("₹1,250.50" -> Decimal("1250.50")). Anything else is rejected.

    Raises:
        InvalidAmountError: If the text is empty or not a number
    """
    if not value or not isinstance(value, str):
        raise InvalidAmountError("Amount must be a non-empty string")

    clean_value = value.strip()
    while clean_value and unicodedata.category(clean_value[0]) == "Sc":
        clean_value = clean_value[1:].lstrip()

    if not AMOUNT_PATTERN.fullmatch(clean_value):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return Decimal(clean_value.replace(",", ""))


def parse_amount(value: AmountLike) -> Decimal:
    """
    Normalise a transaction amount and require it to be strictly positive

    Raises:
        InvalidAmountError: If unparsable, non-finite, or not positive after
            rounding to cents
    """
    if isinstance(value, str):
        value = decimal_from_string(value)
    amount = to_amount(value)
    if amount <= ZERO:
        raise InvalidAmountError("Amount must be positive", {"amount": str(amount)})
    return amount


def format_amount(amount: Decimal, symbol: str = "") -> str:
    """Format for display with thousands separators, e.g. ₹1,250.50"""
    return f"{symbol}{amount:,.2f}"
