"""
Account Module

Account records held by the ledger, the read-only summaries handed out to
callers, and validation of the inputs that create or address an account.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Union
import re

from .currency import ZERO, to_amount
from .errors import InvalidInputError


PIN_PATTERN = re.compile(r"[0-9]{4}")


@dataclass
class Account:
    """
    Bank account owned by the ledger

    The PIN is a plain 4-digit placeholder token, not a security mechanism.
    """
    account_number: int
    name: str
    pin: str
    balance: Decimal = ZERO

    def __post_init__(self):
        self.balance = to_amount(self.balance)

    def pin_matches(self, pin: str) -> bool:
        """Exact, case-sensitive comparison of the presented PIN"""
        return isinstance(pin, str) and pin == self.pin

    def summary(self) -> "AccountSummary":
        return AccountSummary(self.account_number, self.name, self.balance)


@dataclass(frozen=True)
class AccountSummary:
    """Point-in-time view of an account, without its PIN"""
    account_number: int
    name: str
    balance: Decimal


def validate_name(name: str) -> str:
    """Return the trimmed account name, rejecting empty names"""
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("Name cannot be empty.")
    return name.strip()


def validate_pin(pin: str) -> str:
    """Require a PIN of exactly four decimal digits"""
    if not isinstance(pin, str) or not PIN_PATTERN.fullmatch(pin):
        raise InvalidInputError("PIN must be exactly 4 digits.")
    return pin


def parse_account_number(value: Union[int, str]) -> int:
    """Parse an account number typed by a user"""
    if isinstance(value, bool):
        raise InvalidInputError("Invalid account number.")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidInputError("Invalid account number.", {"value": value})
