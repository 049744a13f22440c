"""
Test suite for accounts module

Tests account records, summaries, and validation of names, PINs and
account numbers.
"""

import pytest
from decimal import Decimal
from dataclasses import FrozenInstanceError

from minibank.accounts import (
    Account, AccountSummary, validate_name, validate_pin, parse_account_number
)
from minibank.errors import ErrorKind, InvalidInputError


class TestAccount:
    """Test Account record behaviour"""

    def test_account_defaults(self):
        """Test new accounts start with a zero balance"""
        account = Account(1001001000, "Alice", "1234")
        assert account.balance == Decimal('0.00')

    def test_balance_normalised_to_cents(self):
        """Test the balance is quantized on construction"""
        account = Account(1001001000, "Alice", "1234", Decimal('300.0'))
        assert account.balance == Decimal('300.00')
        assert str(account.balance) == "300.00"

    def test_pin_matches_exactly(self):
        """Test PIN comparison is exact string equality"""
        account = Account(1001001000, "Alice", "0123")
        assert account.pin_matches("0123")
        assert not account.pin_matches("123")
        assert not account.pin_matches("0123 ")
        assert not account.pin_matches(123)

    def test_summary_excludes_pin(self):
        """Test summaries are immutable snapshots without the PIN"""
        account = Account(1001001000, "Alice", "1234", Decimal('10'))
        summary = account.summary()
        assert summary == AccountSummary(1001001000, "Alice", Decimal('10.00'))
        assert not hasattr(summary, "pin")

        account.balance += Decimal('5')
        assert summary.balance == Decimal('10.00')

        with pytest.raises(FrozenInstanceError):
            summary.balance = Decimal('0')


class TestValidation:
    """Test input validation helpers"""

    def test_validate_name(self):
        """Test names are trimmed and must not be empty"""
        assert validate_name("  Alice Smith ") == "Alice Smith"
        for name in ("", "   ", None):
            with pytest.raises(InvalidInputError) as exc_info:
                validate_name(name)
            assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    def test_validate_pin(self):
        """Test PINs must be exactly four decimal digits"""
        assert validate_pin("0000") == "0000"
        for pin in ("123", "12345", "12a4", " 1234", "١٢٣٤", "", None, 1234):
            with pytest.raises(InvalidInputError, match="4 digits"):
                validate_pin(pin)

    def test_parse_account_number(self):
        """Test parsing typed account numbers"""
        assert parse_account_number(" 1001001000 ") == 1001001000
        assert parse_account_number(1001001000) == 1001001000
        for value in ("abc", "", "10.5", True):
            with pytest.raises(InvalidInputError, match="Invalid account number"):
                parse_account_number(value)
