"""
Test suite for currency module

Tests amount parsing, fixed-point rounding, and display formatting.
All monetary calculations must use Decimal precision.
"""

import pytest
from decimal import Decimal

from minibank.currency import (
    to_amount, decimal_from_string, parse_amount, format_amount, MAX_AMOUNT, ZERO
)
from minibank.errors import ErrorKind, InvalidAmountError


class TestToAmount:
    """Test conversion to two-place Decimal amounts"""

    def test_rounds_half_up_to_cents(self):
        """Test automatic rounding to two decimal places"""
        assert to_amount(Decimal('100.555')) == Decimal('100.56')
        assert to_amount(Decimal('100.554')) == Decimal('100.55')
        assert to_amount(7) == Decimal('7.00')

    def test_float_goes_through_string(self):
        """Test floats do not carry binary rounding error"""
        assert to_amount(0.1) + to_amount(0.2) == Decimal('0.30')
        assert to_amount(2.675) == Decimal('2.68')

    def test_rejects_non_numbers(self):
        """Test invalid values raise InvalidAmountError"""
        for value in ("abc", Decimal('NaN'), Decimal('Infinity'), True, None):
            with pytest.raises(InvalidAmountError):
                to_amount(value)

    def test_rejects_out_of_range(self):
        """Test amounts too large for the decimal context"""
        with pytest.raises(InvalidAmountError, match="out of range"):
            to_amount(Decimal('1e40'))

    def test_rejects_above_maximum(self):
        """Test amounts past the largest representable balance"""
        assert to_amount(MAX_AMOUNT) == Decimal('999999999999999.99')
        for value in (Decimal('1e16'), MAX_AMOUNT + Decimal('0.01'), -Decimal('1e16')):
            with pytest.raises(InvalidAmountError, match="out of range"):
                to_amount(value)


class TestParseAmount:
    """Test parsing of transaction amounts"""

    def test_parses_user_text(self):
        """Test text with currency symbols and thousands separators"""
        assert decimal_from_string("₹1,250.50") == Decimal('1250.50')
        assert decimal_from_string("  42 ") == Decimal('42')
        assert parse_amount("1,000") == Decimal('1000.00')

    def test_requires_positive(self):
        """Test zero and negative amounts are rejected"""
        for value in ("0", "-5", Decimal('0'), -1, "0.004"):
            with pytest.raises(InvalidAmountError) as exc_info:
                parse_amount(value)
            assert exc_info.value.kind == ErrorKind.INVALID_AMOUNT

    def test_rejects_unparsable_text(self):
        """Test empty, non-numeric and partly numeric text"""
        for value in ("", "abc", "NaN", "1.2.3", "5O0", "12abc34", "1,2,3", "1e5", "$-$5"):
            with pytest.raises(InvalidAmountError):
                parse_amount(value)

    def test_smallest_positive_amount(self):
        """Test one cent is accepted"""
        assert parse_amount("0.005") == Decimal('0.01')
        assert parse_amount(Decimal('0.01')) == Decimal('0.01')


class TestFormatAmount:
    """Test display formatting"""

    def test_format_with_symbol(self):
        assert format_amount(Decimal('1250.5'), "₹") == "₹1,250.50"
        assert format_amount(ZERO, "₹") == "₹0.00"

    def test_format_without_symbol(self):
        assert format_amount(Decimal('1234567.891')) == "1,234,567.89"
