"""Tests for decimal helpers."""
import pytest
from decimal import Decimal

from rxremit.utils.decimal_utils import (
    ZERO,
    clamp_non_negative,
    parse_decimal,
    sum_present,
)


@pytest.mark.unit
class TestParseDecimal:
    """Tests for parse_decimal function."""

    def test_parse_decimal_from_string(self):
        """Test parsing decimal from string."""
        assert parse_decimal("123.45") == Decimal("123.45")

    def test_parse_decimal_strips_whitespace(self):
        assert parse_decimal(" 12.50 ") == Decimal("12.50")

    def test_parse_decimal_from_int(self):
        """Test parsing decimal from integer."""
        assert parse_decimal(123) == Decimal("123")

    def test_parse_decimal_from_decimal(self):
        value = Decimal("123.45")
        assert parse_decimal(value) == value

    def test_parse_decimal_none(self):
        assert parse_decimal(None) is None

    def test_parse_decimal_empty_string(self):
        """Test parsing empty and whitespace-only strings."""
        assert parse_decimal("") is None
        assert parse_decimal("   ") is None

    def test_parse_decimal_with_precision(self):
        """Test parsing decimal with precision rounding."""
        assert parse_decimal("123.455", precision=Decimal("0.01")) == Decimal("123.46")
        assert parse_decimal("123.454", precision=Decimal("0.01")) == Decimal("123.45")

    def test_parse_decimal_invalid_string(self):
        assert parse_decimal("not a number") is None

    def test_parse_decimal_digit_separators(self):
        """Underscore grouping is accepted by Decimal but not by the parser."""
        assert parse_decimal("1_000") is None

    def test_parse_decimal_exponent_notation(self):
        """Exponent notation is accepted by Decimal but not by the parser."""
        assert parse_decimal("1E+5") is None
        assert parse_decimal("1E+999999999") is None

    def test_parse_decimal_non_ascii_digits(self):
        assert parse_decimal("١٢") is None

    def test_parse_decimal_non_finite(self):
        """NaN and infinities are not amounts."""
        assert parse_decimal("NaN") is None
        assert parse_decimal("-Infinity") is None
        assert parse_decimal(Decimal("NaN")) is None

    def test_parse_decimal_negative(self):
        assert parse_decimal("-123.45") == Decimal("-123.45")

    def test_parse_decimal_unsupported_type(self):
        """Test parsing unsupported type."""
        assert parse_decimal(["not", "a", "number"]) is None
        assert parse_decimal(True) is None


@pytest.mark.unit
class TestAmountHelpers:
    """Tests for sum_present and clamp_non_negative."""

    def test_sum_present_skips_none(self):
        assert sum_present([Decimal("1.50"), None, Decimal("2.25")]) == Decimal("3.75")

    def test_sum_present_empty(self):
        assert sum_present([]) == ZERO

    def test_clamp_non_negative(self):
        assert clamp_non_negative(Decimal("-0.01")) == ZERO
        assert clamp_non_negative(Decimal("0")) == ZERO
        assert clamp_non_negative(Decimal("5.00")) == Decimal("5.00")
