"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from paramiyonet.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("₺1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("12,5", Decimal("12.5")),
        ("1,234", Decimal("1234")),
        ("1,234,567", Decimal("1234567")),
        ("250 TL", Decimal("250")),
        ("250TL", Decimal("250")),
        ("TRY 99,90", Decimal("99.90")),
        ("(45.00)", Decimal("-45.00")),
        ("  7  ", Decimal("7")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12.3.4", "nan", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)
