"""Tests for amount parsing utilities."""

import pytest

from budgetbook.utils.amount_parser import (
    format_cents,
    parse_amount_with_accounting_notation,
    parse_money,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("123.45", 12345),
        ("$1,234.56", 123456),
        ("-42.50", -4250),
        ("0.005", 1),
        ("  7 ", 700),
        ("", 0),
        (None, 0),
        ("abc", 0),
        ("1.2.3", 0),
    ],
)
def test_parse_money(raw, expected):
    """Test free-form money strings become integer cents."""
    assert parse_money(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("(12.34)", -1234),
        ("($1,200.00)", -120000),
        ("$-5.00", -500),
        ("1,200.00", 120000),
        ("-0.01", -1),
        ("", 0),
        ("n/a", 0),
    ],
)
def test_parse_amount_with_accounting_notation(raw, expected):
    """Test parenthesized amounts are negative."""
    assert parse_amount_with_accounting_notation(raw) == expected


def test_parse_money_has_no_float_drift():
    """Test values that are inexact as floats still round to exact cents."""
    assert parse_money("0.29") == 29
    assert parse_money("1.15") == 115
    assert parse_money("4.35") == 435


def test_format_cents():
    """Test cents are formatted as dollars."""
    assert format_cents(123456) == "$1,234.56"
    assert format_cents(-4250) == "-$42.50"
    assert format_cents(0) == "$0.00"
