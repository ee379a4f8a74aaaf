"""Tests for utils.py."""

from __future__ import annotations

import math

import pytest

from finance_calc.utils import number_to_text, parse_number, round_fixed


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("12,000,000", 12_000_000),
        (" 4.5 ", 4.5),
        ("-3", -3),
        (7, 7),
        (2.5, 2.5),
    ],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "1.2.3"])
def test_parse_number_invalid_is_nan(raw):
    assert math.isnan(parse_number(raw))


def test_round_fixed_half_up():
    assert round_fixed(0.125, 2) == 0.13
    assert round_fixed(2.5, 0) == 3
    assert round_fixed(1234.56, 1) == 1234.6


def test_round_fixed_non_finite():
    assert math.isnan(round_fixed(float("nan"), 2))
    assert round_fixed(float("inf"), 2) == float("inf")


@pytest.mark.parametrize("value,expected", [(12.0, "12"), (12.5, "12.5"), (0.42, "0.42"), (-0.0, "0")])
def test_number_to_text(value, expected):
    assert number_to_text(value) == expected
