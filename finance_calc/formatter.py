"""Output helpers for the finance calculators.

This module renders numeric results for display: locale-style currency
strings, abbreviated chart axis labels, table rows and chart payloads for
schedules, and simple tab-separated printing for the command line.

Rounding follows the browser's number formatting: the exact binary value of
the float is rounded half away from zero. ``Decimal(value)`` captures that
exact value, so ``Decimal.quantize`` with ``ROUND_HALF_UP`` reproduces it.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Dict, Iterable, List

from .data_models import ScheduleResult, ScheduleRow, ScheduleTotals

INVALID_VALUE_PLACEHOLDER = "값을 다시 입력해 주세요."
CURRENCY_SUFFIX = "원"
HUNDRED_MILLION = 100_000_000
TEN_THOUSAND = 10_000
AXIS_FRACTION_DIGITS = 3

TABLE_HEADERS = {
    "month": "회차",
    "payment": "월 상환액",
    "principal": "원금",
    "interest": "이자",
    "balance": "잔액",
}


def _to_fixed(value: float, digits: int) -> Decimal:
    with localcontext() as ctx:
        # wide enough for any finite double
        ctx.prec = 400
        return Decimal(value).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)


def format_currency(value: float, max_fraction_digits: int = 2) -> str:
    """Format ``value`` with grouped digits and at most ``max_fraction_digits``
    fraction digits (two by default).

    ``NaN`` yields a fixed placeholder asking the user to re-enter the value.
    """
    if math.isnan(value):
        return INVALID_VALUE_PLACEHOLDER
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    text = f"{_to_fixed(value, max_fraction_digits):,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_axis_label(value: float) -> str:
    """Abbreviate large amounts for chart axes.

    ``>= 1e8`` is shown in 억 with one decimal, ``>= 1e4`` in 만 with no
    decimals, anything smaller as a grouped number with up to three fraction
    digits, like the locale's default number formatting.
    """
    if math.isinf(value):
        return f"{format_currency(value)}{CURRENCY_SUFFIX}"
    if value >= HUNDRED_MILLION:
        return f"{_to_fixed(value / HUNDRED_MILLION, 1)}억"
    if value >= TEN_THOUSAND:
        return f"{_to_fixed(value / TEN_THOUSAND, 0)}만"
    return f"{format_currency(value, AXIS_FRACTION_DIGITS)}{CURRENCY_SUFFIX}"


def schedule_table(rows: Iterable[ScheduleRow]) -> List[Dict[str, str]]:
    """Return display-formatted rows for a schedule table."""
    return [
        {
            "month": str(row.month),
            "payment": format_currency(row.payment),
            "principal": format_currency(row.principal),
            "interest": format_currency(row.interest),
            "balance": format_currency(row.balance),
        }
        for row in rows
    ]


def chart_payload(result: ScheduleResult) -> Dict[str, list]:
    """Return labels and series in the shape the schedule chart consumes."""
    return {
        "labels": [f"{row.month}회차" for row in result.rows],
        "data": list(result.series.balance),
        "monthlyPrincipal": list(result.series.principal),
        "monthlyInterest": list(result.series.interest),
    }


def print_totals(totals: ScheduleTotals) -> None:
    """Print schedule totals in a human‑readable format."""
    print("Totals")
    print("-" * 72)
    print(f"Total payment   : {format_currency(totals.total_payment)}{CURRENCY_SUFFIX}")
    print(f"Total principal : {format_currency(totals.total_principal)}{CURRENCY_SUFFIX}")
    print(f"Total interest  : {format_currency(totals.total_interest)}{CURRENCY_SUFFIX}")
    print("-" * 72)


def print_schedule(rows: Iterable[ScheduleRow]) -> None:
    """Print the amortization schedule as a simple tab separated table."""
    print("\t".join(TABLE_HEADERS.values()))
    for row in schedule_table(rows):
        print("\t".join(row[key] for key in TABLE_HEADERS))
