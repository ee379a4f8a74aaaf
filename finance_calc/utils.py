"""Utility functions for the finance calculators.

This module provides helpers for turning user-entered text into floats and
for rounding values to a fixed number of decimals. Rounding goes through
``Decimal`` so that repeated unit toggles land on the same decimal string
instead of drifting with binary floating point.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

NAN = float("nan")


def parse_number(value: Union[str, float, int, None]) -> float:
    """Convert a raw field value into a float.

    Commas used as thousands separators and surrounding whitespace are
    stripped. Empty, missing or malformed values return ``NaN`` instead of
    raising, so that callers can leave such fields untouched.
    """
    if value is None:
        return NAN
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    cleaned = str(value).replace(",", "").strip()
    if not cleaned:
        return NAN
    try:
        return float(cleaned)
    except ValueError:
        return NAN


def round_fixed(value: float, decimals: int) -> float:
    """Round ``value`` half-up to ``decimals`` places.

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    with localcontext() as ctx:
        ctx.prec = 400
        quant = Decimal(1).scaleb(-decimals)
        return float(Decimal(repr(value)).quantize(quant, rounding=ROUND_HALF_UP))


def number_to_text(value: float) -> str:
    """Render a float the way a form field shows it (``12.0`` becomes ``12``)."""
    if math.isnan(value):
        return "NaN"
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)
