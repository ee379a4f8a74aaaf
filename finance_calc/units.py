"""Unit normalization for calculator inputs.

Users may enter rates per year or per month and amounts in full currency or
in thousands. The formulas always work on an annualized rate fraction and a
full-currency amount; this module converts between the two worlds.

Two kinds of conversion live here:

* normalization, which maps a raw value in the user's units to the canonical
  unit the formulas expect (``normalize_amount``, ``normalize_rate``,
  ``normalize_input``);
* stored-value conversion, which rewrites raw field values in place when the
  user switches the preference itself, so that the real-world value they
  denote stays the same (``convert_stored_value``, ``convert_stored_fields``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import fields, replace
from typing import Dict, Mapping

from .data_models import (
    INPUT_TYPES,
    AmountUnit,
    CalculatorInput,
    CalculatorType,
    FieldRole,
    RateUnit,
    UnitPreference,
    field_schema,
)
from .utils import NAN, number_to_text, parse_number, round_fixed

logger = logging.getLogger(__name__)

THOUSAND_FACTOR = 1000
MONTHS_PER_YEAR = 12

RATE_DECIMALS = 2
THOUSAND_AMOUNT_DECIMALS = 1
FULL_AMOUNT_DECIMALS = 0


def normalize_amount(raw: float, role: FieldRole, unit: AmountUnit) -> float:
    """Return ``raw`` in full-currency units.

    Only money fields are scaled; every other role passes through.
    """
    if role is FieldRole.MONEY and unit is AmountUnit.THOUSAND:
        return raw * THOUSAND_FACTOR
    return raw


def normalize_rate(raw: float, unit: RateUnit) -> float:
    """Return an annualized rate fraction for a rate entered in percent."""
    if unit is RateUnit.MONTHLY:
        return raw * MONTHS_PER_YEAR / 100
    return raw / 100


def normalize_input(record: CalculatorInput, preference: UnitPreference) -> CalculatorInput:
    """Return a copy of ``record`` with canonical units.

    Money fields become full-currency amounts and rate fields become
    annualized fractions. The original record is not modified.
    """
    changes = {}
    for f in fields(record):
        role = f.metadata["role"]
        value = getattr(record, f.name)
        if role is FieldRole.MONEY:
            changes[f.name] = normalize_amount(value, role, preference.amount_unit)
        elif role is FieldRole.RATE:
            changes[f.name] = normalize_rate(value, preference.rate_unit)
    return replace(record, **changes)


def convert_stored_value(
    raw: float,
    role: FieldRole,
    old: UnitPreference,
    new: UnitPreference,
) -> float:
    """Rewrite a stored field value for a change of preference.

    The value is scaled by the inverse of the unit factor and rounded to a
    fixed precision: 2 decimals for rates, 1 decimal for thousand amounts and
    0 decimals for full amounts. When the relevant unit does not change the
    value is returned as is, so repeated application never compounds.
    ``NaN`` in gives ``NaN`` out.
    """
    if math.isnan(raw):
        return NAN
    if role is FieldRole.RATE and old.rate_unit is not new.rate_unit:
        if new.rate_unit is RateUnit.MONTHLY:
            return round_fixed(raw / MONTHS_PER_YEAR, RATE_DECIMALS)
        return round_fixed(raw * MONTHS_PER_YEAR, RATE_DECIMALS)
    if role is FieldRole.MONEY and old.amount_unit is not new.amount_unit:
        if new.amount_unit is AmountUnit.THOUSAND:
            return round_fixed(raw / THOUSAND_FACTOR, THOUSAND_AMOUNT_DECIMALS)
        return round_fixed(raw * THOUSAND_FACTOR, FULL_AMOUNT_DECIMALS)
    return raw


def convert_stored_fields(
    calculator_type: CalculatorType,
    raw_fields: Mapping[str, str],
    old: UnitPreference,
    new: UnitPreference,
) -> Dict[str, str]:
    """Rewrite the raw text values of one calculator for a preference change.

    Fields that do not parse as numbers, and fields the calculator does not
    declare, are copied through untouched.
    """
    roles = {key: role for _, key, role in field_schema(INPUT_TYPES[calculator_type])}
    converted: Dict[str, str] = {}
    for key, text in raw_fields.items():
        role = roles.get(key)
        if role not in (FieldRole.MONEY, FieldRole.RATE):
            converted[key] = text
            continue
        value = parse_number(text)
        result = convert_stored_value(value, role, old, new)
        if math.isnan(result) or result == value:
            converted[key] = text
        else:
            converted[key] = number_to_text(result)
    logger.debug("Converted %s fields from %s to %s", calculator_type.value, old, new)
    return converted
