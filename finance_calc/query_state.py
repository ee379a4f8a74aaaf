"""Share-link state.

A calculator's raw field values and the active unit preference are encoded
into URL query parameters so that a page can be restored later. Field keys
take the form ``{calculatorType}_{fieldName}`` (``loan_loanPrincipal``,
``loanSchedule_method``) and the preference travels as ``rateUnit`` and
``amountUnit``.

Only raw values are shared, never results. Restoring runs the same parsing,
normalization and calculation again, which reproduces the same output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping
from urllib.parse import parse_qsl, urlencode

from .data_models import INPUT_TYPES, CalculatorType, UnitPreference, field_schema


@dataclass
class SharedState:
    fields: Dict[CalculatorType, Dict[str, str]] = field(default_factory=dict)
    preference: UnitPreference = field(default_factory=UnitPreference)


def state_key(calculator_type: CalculatorType, field_name: str) -> str:
    return f"{calculator_type.value}_{field_name}"


def encode_state(
    calculator_type: CalculatorType,
    raw_fields: Mapping[str, Any],
    preference: UnitPreference,
) -> str:
    """Return the query string for one calculator's fields and the preference.

    Fields the calculator does not declare are dropped; declared fields that
    are missing are left out of the query.
    """
    params = []
    for _, key, _ in field_schema(INPUT_TYPES[calculator_type]):
        if key in raw_fields and raw_fields[key] is not None:
            params.append((state_key(calculator_type, key), str(raw_fields[key])))
    params.extend(preference.to_mapping().items())
    return urlencode(params)


def decode_state(query: str) -> SharedState:
    """Parse a query string produced by :func:`encode_state`.

    Unknown parameters are ignored and a missing or invalid preference falls
    back to the defaults. A leading ``?`` is accepted.
    """
    pairs = parse_qsl(query.lstrip("?"), keep_blank_values=True)
    values = dict(pairs)
    state = SharedState(preference=UnitPreference.from_mapping(values))
    known = {
        calculator_type: {key for _, key, _ in field_schema(input_type)}
        for calculator_type, input_type in INPUT_TYPES.items()
    }
    for name, value in pairs:
        prefix, sep, field_name = name.partition("_")
        if not sep:
            continue
        try:
            calculator_type = CalculatorType(prefix)
        except ValueError:
            continue
        if field_name in known[calculator_type]:
            state.fields.setdefault(calculator_type, {})[field_name] = value
    return state
