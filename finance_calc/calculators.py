"""Calculator dispatch.

Turns raw field values into typed calculator inputs, normalizes them with the
caller's unit preference and runs the matching formula. Every calculator
returns a :data:`~finance_calc.data_models.CalculationResult`: a ``Message``
for the single-figure calculators and a ``ScheduleOutcome`` for the
amortization schedule.

Calling ``calculate`` twice with the same input and preference gives the same
result; nothing is shared between calls.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Mapping

from .data_models import (
    INPUT_TYPES,
    CalculationResult,
    CalculatorInput,
    CalculatorType,
    CompoundInput,
    Direction,
    ExchangeInput,
    FieldRole,
    InterestInput,
    LoanInput,
    LoanScheduleInput,
    Message,
    PercentInput,
    RepaymentMethod,
    SavingsInput,
    ScheduleOutcome,
    UnitPreference,
    calculator_type_of,
    field_schema,
)
from .engine import generate_schedule
from .formatter import (
    CURRENCY_SUFFIX,
    INVALID_VALUE_PLACEHOLDER,
    chart_payload,
    format_currency,
    schedule_table,
)
from .formulas import (
    InvalidRate,
    compound_growth,
    convert_currency,
    installment_payment,
    percent_of,
    savings_future_value,
    simple_interest,
)
from .units import normalize_input
from .utils import number_to_text, parse_number

logger = logging.getLogger(__name__)

FOREIGN_SUFFIX = "외화"


def _won(value: float) -> str:
    return f"{format_currency(value)}{CURRENCY_SUFFIX}"


def _parse_choice(enum_type, value: Any, default):
    try:
        return enum_type(str(value).strip())
    except ValueError:
        return default


def parse_input(calculator_type: CalculatorType, raw_fields: Mapping[str, Any]) -> CalculatorInput:
    """Build the typed input record of a calculator from raw field values.

    ``raw_fields`` is keyed by wire name (``loanPrincipal``, ``savingsRate``,
    ...). Numeric text may contain thousands separators. Missing or malformed
    numbers become ``NaN``; missing or unknown choices fall back to the
    record's default.
    """
    input_type = INPUT_TYPES[calculator_type]
    defaults = {
        Direction: Direction.TO_LOCAL,
        RepaymentMethod: RepaymentMethod.EQUAL_PAYMENT,
    }
    kwargs: Dict[str, Any] = {}
    for attribute, key, role in field_schema(input_type):
        raw = raw_fields.get(key)
        if role is FieldRole.CHOICE:
            enum_type = Direction if calculator_type is CalculatorType.EXCHANGE else RepaymentMethod
            kwargs[attribute] = _parse_choice(enum_type, raw, defaults[enum_type])
        else:
            kwargs[attribute] = parse_number(raw)
    return input_type(**kwargs)


def _interest(data: InterestInput) -> CalculationResult:
    result = simple_interest(data.principal, data.rate, data.months)
    return Message(f"예상 이자: {_won(result.interest)} · 만기 금액: {_won(result.total)}")


def _loan(data: LoanInput) -> CalculationResult:
    payment = installment_payment(data.principal, data.rate / 12, data.months)
    return Message(f"월 상환액: {_won(payment)}")


def _savings(data: SavingsInput) -> CalculationResult:
    value = savings_future_value(data.monthly, data.rate / 12, data.months)
    return Message(f"예상 만기 금액: {_won(value)}")


def _percent(data: PercentInput) -> CalculationResult:
    result = percent_of(data.base, data.percent)
    return Message(
        f"{number_to_text(data.base)}의 {number_to_text(data.percent)}%는 {format_currency(result)}입니다."
    )


def _exchange(data: ExchangeInput) -> CalculationResult:
    try:
        value = convert_currency(data.amount, data.rate, data.direction)
    except InvalidRate as exc:
        logger.debug("Exchange rate rejected: %s", data.rate)
        return Message(str(exc))
    suffix = CURRENCY_SUFFIX if data.direction is Direction.TO_LOCAL else FOREIGN_SUFFIX
    return Message(f"환산 금액: {format_currency(value)}{suffix}")


def _compound(data: CompoundInput) -> CalculationResult:
    value = compound_growth(data.principal, data.contribution, data.rate, data.years, data.frequency)
    return Message(f"예상 자산: {_won(value)}")


def _loan_schedule(data: LoanScheduleInput) -> CalculationResult:
    # Blank or malformed fields would leave NaN in every row.
    if not all(math.isfinite(value) for value in (data.principal, data.rate, data.months)):
        return Message(INVALID_VALUE_PLACEHOLDER)
    result = generate_schedule(data.principal, data.rate, data.months, data.method)
    return ScheduleOutcome(
        text=f"총 {number_to_text(data.months)}개월 상환 스케줄이 생성되었습니다.",
        table=schedule_table(result.rows),
        chart=chart_payload(result),
        totals=result.totals,
        schedule=result,
    )


_HANDLERS: Dict[CalculatorType, Callable[[Any], CalculationResult]] = {
    CalculatorType.INTEREST: _interest,
    CalculatorType.LOAN: _loan,
    CalculatorType.SAVINGS: _savings,
    CalculatorType.PERCENT: _percent,
    CalculatorType.EXCHANGE: _exchange,
    CalculatorType.COMPOUND: _compound,
    CalculatorType.LOAN_SCHEDULE: _loan_schedule,
}


def calculate(record: CalculatorInput, preference: UnitPreference) -> CalculationResult:
    """Normalize ``record`` with ``preference`` and run its calculator."""
    calculator_type = calculator_type_of(record)
    normalized = normalize_input(record, preference)
    logger.debug("Calculating %s with %s", calculator_type.value, normalized)
    try:
        return _HANDLERS[calculator_type](normalized)
    except (ZeroDivisionError, OverflowError) as exc:
        logger.warning("Cannot calculate %s: %s", calculator_type.value, exc)
        return Message(INVALID_VALUE_PLACEHOLDER)


def calculate_raw(
    calculator_type: CalculatorType,
    raw_fields: Mapping[str, Any],
    preference: UnitPreference,
) -> CalculationResult:
    """Parse raw field values and calculate in one step."""
    return calculate(parse_input(calculator_type, raw_fields), preference)


def result_to_dict(result: CalculationResult) -> Dict[str, Any]:
    """Convert a calculation result into a JSON-serialisable dictionary."""
    if isinstance(result, Message):
        return {"kind": "message", "text": result.text}
    return {
        "kind": "schedule",
        "text": result.text,
        "table": result.table,
        "chart": result.chart,
        "totals": {
            "totalPayment": result.totals.total_payment,
            "totalPrincipal": result.totals.total_principal,
            "totalInterest": result.totals.total_interest,
        },
    }
