"""Data models for the finance calculators.

This module defines the enums and dataclasses used by the calculators: the
unit preference, one typed input record per calculator kind, and the records
produced by a calculation (schedule rows, totals, chart series and the final
calculation result). Using dataclasses makes it easy to construct, inspect and
serialize these structures.

Each input record declares the role of its fields (money, rate, plain number
or choice) and their wire names through dataclass field metadata, so the unit
normalizer never has to guess a field's meaning from its name.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Tuple, Type, Union


class RateUnit(str, Enum):
    ANNUAL = "annual"
    MONTHLY = "monthly"


class AmountUnit(str, Enum):
    FULL = "krw"
    THOUSAND = "thousand"


class FieldRole(str, Enum):
    """Semantic role of an input field.

    ``MONEY`` fields are currency quantities and follow the amount unit,
    ``RATE`` fields are interest rates in percent and follow the rate unit.
    ``PLAIN`` numbers (months, percent, frequency, exchange rate) and
    ``CHOICE`` values (direction, method) are never converted.
    """

    MONEY = "money"
    RATE = "rate"
    PLAIN = "plain"
    CHOICE = "choice"


class CalculatorType(str, Enum):
    INTEREST = "interest"
    LOAN = "loan"
    SAVINGS = "savings"
    PERCENT = "percent"
    EXCHANGE = "exchange"
    COMPOUND = "compound"
    LOAN_SCHEDULE = "loanSchedule"


class Direction(str, Enum):
    TO_LOCAL = "toKrw"
    TO_FOREIGN = "toForeign"


class RepaymentMethod(str, Enum):
    EQUAL_PAYMENT = "equalPayment"
    EQUAL_PRINCIPAL = "equalPrincipal"


@dataclass(frozen=True)
class UnitPreference:
    """The display units the user has chosen.

    The preference is owned by whoever persists it (a preference store, a
    share link, CLI options). The engine only ever receives it as an argument.
    """

    rate_unit: RateUnit = RateUnit.ANNUAL
    amount_unit: AmountUnit = AmountUnit.FULL

    @classmethod
    def from_mapping(cls, values: Dict[str, str]) -> "UnitPreference":
        """Build a preference from stored ``rateUnit``/``amountUnit`` values.

        Missing or unknown values fall back to ``annual``/``krw``.
        """
        try:
            rate_unit = RateUnit(values.get("rateUnit", RateUnit.ANNUAL.value))
        except ValueError:
            rate_unit = RateUnit.ANNUAL
        try:
            amount_unit = AmountUnit(values.get("amountUnit", AmountUnit.FULL.value))
        except ValueError:
            amount_unit = AmountUnit.FULL
        return cls(rate_unit=rate_unit, amount_unit=amount_unit)

    def to_mapping(self) -> Dict[str, str]:
        return {"rateUnit": self.rate_unit.value, "amountUnit": self.amount_unit.value}


def _field(key: str, role: FieldRole, **kwargs):
    return field(metadata={"key": key, "role": role}, **kwargs)


@dataclass(frozen=True)
class InterestInput:
    principal: float = _field("principal", FieldRole.MONEY)
    rate: float = _field("rate", FieldRole.RATE)
    months: float = _field("months", FieldRole.PLAIN)


@dataclass(frozen=True)
class LoanInput:
    principal: float = _field("loanPrincipal", FieldRole.MONEY)
    rate: float = _field("loanRate", FieldRole.RATE)
    months: float = _field("loanMonths", FieldRole.PLAIN)


@dataclass(frozen=True)
class SavingsInput:
    monthly: float = _field("monthly", FieldRole.MONEY)
    rate: float = _field("savingsRate", FieldRole.RATE)
    months: float = _field("savingsMonths", FieldRole.PLAIN)


@dataclass(frozen=True)
class PercentInput:
    base: float = _field("base", FieldRole.MONEY)
    percent: float = _field("percent", FieldRole.PLAIN)


@dataclass(frozen=True)
class ExchangeInput:
    """Currency conversion input.

    ``rate`` is the user-supplied exchange rate (local currency per unit of
    foreign currency), not an interest rate, so it is never unit-converted.
    """

    amount: float = _field("amount", FieldRole.MONEY)
    rate: float = _field("rate", FieldRole.PLAIN)
    direction: Direction = _field("direction", FieldRole.CHOICE, default=Direction.TO_LOCAL)


@dataclass(frozen=True)
class CompoundInput:
    principal: float = _field("principal", FieldRole.MONEY)
    contribution: float = _field("contribution", FieldRole.MONEY)
    rate: float = _field("rate", FieldRole.RATE)
    years: float = _field("years", FieldRole.PLAIN)
    frequency: float = _field("frequency", FieldRole.PLAIN)


@dataclass(frozen=True)
class LoanScheduleInput:
    principal: float = _field("principal", FieldRole.MONEY)
    rate: float = _field("rate", FieldRole.RATE)
    months: float = _field("months", FieldRole.PLAIN)
    method: RepaymentMethod = _field("method", FieldRole.CHOICE, default=RepaymentMethod.EQUAL_PAYMENT)


CalculatorInput = Union[
    InterestInput,
    LoanInput,
    SavingsInput,
    PercentInput,
    ExchangeInput,
    CompoundInput,
    LoanScheduleInput,
]

INPUT_TYPES: Dict[CalculatorType, Type] = {
    CalculatorType.INTEREST: InterestInput,
    CalculatorType.LOAN: LoanInput,
    CalculatorType.SAVINGS: SavingsInput,
    CalculatorType.PERCENT: PercentInput,
    CalculatorType.EXCHANGE: ExchangeInput,
    CalculatorType.COMPOUND: CompoundInput,
    CalculatorType.LOAN_SCHEDULE: LoanScheduleInput,
}


def field_schema(input_type: Type) -> List[Tuple[str, str, FieldRole]]:
    """Return ``(attribute, wire key, role)`` for every field of an input type."""
    return [(f.name, f.metadata["key"], f.metadata["role"]) for f in fields(input_type)]


def calculator_type_of(record: CalculatorInput) -> CalculatorType:
    for calculator_type, input_type in INPUT_TYPES.items():
        if type(record) is input_type:
            return calculator_type
    raise TypeError(f"Unknown calculator input: {type(record).__name__}")


@dataclass
class ScheduleRow:
    """One period of an amortization schedule.

    Attributes
    ----------
    month: int
        The 1-based period number.
    payment: float
        Total amount paid in the period (``principal + interest``).
    principal: float
        Portion of the payment that reduces the balance.
    interest: float
        Interest charged on the balance carried into the period.
    balance: float
        Remaining balance after the payment, never below zero.
    """

    month: int
    payment: float
    principal: float
    interest: float
    balance: float


@dataclass
class ScheduleTotals:
    total_payment: float
    total_principal: float
    total_interest: float


@dataclass
class ChartSeries:
    """Chart-ready series, aligned by period index."""

    balance: List[float]
    principal: List[float]
    interest: List[float]


@dataclass
class ScheduleResult:
    rows: List[ScheduleRow]
    totals: ScheduleTotals
    series: ChartSeries


@dataclass
class Message:
    """A calculation result consisting of a single display string."""

    text: str


@dataclass
class ScheduleOutcome:
    """A schedule calculation result.

    ``table`` holds display-formatted rows and ``chart`` the labels and raw
    series consumed by a chart renderer.
    """

    text: str
    table: List[Dict[str, str]]
    chart: Dict[str, list]
    totals: ScheduleTotals
    schedule: ScheduleResult


CalculationResult = Union[Message, ScheduleOutcome]
