"""Closed-form personal finance formulas.

All functions are pure and take already normalized inputs: amounts in full
currency and rates as fractions (``0.05`` for 5 %). None of them validate
ranges; callers are expected to pass ``months``/``years`` of at least one.
Every formula with a rate has an explicit zero-rate branch because the
general annuity expressions divide by the rate.
"""

from __future__ import annotations

from dataclasses import dataclass

from .data_models import Direction

INVALID_RATE_MESSAGE = "환율은 0보다 커야 합니다."


class InvalidRate(ValueError):
    """Raised when a currency conversion is attempted with a zero exchange rate."""

    def __init__(self, message: str = INVALID_RATE_MESSAGE) -> None:
        super().__init__(message)


@dataclass
class InterestResult:
    interest: float
    total: float


def simple_interest(principal: float, annual_rate: float, months: float) -> InterestResult:
    """Return simple interest over ``months`` and the resulting total."""
    interest = principal * annual_rate * (months / 12)
    return InterestResult(interest=interest, total=principal + interest)


def installment_payment(principal: float, monthly_rate: float, months: float) -> float:
    """Return the equal monthly payment of an amortizing loan.

    The formula is:

        payment = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

    where ``P`` is the principal, ``r`` the monthly rate and ``n`` the number
    of payments. When the rate is zero, the payment simplifies to ``P / n``.
    """
    if monthly_rate == 0:
        return principal / months
    factor = (1 + monthly_rate) ** months
    return principal * (monthly_rate * factor) / (factor - 1)


def savings_future_value(monthly_contribution: float, monthly_rate: float, months: float) -> float:
    """Return the maturity value of equal monthly deposits (annuity due)."""
    if monthly_rate == 0:
        return monthly_contribution * months
    return monthly_contribution * (((1 + monthly_rate) ** months - 1) / monthly_rate) * (1 + monthly_rate)


def percent_of(base: float, percent: float) -> float:
    return base * (percent / 100)


def convert_currency(amount: float, rate: float, direction: Direction) -> float:
    """Convert ``amount`` with a user-supplied exchange rate.

    ``Direction.TO_LOCAL`` multiplies by the rate, ``Direction.TO_FOREIGN``
    divides by it. A zero rate raises :class:`InvalidRate` before anything is
    computed.
    """
    if rate == 0:
        raise InvalidRate()
    if direction is Direction.TO_LOCAL:
        return amount * rate
    return amount / rate


def effective_monthly_rate(annual_rate: float, frequency: float) -> float:
    """Return the monthly rate equivalent to ``annual_rate`` compounded ``frequency`` times a year."""
    return (1 + annual_rate / frequency) ** (frequency / 12) - 1


def compound_growth(
    principal: float,
    contribution: float,
    annual_rate: float,
    years: float,
    frequency: float,
) -> float:
    """Return the future value of a lump sum plus monthly contributions.

    Contributions are made at the start of each month. With a zero rate the
    result is plain accumulation: ``principal + contribution * months``.
    """
    months = years * 12
    if annual_rate == 0:
        return principal + contribution * months
    monthly_rate = effective_monthly_rate(annual_rate, frequency)
    growth = (1 + monthly_rate) ** months
    return principal * growth + contribution * ((growth - 1) / monthly_rate) * (1 + monthly_rate)
