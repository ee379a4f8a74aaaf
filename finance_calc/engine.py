"""Core amortization engine for the finance calculators.

This module builds per-period amortization schedules for equal-payment
(annuity) and equal-principal (decreasing) loans. Results are returned as a
``ScheduleResult`` holding the rows, column totals and chart-ready series.
Every call regenerates the schedule from its arguments; nothing is cached.
"""

from __future__ import annotations

import logging
from typing import Iterator

from .data_models import ChartSeries, RepaymentMethod, ScheduleResult, ScheduleRow, ScheduleTotals
from .formulas import installment_payment

logger = logging.getLogger(__name__)

# Longest term a schedule is built for (100 years of monthly payments).
MAX_SCHEDULE_MONTHS = 1200


def iter_schedule_rows(
    principal: float,
    annual_rate: float,
    months: int,
    method: RepaymentMethod,
) -> Iterator[ScheduleRow]:
    """Yield the schedule one period at a time.

    Parameters
    ----------
    principal: float
        The amount borrowed, in full currency.
    annual_rate: float
        Annual nominal rate as a fraction (``0.12`` for 12 %).
    months: int
        Number of periods. Must be positive; it is not validated here.
    method: RepaymentMethod
        ``EQUAL_PAYMENT`` keeps the payment constant, ``EQUAL_PRINCIPAL``
        keeps the principal portion constant.
    """
    monthly_rate = annual_rate / 12
    balance = principal
    monthly_payment = 0.0

    if monthly_rate == 0:
        monthly_payment = principal / months
    elif method is RepaymentMethod.EQUAL_PAYMENT:
        monthly_payment = installment_payment(principal, monthly_rate, months)

    for month in range(1, int(months) + 1):
        interest = 0.0 if monthly_rate == 0 else balance * monthly_rate
        if method is RepaymentMethod.EQUAL_PRINCIPAL:
            principal_payment = principal / months
            payment = principal_payment + interest
        else:
            # Constant for both zero and non-zero rates.
            payment = monthly_payment
            principal_payment = payment - interest

        # Floor absorbs floating point overshoot on the last period. NaN is kept.
        balance -= principal_payment
        if balance < 0:
            balance = 0.0
        yield ScheduleRow(
            month=month,
            payment=payment,
            principal=principal_payment,
            interest=interest,
            balance=balance,
        )


def generate_schedule(
    principal: float,
    annual_rate: float,
    months: int,
    method: RepaymentMethod = RepaymentMethod.EQUAL_PAYMENT,
) -> ScheduleResult:
    """Compute the full amortization schedule with totals and chart series.

    Returns
    -------
    ScheduleResult
        ``rows`` has exactly ``months`` entries. ``totals`` are the column
        sums of the rows and ``series`` the balance, principal and interest
        columns aligned by period.
    """
    rows = list(iter_schedule_rows(principal, annual_rate, months, method))
    totals = ScheduleTotals(
        total_payment=sum(row.payment for row in rows),
        total_principal=sum(row.principal for row in rows),
        total_interest=sum(row.interest for row in rows),
    )
    series = ChartSeries(
        balance=[row.balance for row in rows],
        principal=[row.principal for row in rows],
        interest=[row.interest for row in rows],
    )
    logger.debug(
        "Generated %s schedule: principal=%s rate=%s months=%s total_interest=%s",
        method.value,
        principal,
        annual_rate,
        months,
        totals.total_interest,
    )
    return ScheduleResult(rows=rows, totals=totals, series=series)
