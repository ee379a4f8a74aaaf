"""Command‑line interface for the finance calculators.

This module uses the ``click`` library to implement a multi‑command
interface. Every calculator has its own command; the schedule command can
export the full amortization schedule to JSON/CSV files. The unit preference
is given once on the group and threaded into every calculation:

    finance-calc --amount-unit thousand loan -p 12,000 -r 4.5 -m 36
    finance-calc schedule -p 12000000 -r 12 -m 12 --method equalPrincipal
    finance-calc share loan loanPrincipal=12000000 loanRate=4.5 loanMonths=36
"""

from __future__ import annotations

import csv
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from .calculators import calculate_raw, result_to_dict
from .data_models import (
    AmountUnit,
    CalculatorType,
    Message,
    RateUnit,
    RepaymentMethod,
    ScheduleResult,
    UnitPreference,
)
from .engine import MAX_SCHEDULE_MONTHS
from .formatter import print_schedule, print_totals
from .query_state import decode_state, encode_state
from .units import convert_stored_fields
from .utils import parse_number

MAX_PREVIEW_ROWS = 120


def parse_amount(value: str, name: str) -> str:
    """Validate a numeric option and return it as entered.

    Thousands separators are accepted ("12,000,000"). The raw text is kept so
    that normalization and share links see exactly what the user typed.
    """
    if not math.isfinite(parse_number(value)):
        raise click.BadParameter(f"Invalid number for {name}: {value}")
    return value


def parse_months(value: str, name: str) -> str:
    parse_amount(value, name)
    if parse_number(value) < 1:
        raise click.BadParameter(f"{name} must be at least 1; got {value}")
    return value


def parse_schedule_months(value: str, name: str) -> str:
    parse_months(value, name)
    if parse_number(value) > MAX_SCHEDULE_MONTHS:
        raise click.BadParameter(f"{name} must be at most {MAX_SCHEDULE_MONTHS}; got {value}")
    return value


def parse_assignments(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse ``FIELD=VALUE`` arguments into a mapping."""
    fields: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Field must be in FIELD=VALUE format; got {item}")
        fields[key] = value
    return fields


def _run(ctx: click.Context, calculator_type: CalculatorType, fields: Dict[str, Any]) -> None:
    result = calculate_raw(calculator_type, fields, ctx.obj)
    click.echo(result.text)


def export_to_json(path: Path, result: Dict[str, Any]) -> None:
    """Export a schedule result to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(result, f, indent=2, ensure_ascii=False)


def export_to_csv(path: Path, schedule: ScheduleResult) -> None:
    """Export schedule rows to a CSV file."""
    header = ["Month", "Payment", "Principal", "Interest", "Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in schedule.rows:
            writer.writerow([row.month, row.payment, row.principal, row.interest, row.balance])


@click.group()
@click.option(
    "--rate-unit",
    type=click.Choice([unit.value for unit in RateUnit]),
    default=RateUnit.ANNUAL.value,
    help="Unit of entered interest rates",
)
@click.option(
    "--amount-unit",
    type=click.Choice([unit.value for unit in AmountUnit]),
    default=AmountUnit.FULL.value,
    help="Unit of entered amounts (krw or thousand)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log calculation details")
@click.pass_context
def cli(ctx: click.Context, rate_unit: str, amount_unit: str, verbose: bool) -> None:
    """Personal finance calculators: interest, loans, savings and more."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = UnitPreference(rate_unit=RateUnit(rate_unit), amount_unit=AmountUnit(amount_unit))


@cli.command()
@click.option("--principal", "-p", required=True, help="Deposited amount")
@click.option("--rate", "-r", required=True, help="Interest rate (percent)")
@click.option("--months", "-m", required=True, help="Deposit period in months")
@click.pass_context
def interest(ctx: click.Context, principal: str, rate: str, months: str) -> None:
    """Simple interest and maturity amount."""
    _run(ctx, CalculatorType.INTEREST, {
        "principal": parse_amount(principal, "principal"),
        "rate": parse_amount(rate, "rate"),
        "months": parse_months(months, "months"),
    })


@cli.command()
@click.option("--principal", "-p", required=True, help="Loan amount")
@click.option("--rate", "-r", required=True, help="Interest rate (percent)")
@click.option("--months", "-m", required=True, help="Loan term in months")
@click.pass_context
def loan(ctx: click.Context, principal: str, rate: str, months: str) -> None:
    """Monthly installment of an amortizing loan."""
    _run(ctx, CalculatorType.LOAN, {
        "loanPrincipal": parse_amount(principal, "principal"),
        "loanRate": parse_amount(rate, "rate"),
        "loanMonths": parse_months(months, "months"),
    })


@cli.command()
@click.option("--monthly", "-c", required=True, help="Monthly deposit")
@click.option("--rate", "-r", required=True, help="Interest rate (percent)")
@click.option("--months", "-m", required=True, help="Saving period in months")
@click.pass_context
def savings(ctx: click.Context, monthly: str, rate: str, months: str) -> None:
    """Maturity value of a monthly savings plan."""
    _run(ctx, CalculatorType.SAVINGS, {
        "monthly": parse_amount(monthly, "monthly"),
        "savingsRate": parse_amount(rate, "rate"),
        "savingsMonths": parse_months(months, "months"),
    })


@cli.command()
@click.option("--base", "-b", required=True, help="Base value")
@click.option("--percent", "-n", required=True, help="Percentage")
@click.pass_context
def percent(ctx: click.Context, base: str, percent: str) -> None:
    """Percentage of a base value."""
    _run(ctx, CalculatorType.PERCENT, {
        "base": parse_amount(base, "base"),
        "percent": parse_amount(percent, "percent"),
    })


@cli.command()
@click.option("--amount", "-a", required=True, help="Amount to convert")
@click.option("--rate", "-r", required=True, help="Exchange rate (local currency per foreign unit)")
@click.option(
    "--direction",
    type=click.Choice(["toKrw", "toForeign"]),
    default="toKrw",
    help="Conversion direction",
)
@click.pass_context
def exchange(ctx: click.Context, amount: str, rate: str, direction: str) -> None:
    """Currency conversion with a user-supplied rate."""
    _run(ctx, CalculatorType.EXCHANGE, {
        "amount": parse_amount(amount, "amount"),
        "rate": parse_amount(rate, "rate"),
        "direction": direction,
    })


@cli.command()
@click.option("--principal", "-p", required=True, help="Initial amount")
@click.option("--contribution", "-c", default="0", help="Monthly contribution")
@click.option("--rate", "-r", required=True, help="Interest rate (percent)")
@click.option("--years", "-y", required=True, help="Investment period in years")
@click.option("--frequency", "-f", default="12", help="Compounding periods per year")
@click.pass_context
def compound(
    ctx: click.Context,
    principal: str,
    contribution: str,
    rate: str,
    years: str,
    frequency: str,
) -> None:
    """Compound growth with monthly contributions."""
    _run(ctx, CalculatorType.COMPOUND, {
        "principal": parse_amount(principal, "principal"),
        "contribution": parse_amount(contribution, "contribution"),
        "rate": parse_amount(rate, "rate"),
        "years": parse_months(years, "years"),
        "frequency": parse_months(frequency, "frequency"),
    })


@cli.command()
@click.option("--principal", "-p", required=True, help="Loan amount")
@click.option("--rate", "-r", required=True, help="Interest rate (percent)")
@click.option("--months", "-m", required=True, help="Loan term in months")
@click.option(
    "--method",
    type=click.Choice([method.value for method in RepaymentMethod]),
    default=RepaymentMethod.EQUAL_PAYMENT.value,
    help="Repayment method",
)
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_context
def schedule(
    ctx: click.Context,
    principal: str,
    rate: str,
    months: str,
    method: str,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    result = calculate_raw(CalculatorType.LOAN_SCHEDULE, {
        "principal": parse_amount(principal, "principal"),
        "rate": parse_amount(rate, "rate"),
        "months": parse_schedule_months(months, "months"),
        "method": method,
    }, ctx.obj)
    if isinstance(result, Message):
        click.echo(result.text)
        return
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result_to_dict(result))
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result.schedule)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    click.echo(result.text)
    print_totals(result.totals)
    rows = result.schedule.rows
    # Limit schedule length printed to avoid flooding the terminal
    if len(rows) > MAX_PREVIEW_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PREVIEW_ROWS} rows.")
        rows = rows[:MAX_PREVIEW_ROWS]
    print_schedule(rows)


@cli.command()
@click.argument("calculator", type=click.Choice([kind.value for kind in CalculatorType]))
@click.argument("assignments", nargs=-1)
@click.pass_context
def share(ctx: click.Context, calculator: str, assignments: Tuple[str, ...]) -> None:
    """Print the share-link query string for FIELD=VALUE assignments."""
    fields = parse_assignments(assignments)
    click.echo("?" + encode_state(CalculatorType(calculator), fields, ctx.obj))


@cli.command()
@click.argument("query")
def restore(query: str) -> None:
    """Recalculate every calculator stored in a share-link QUERY."""
    state = decode_state(query)
    if not state.fields:
        click.echo("No calculator fields found in query.")
        return
    for calculator_type, fields in state.fields.items():
        result = calculate_raw(calculator_type, fields, state.preference)
        click.echo(f"[{calculator_type.value}] {result.text}")


@cli.command("convert-units")
@click.argument("calculator", type=click.Choice([kind.value for kind in CalculatorType]))
@click.argument("assignments", nargs=-1)
@click.option("--to-rate-unit", type=click.Choice([unit.value for unit in RateUnit]), help="New rate unit")
@click.option("--to-amount-unit", type=click.Choice([unit.value for unit in AmountUnit]), help="New amount unit")
@click.pass_context
def convert_units(
    ctx: click.Context,
    calculator: str,
    assignments: Tuple[str, ...],
    to_rate_unit: Optional[str],
    to_amount_unit: Optional[str],
) -> None:
    """Rewrite FIELD=VALUE assignments for a change of unit preference.

    The current preference comes from the group options; the values printed
    denote the same real-world amounts in the new units.
    """
    old: UnitPreference = ctx.obj
    new = UnitPreference(
        rate_unit=RateUnit(to_rate_unit) if to_rate_unit else old.rate_unit,
        amount_unit=AmountUnit(to_amount_unit) if to_amount_unit else old.amount_unit,
    )
    fields = parse_assignments(assignments)
    for key, value in convert_stored_fields(CalculatorType(calculator), fields, old, new).items():
        click.echo(f"{key}={value}")


if __name__ == "__main__":
    cli()
