"""Tests for formulas.py — closed-form finance formulas."""

from __future__ import annotations

import pytest

from finance_calc.data_models import Direction
from finance_calc.formulas import (
    INVALID_RATE_MESSAGE,
    InvalidRate,
    compound_growth,
    convert_currency,
    effective_monthly_rate,
    installment_payment,
    percent_of,
    savings_future_value,
    simple_interest,
)


class TestSimpleInterest:
    def test_one_year(self):
        result = simple_interest(1_000_000, 0.05, 12)
        assert result.interest == pytest.approx(50_000)
        assert result.total == pytest.approx(1_050_000)

    def test_partial_year_scales_linearly(self):
        result = simple_interest(1_200_000, 0.10, 6)
        assert result.interest == pytest.approx(60_000)

    def test_zero_rate(self):
        result = simple_interest(500_000, 0.0, 24)
        assert result.interest == 0
        assert result.total == 500_000


class TestInstallmentPayment:
    def test_zero_rate_is_exact_division(self):
        assert installment_payment(12_000_000, 0.0, 12) == 1_000_000

    @pytest.mark.parametrize("principal,months", [(1_000, 3), (7_777_777, 7), (1, 360)])
    def test_zero_rate_matches_principal_over_months(self, principal, months):
        assert installment_payment(principal, 0.0, months) == principal / months

    def test_standard_mortgage(self):
        # 100k over 30 years at 6 % per year
        assert installment_payment(100_000, 0.06 / 12, 360) == pytest.approx(599.55, abs=0.01)

    def test_payment_exceeds_zero_rate_payment(self):
        assert installment_payment(12_000_000, 0.01, 12) > 1_000_000


class TestSavingsFutureValue:
    def test_zero_rate(self):
        assert savings_future_value(100_000, 0.0, 12) == 1_200_000

    def test_annuity_due(self):
        # Each deposit earns interest in the month it is made.
        value = savings_future_value(100_000, 0.01, 12)
        assert value == pytest.approx(1_280_932.80, abs=0.01)

    def test_single_month_earns_one_period(self):
        assert savings_future_value(1_000, 0.01, 1) == pytest.approx(1_010)


def test_percent_of():
    assert percent_of(200, 15) == pytest.approx(30)
    assert percent_of(0, 50) == 0


class TestConvertCurrency:
    def test_to_local_multiplies(self):
        assert convert_currency(100, 1_300, Direction.TO_LOCAL) == 130_000

    def test_to_foreign_divides(self):
        assert convert_currency(130_000, 1_300, Direction.TO_FOREIGN) == 100

    @pytest.mark.parametrize("direction", list(Direction))
    def test_zero_rate_raises_invalid_rate(self, direction):
        with pytest.raises(InvalidRate) as excinfo:
            convert_currency(100, 0, direction)
        assert str(excinfo.value) == INVALID_RATE_MESSAGE == "환율은 0보다 커야 합니다."

    def test_invalid_rate_is_value_error(self):
        assert issubclass(InvalidRate, ValueError)


class TestCompoundGrowth:
    def test_effective_monthly_rate_for_monthly_compounding(self):
        assert effective_monthly_rate(0.12, 12) == pytest.approx(0.01)

    def test_effective_monthly_rate_for_annual_compounding(self):
        assert (1 + effective_monthly_rate(0.12, 1)) ** 12 == pytest.approx(1.12)

    def test_positive_rate_beats_plain_accumulation(self):
        value = compound_growth(1_000_000, 100_000, 0.05, 1, 12)
        assert value > 1_000_000 + 100_000 * 12

    def test_zero_rate_is_linear(self):
        assert compound_growth(1_000_000, 100_000, 0.0, 1, 12) == 2_200_000

    def test_lump_sum_only(self):
        value = compound_growth(1_000_000, 0, 0.12, 2, 12)
        assert value == pytest.approx(1_000_000 * 1.01 ** 24)

    def test_more_frequent_compounding_grows_faster(self):
        yearly = compound_growth(1_000_000, 0, 0.10, 5, 1)
        daily = compound_growth(1_000_000, 0, 0.10, 5, 365)
        assert daily > yearly
