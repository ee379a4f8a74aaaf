"""Tests for units.py — normalization and preference-toggle conversion."""

from __future__ import annotations

import math

import pytest

from finance_calc.data_models import (
    AmountUnit,
    CalculatorType,
    CompoundInput,
    FieldRole,
    LoanScheduleInput,
    RateUnit,
    RepaymentMethod,
    UnitPreference,
)
from finance_calc.units import (
    convert_stored_fields,
    convert_stored_value,
    normalize_amount,
    normalize_input,
    normalize_rate,
)

FULL = UnitPreference(RateUnit.ANNUAL, AmountUnit.FULL)
THOUSAND = UnitPreference(RateUnit.ANNUAL, AmountUnit.THOUSAND)
MONTHLY = UnitPreference(RateUnit.MONTHLY, AmountUnit.FULL)


class TestNormalize:
    def test_thousand_money_is_scaled(self):
        assert normalize_amount(12_000, FieldRole.MONEY, AmountUnit.THOUSAND) == 12_000_000

    def test_full_money_is_identity(self):
        assert normalize_amount(12_000, FieldRole.MONEY, AmountUnit.FULL) == 12_000

    @pytest.mark.parametrize("role", [FieldRole.PLAIN, FieldRole.RATE])
    def test_non_money_passes_through(self, role):
        assert normalize_amount(36, role, AmountUnit.THOUSAND) == 36

    def test_annual_rate(self):
        assert normalize_rate(12, RateUnit.ANNUAL) == pytest.approx(0.12)

    def test_monthly_rate_is_annualized(self):
        assert normalize_rate(1, RateUnit.MONTHLY) == pytest.approx(0.12)

    def test_nan_stays_nan(self):
        assert math.isnan(normalize_amount(float("nan"), FieldRole.MONEY, AmountUnit.THOUSAND))
        assert math.isnan(normalize_rate(float("nan"), RateUnit.MONTHLY))

    def test_normalize_input_uses_field_roles(self):
        record = CompoundInput(principal=1_000, contribution=100, rate=1, years=2, frequency=12)
        normalized = normalize_input(record, UnitPreference(RateUnit.MONTHLY, AmountUnit.THOUSAND))
        assert normalized.principal == 1_000_000
        assert normalized.contribution == 100_000
        assert normalized.rate == pytest.approx(0.12)
        assert normalized.years == 2
        assert normalized.frequency == 12

    def test_normalize_input_keeps_choices_and_original(self):
        record = LoanScheduleInput(principal=5, rate=6, months=12, method=RepaymentMethod.EQUAL_PRINCIPAL)
        normalized = normalize_input(record, THOUSAND)
        assert normalized.method is RepaymentMethod.EQUAL_PRINCIPAL
        assert record.principal == 5


class TestConvertStoredValue:
    def test_full_to_thousand_and_back(self):
        thousand = convert_stored_value(12_000_000, FieldRole.MONEY, FULL, THOUSAND)
        assert thousand == 12_000
        assert convert_stored_value(thousand, FieldRole.MONEY, THOUSAND, FULL) == 12_000_000

    def test_thousand_amount_rounds_to_one_decimal(self):
        assert convert_stored_value(1_234_567, FieldRole.MONEY, FULL, THOUSAND) == 1_234.6

    def test_full_amount_rounds_to_integer(self):
        assert convert_stored_value(1.23456, FieldRole.MONEY, THOUSAND, FULL) == 1_235

    def test_rate_annual_to_monthly_rounds_to_two_decimals(self):
        assert convert_stored_value(5, FieldRole.RATE, FULL, MONTHLY) == 0.42

    def test_rate_round_trip(self):
        monthly = convert_stored_value(12, FieldRole.RATE, FULL, MONTHLY)
        assert monthly == 1
        assert convert_stored_value(monthly, FieldRole.RATE, MONTHLY, FULL) == 12

    def test_repeated_toggles_do_not_drift(self):
        value = 5.0
        seen = set()
        for _ in range(5):
            value = convert_stored_value(value, FieldRole.RATE, FULL, MONTHLY)
            value = convert_stored_value(value, FieldRole.RATE, MONTHLY, FULL)
            seen.add(value)
        assert seen == {5.04}

    def test_unchanged_preference_is_idempotent(self):
        once = convert_stored_value(12_345.678, FieldRole.MONEY, THOUSAND, THOUSAND)
        twice = convert_stored_value(once, FieldRole.MONEY, THOUSAND, THOUSAND)
        assert once == twice == 12_345.678

    def test_other_unit_change_leaves_value(self):
        assert convert_stored_value(4.5, FieldRole.RATE, FULL, THOUSAND) == 4.5
        assert convert_stored_value(1_000, FieldRole.MONEY, FULL, MONTHLY) == 1_000

    def test_plain_fields_never_convert(self):
        assert convert_stored_value(36, FieldRole.PLAIN, FULL, UnitPreference(RateUnit.MONTHLY, AmountUnit.THOUSAND)) == 36

    def test_nan_passes_through(self):
        assert math.isnan(convert_stored_value(float("nan"), FieldRole.MONEY, FULL, THOUSAND))

    @pytest.mark.parametrize("raw", [12.3, 0.5, 999.9, 45_000.0])
    def test_normalized_thousand_converts_back(self, raw):
        full = normalize_amount(raw, FieldRole.MONEY, AmountUnit.THOUSAND)
        assert convert_stored_value(full, FieldRole.MONEY, FULL, THOUSAND) == round(raw, 1)


class TestConvertStoredFields:
    def test_rewrites_money_and_keeps_others(self):
        fields = {"loanPrincipal": "12,000,000", "loanRate": "4.5", "loanMonths": "36"}
        converted = convert_stored_fields(CalculatorType.LOAN, fields, FULL, THOUSAND)
        assert converted == {"loanPrincipal": "12000", "loanRate": "4.5", "loanMonths": "36"}

    def test_rewrites_rates(self):
        fields = {"savingsRate": "3.6", "monthly": "100000"}
        converted = convert_stored_fields(CalculatorType.SAVINGS, fields, FULL, MONTHLY)
        assert converted == {"savingsRate": "0.3", "monthly": "100000"}

    def test_unparseable_text_is_left_untouched(self):
        fields = {"principal": "abc", "rate": "", "months": "12"}
        converted = convert_stored_fields(CalculatorType.INTEREST, fields, FULL, THOUSAND)
        assert converted == fields

    def test_exchange_rate_is_not_an_interest_rate(self):
        fields = {"amount": "5000", "rate": "1300", "direction": "toKrw"}
        converted = convert_stored_fields(CalculatorType.EXCHANGE, fields, FULL, MONTHLY)
        assert converted == fields

    def test_unknown_fields_copied(self):
        converted = convert_stored_fields(CalculatorType.PERCENT, {"other": "1000"}, FULL, THOUSAND)
        assert converted == {"other": "1000"}
