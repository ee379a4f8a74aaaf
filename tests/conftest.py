"""Shared test fixtures — unit preferences, CLI runner and a web client."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from finance_calc.data_models import AmountUnit, RateUnit, UnitPreference
from finance_calc_web.app import create_app
from finance_calc_web.preference_store import PreferenceStore


@pytest.fixture
def default_preference() -> UnitPreference:
    return UnitPreference()


@pytest.fixture
def thousand_preference() -> UnitPreference:
    return UnitPreference(rate_unit=RateUnit.ANNUAL, amount_unit=AmountUnit.THOUSAND)


@pytest.fixture
def monthly_preference() -> UnitPreference:
    return UnitPreference(rate_unit=RateUnit.MONTHLY, amount_unit=AmountUnit.FULL)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def store(tmp_path) -> PreferenceStore:
    return PreferenceStore(f"sqlite:///{tmp_path / 'preferences.sqlite3'}")


@pytest.fixture
def client(store):
    app = create_app(store)
    app.config["TESTING"] = True
    return app.test_client()
