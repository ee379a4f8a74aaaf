"""Flask adapter for the finance calculators.

The web layer owns everything the calculation engine deliberately does not:
user sessions, the persisted unit preference and share links. Calculations
themselves are delegated to :mod:`finance_calc.calculators`.

Configuration comes from the environment:

* ``FLASK_SECRET_KEY``: session signing key;
* ``PREFERENCE_DATABASE_URL``: SQLAlchemy URL of the preference store
  (defaults to a local SQLite file);
* ``ASSET_VERSION``: cache-busting suffix for static assets.

Run it with ``flask --app finance_calc_web.app run``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional
from uuid import uuid4

from flask import Flask, abort, jsonify, render_template, request, session

from finance_calc.calculators import calculate_raw, result_to_dict
from finance_calc.data_models import (
    INPUT_TYPES,
    AmountUnit,
    CalculatorType,
    RateUnit,
    UnitPreference,
    field_schema,
)
from finance_calc.engine import MAX_SCHEDULE_MONTHS
from finance_calc.query_state import decode_state, encode_state
from finance_calc.units import convert_stored_fields
from finance_calc.utils import parse_number
from finance_calc_web.preference_store import PreferenceStore, create_store_from_env

logger = logging.getLogger(__name__)

CALCULATOR_TITLES = {
    CalculatorType.INTEREST: "이자 계산기",
    CalculatorType.LOAN: "대출 상환 계산기",
    CalculatorType.SAVINGS: "적금 계산기",
    CalculatorType.PERCENT: "퍼센트 계산기",
    CalculatorType.EXCHANGE: "환율 계산기",
    CalculatorType.COMPOUND: "복리 계산기",
    CalculatorType.LOAN_SCHEDULE: "대출 상환 스케줄",
}


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _calculator_type_or_404(name: str) -> CalculatorType:
    try:
        return CalculatorType(name)
    except ValueError:
        abort(404, description=f"Unknown calculator: {name}")


def _request_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def _preference_from_payload(payload: Dict[str, Any], fallback: UnitPreference) -> UnitPreference:
    """Read ``rateUnit``/``amountUnit`` from a request, keeping ``fallback`` for missing keys."""
    try:
        rate_unit = RateUnit(payload["rateUnit"]) if "rateUnit" in payload else fallback.rate_unit
        amount_unit = AmountUnit(payload["amountUnit"]) if "amountUnit" in payload else fallback.amount_unit
    except ValueError as exc:
        abort(400, description=str(exc))
    return UnitPreference(rate_unit=rate_unit, amount_unit=amount_unit)


def _calculator_fields(calculator_type: CalculatorType) -> list:
    return [key for _, key, _ in field_schema(INPUT_TYPES[calculator_type])]


def _check_schedule_term(calculator_type: CalculatorType, fields: Dict[str, Any]) -> None:
    if calculator_type is not CalculatorType.LOAN_SCHEDULE:
        return
    if parse_number(fields.get("months")) > MAX_SCHEDULE_MONTHS:
        abort(400, description=f"months must be at most {MAX_SCHEDULE_MONTHS}")


def create_app(store: Optional[PreferenceStore] = None) -> Flask:
    app = Flask(__name__)
    app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    preference_store = store or create_store_from_env(os.environ.get("PREFERENCE_DATABASE_URL"))

    @app.errorhandler(400)
    @app.errorhandler(404)
    def json_error(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": error.description}), error.code
        return error

    @app.route("/", methods=["GET"])
    def index():
        user_token = _ensure_user_token()
        preference = preference_store.get(user_token)
        results = {}
        shared_fields: Dict[CalculatorType, Dict[str, str]] = {}
        if request.query_string:
            state = decode_state(request.query_string.decode("utf-8"))
            shared_fields = state.fields
            # A shared link carries its own units; the stored preference is left alone.
            if "rateUnit" in request.args or "amountUnit" in request.args:
                preference = state.preference
            for calculator_type, fields in shared_fields.items():
                _check_schedule_term(calculator_type, fields)
                results[calculator_type] = result_to_dict(calculate_raw(calculator_type, fields, preference))

        calculators = [
            {
                "type": calculator_type.value,
                "title": CALCULATOR_TITLES[calculator_type],
                "fields": _calculator_fields(calculator_type),
                "values": shared_fields.get(calculator_type, {}),
                "result": results.get(calculator_type),
            }
            for calculator_type in CalculatorType
        ]
        return render_template(
            "index.html",
            calculators=calculators,
            preference=preference.to_mapping(),
            asset_version=app.config["ASSET_VERSION"],
        )

    @app.post("/api/calculate/<calculator>")
    def calculate(calculator: str):
        calculator_type = _calculator_type_or_404(calculator)
        payload = _request_payload()
        stored = preference_store.get(_ensure_user_token())
        preference = _preference_from_payload(payload, stored)
        fields = payload.get("fields", payload)
        if not isinstance(fields, dict):
            abort(400, description="fields must be an object")
        _check_schedule_term(calculator_type, fields)
        result = calculate_raw(calculator_type, fields, preference)
        body = result_to_dict(result)
        body["share_query"] = encode_state(calculator_type, fields, preference)
        return jsonify(body)

    @app.get("/api/preferences")
    def get_preferences():
        preference = preference_store.get(_ensure_user_token())
        return jsonify(preference.to_mapping())

    @app.post("/api/preferences")
    def update_preferences():
        """Store a new preference and rewrite any submitted field values for it.

        The body may carry ``fields`` keyed by calculator type; their values
        are converted so that they keep denoting the same amounts.
        """
        user_token = _ensure_user_token()
        payload = _request_payload()
        old = preference_store.get(user_token)
        new = _preference_from_payload(payload, old)
        submitted = payload.get("fields") or {}
        if not isinstance(submitted, dict):
            abort(400, description="fields must be an object")
        converted: Dict[str, Dict[str, str]] = {}
        for name, fields in submitted.items():
            calculator_type = _calculator_type_or_404(name)
            if not isinstance(fields, dict):
                abort(400, description=f"fields.{name} must be an object")
            converted[name] = convert_stored_fields(calculator_type, fields, old, new)
        preference_store.set(user_token, new)
        logger.info("Preference changed from %s to %s", old.to_mapping(), new.to_mapping())
        return jsonify({"preference": new.to_mapping(), "fields": converted})

    @app.post("/api/preferences/reset")
    def reset_preferences():
        user_token = _ensure_user_token()
        preference_store.clear(user_token)
        return jsonify(preference_store.get(user_token).to_mapping())

    return app


if __name__ == "__main__":
    print("Starting finance calculator web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
