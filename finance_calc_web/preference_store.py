"""Persistence layer for unit preferences.

The calculators never read or write preferences themselves; this store is the
adapter that owns them. Each user token maps to a ``rateUnit`` and an
``amountUnit``. It defaults to SQLite for local development, but accepts any
SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from finance_calc.data_models import UnitPreference

logger = logging.getLogger(__name__)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UnitPreferenceModel(Base):
    __tablename__ = "unit_preferences"

    user_token = Column(String(64), primary_key=True)
    rate_unit = Column(String(16), nullable=False)
    amount_unit = Column(String(16), nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class PreferenceStore:
    """Database-backed key-value store of unit preferences."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    def get(self, user_token: str) -> UnitPreference:
        """Return the stored preference, or the default (annual/krw) when none is stored."""
        if not user_token:
            return UnitPreference()
        with self._session_factory() as session:
            row = session.get(UnitPreferenceModel, user_token)
            if row is None:
                return UnitPreference()
            return UnitPreference.from_mapping({"rateUnit": row.rate_unit, "amountUnit": row.amount_unit})

    def set(self, user_token: str, preference: UnitPreference) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            row = session.get(UnitPreferenceModel, user_token)
            if row is None:
                row = UnitPreferenceModel(user_token=user_token)
                session.add(row)
            row.rate_unit = preference.rate_unit.value
            row.amount_unit = preference.amount_unit.value
            session.commit()
        logger.debug("Stored preference for %s: %s", user_token, preference)

    def clear(self, user_token: str) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            row = session.get(UnitPreferenceModel, user_token)
            if row is not None:
                session.delete(row)
                session.commit()


def create_store_from_env(url: str | None) -> PreferenceStore:
    return PreferenceStore(url or "sqlite:///preferences.sqlite3")
