"""Remembering each user's last selected office."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from sqlalchemy.exc import SQLAlchemyError

from wizard_of_oss.db import session_scope
from wizard_of_oss.models import CountryPreference


def get_default_country(user_id: str) -> str | None:
    """Return the stored country for *user_id*, or None when unknown or unreadable.

    The value is returned as stored; callers decide whether it is still valid.
    """

    if not user_id:
        return None

    try:
        with session_scope() as session:
            preference = session.get(CountryPreference, user_id)
            return preference.country if preference is not None else None
    except SQLAlchemyError as exc:
        structlog.get_logger().warning("default_country_lookup_failed", user_id=user_id, error=str(exc))
        return None


def set_default_country(user_id: str, country: str) -> None:
    """Insert or replace the stored country for *user_id*."""

    with session_scope() as session:
        preference = session.get(CountryPreference, user_id)
        if preference is None:
            session.add(CountryPreference(user_id=user_id, country=country))
        else:
            preference.country = country
            preference.updated_at = datetime.now(UTC)
