"""Utility script to wipe the stored default offices.

Usage:
    python scripts/reset_local_db.py

Environment:
    Ensure DATABASE_URL (and other required settings) are available in
    the current shell before running this script.
"""

from __future__ import annotations

from wizard_of_oss.db import Base, get_engine
from wizard_of_oss.models import CountryPreference  # noqa: F401


def reset_database() -> None:
    engine = get_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print("Country preferences reset.")


if __name__ == "__main__":
    reset_database()
