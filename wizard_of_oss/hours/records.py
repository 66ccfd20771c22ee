"""The contribution record and the primitive parsers shared by its producers."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import AnyUrl, TypeAdapter, ValidationError

OFFICES: tuple[str, ...] = (
    "Denmark",
    "Finland",
    "Germany",
    "Netherlands",
    "Norway",
    "Poland",
    "Sweden",
    "United Kingdom",
)

# Hours are stored as 16-bit signed integers.
MIN_HOURS = -32768
MAX_HOURS = 32767

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_URL_ADAPTER = TypeAdapter(AnyUrl)


@dataclass(frozen=True)
class Record:
    """One logged block of open-source work."""

    username: str
    hours: int
    country: str
    url: str
    description: str


def parse_hours(raw: str) -> int:
    """Parse a signed 16-bit decimal integer, rejecting whitespace, fractions and digit separators."""

    if not _INTEGER_PATTERN.fullmatch(raw):
        raise ValueError(f"{raw!r} is not a valid integer")
    value = int(raw)
    if not MIN_HOURS <= value <= MAX_HOURS:
        raise ValueError(f"{raw!r} is out of range")
    return value


def parse_url(raw: str) -> str:
    """Return the canonical string form of an absolute URL.

    Canonicalisation lowercases scheme and host and gives hierarchical URLs an
    explicit path, so parsing the result again yields the same string.
    """

    try:
        return str(_URL_ADAPTER.validate_python(raw))
    except ValidationError as exc:
        raise ValueError(f"{raw!r} is not a valid URL") from exc


def url_scheme(url: str) -> str:
    return url.split(":", 1)[0].lower()


def is_known_office(country: str | None) -> bool:
    return country in OFFICES
