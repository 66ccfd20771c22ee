"""Conversion between records and Slack message attachment fields."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from .records import Record, parse_hours, parse_url

AUTHOR_TITLE = "Author"
TIME_TITLE = "Time"
OFFICE_TITLE = "Office"
URL_TITLE = "URL"
DESCRIPTION_TITLE = "Description"

# Title -> record attribute, in encoding order.
FIELD_TITLES: Dict[str, str] = {
    AUTHOR_TITLE: "username",
    TIME_TITLE: "hours",
    OFFICE_TITLE: "country",
    URL_TITLE: "url",
    DESCRIPTION_TITLE: "description",
}

REQUIRED_ATTRIBUTES = ("username", "hours", "country", "url", "description")


class FieldDecodeError(ValueError):
    """Base class for attachment fields that cannot be turned into a record."""


class UnknownFieldError(FieldDecodeError):
    def __init__(self, title: str) -> None:
        super().__init__(f"unknown field name '{title}'")
        self.title = title


class MissingFieldError(FieldDecodeError):
    def __init__(self, attribute: str) -> None:
        super().__init__(f"missing {attribute}")
        self.attribute = attribute


class InvalidFieldValueError(FieldDecodeError):
    def __init__(self, attribute: str, raw_value: str) -> None:
        super().__init__(f"invalid {attribute}: {raw_value}")
        self.attribute = attribute
        self.raw_value = raw_value


def encode_record(record: Record) -> List[Dict[str, Any]]:
    """Render *record* as the attachment field list posted to the channel."""

    return [
        {"title": AUTHOR_TITLE, "value": record.username, "short": True},
        {"title": TIME_TITLE, "value": str(record.hours), "short": True},
        {"title": OFFICE_TITLE, "value": record.country, "short": True},
        {"title": URL_TITLE, "value": record.url, "short": True},
        {"title": DESCRIPTION_TITLE, "value": record.description, "short": False},
    ]


def _strip_link_markup(value: str) -> str:
    # Slack wraps links it has formatted in angle brackets.
    if value.startswith("<"):
        value = value[1:]
    if value.endswith(">"):
        value = value[:-1]
    return value


def _decode_value(attribute: str, raw: str) -> Any:
    try:
        if attribute == "hours":
            return parse_hours(raw)
        if attribute == "url":
            return parse_url(_strip_link_markup(raw))
    except ValueError:
        # Kept as a value so a later field with the same title can still win.
        return InvalidFieldValueError(attribute, raw)
    return raw


def decode_fields(fields: Iterable[Mapping[str, Any]]) -> Record:
    """Rebuild a record from attachment fields read back from channel history.

    Fields lacking a title or a value are ignored, an unrecognised title fails
    straight away, and the remaining problems are reported once every field has
    been seen: the first absent attribute in record order, or the raw value of
    a field that could not be parsed. Later fields override earlier ones with
    the same title. Business rules (positive hours, http(s) URLs) are only
    enforced when a submission is validated, not here.
    """

    decoded: Dict[str, Any] = {}
    for field in fields:
        title = field.get("title")
        value = field.get("value")
        if title is None or value is None:
            continue

        attribute = FIELD_TITLES.get(title)
        if attribute is None:
            raise UnknownFieldError(title)
        decoded[attribute] = _decode_value(attribute, str(value))

    for attribute in REQUIRED_ATTRIBUTES:
        if attribute not in decoded:
            raise MissingFieldError(attribute)
        if isinstance(decoded[attribute], InvalidFieldValueError):
            raise decoded[attribute]

    return Record(**decoded)
