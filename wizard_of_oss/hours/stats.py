"""Per-user hour totals computed from the OSS channel history."""

from __future__ import annotations

from pprint import pformat
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from .fields import FieldDecodeError, decode_fields


class AttachmentField(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    value: str | None = None


class Attachment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fields: List[AttachmentField] | None = None


class HistoryMessage(BaseModel):
    """The part of a ``conversations.history`` message the aggregation reads."""

    model_config = ConfigDict(extra="ignore")

    attachments: List[Any] | None = None


def _field_lists(message: Mapping[str, Any]) -> Iterable[List[Dict[str, Any]]]:
    try:
        parsed = HistoryMessage.model_validate(message)
    except ValidationError:
        return

    # Attachments are validated one by one so a malformed one only drops itself.
    for raw_attachment in parsed.attachments or []:
        try:
            attachment = Attachment.model_validate(raw_attachment)
        except ValidationError:
            continue
        if attachment.fields is not None:
            yield [field.model_dump() for field in attachment.fields]


def aggregate_hours(messages: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """Sum recorded hours per username over *messages*.

    Messages without attachments, and attachments without fields, are ignored.
    An attachment that does not decode into a record is skipped on its own so
    hand-edited or legacy posts never stop the rest of the channel from being
    counted.
    """

    totals: Dict[str, int] = {}
    for message in messages:
        for fields in _field_lists(message):
            try:
                record = decode_fields(fields)
            except FieldDecodeError:
                continue
            totals[record.username] = totals.get(record.username, 0) + record.hours
    return totals


def format_stats(totals: Mapping[str, int]) -> str:
    return pformat(dict(totals), indent=4, width=1)
