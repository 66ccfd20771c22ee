"""Recording, encoding and totalling of open-source contribution hours."""

from .commands import CommandContext, parse_slash_command
from .fields import (
    FieldDecodeError,
    InvalidFieldValueError,
    MissingFieldError,
    UnknownFieldError,
    decode_fields,
    encode_record,
)
from .messages import (
    LOADING_MESSAGES,
    build_loading_message,
    build_record_message,
    build_stats_message,
    build_usage_message,
)
from .modal import RECORD_HOURS_CALLBACK_ID, build_record_hours_modal
from .records import OFFICES, Record
from .stats import aggregate_hours, format_stats
from .submissions import (
    RawSubmission,
    ValidatedSubmission,
    check_submission,
    read_submission,
    validate_submission,
)

RECORD_HOURS_SHORTCUT_ID = "record_oss_hours"

__all__ = [
    "CommandContext",
    "parse_slash_command",
    "FieldDecodeError",
    "InvalidFieldValueError",
    "MissingFieldError",
    "UnknownFieldError",
    "decode_fields",
    "encode_record",
    "LOADING_MESSAGES",
    "build_loading_message",
    "build_record_message",
    "build_stats_message",
    "build_usage_message",
    "RECORD_HOURS_CALLBACK_ID",
    "RECORD_HOURS_SHORTCUT_ID",
    "build_record_hours_modal",
    "OFFICES",
    "Record",
    "aggregate_hours",
    "format_stats",
    "RawSubmission",
    "ValidatedSubmission",
    "check_submission",
    "read_submission",
    "validate_submission",
]
