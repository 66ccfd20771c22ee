"""Error types surfaced at the Slack boundary."""

from __future__ import annotations

from typing import Any, Dict

INTERNAL_ERROR_MESSAGE = "Something went wrong. See logs for details."


class InputValidationError(Exception):
    """A submitted form value was rejected.

    Slack expects these to be answered with HTTP 200 and an ``errors`` map keyed
    by the input block, so the message is shown next to the offending field.
    """

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name
        self.message = message

    def to_response(self) -> Dict[str, Any]:
        return {"response_action": "errors", "errors": {self.field_name: self.message}}


class SubmissionStateError(ValueError):
    """Raised when a view submission lacks one of the expected inputs."""


def internal_error_body() -> Dict[str, str]:
    """Opaque body returned for any failure that is not an input validation error."""

    return {"error": INTERNAL_ERROR_MESSAGE}
