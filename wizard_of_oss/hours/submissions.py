"""Reading and validating the "record OSS hours" modal submission."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ValidationError

from wizard_of_oss.errors import InputValidationError, SubmissionStateError

from .records import Record, parse_hours, parse_url, url_scheme

HOURS_FIELD = "number_of_hours"
URL_FIELD = "url"
DESCRIPTION_FIELD = "description"
COUNTRY_FIELD = "country"


class SelectedOption(BaseModel):
    value: str


class SubmissionValue(BaseModel):
    """A single element value from Slack modal state."""

    value: str | None = None
    selected_option: SelectedOption | None = None


class SubmissionState(BaseModel):
    """Model to validate Slack modal state payloads."""

    values: Dict[str, Dict[str, SubmissionValue]]


@dataclass(frozen=True)
class RawSubmission:
    """Untyped form values as typed in by the user."""

    number_of_hours: str
    url: str
    description: str
    country: str


def parse_view_state(state_payload: Mapping[str, Any]) -> SubmissionState:
    try:
        return SubmissionState.model_validate(state_payload)
    except ValidationError as exc:
        raise SubmissionStateError("Invalid submission payload") from exc


def _element(state: SubmissionState, name: str) -> SubmissionValue | None:
    # Blocks and their single element share the same identifier in our modal.
    return state.values.get(name, {}).get(name)


def input_value(state: SubmissionState, name: str, *, required: bool = True) -> str:
    """Return the text typed into the input identified by *name*.

    Slack omits the value of an optional input the user left empty, which reads
    as an empty string unless *required* is set.
    """

    element = _element(state, name)
    if element is None or element.value is None:
        if required:
            raise SubmissionStateError(f"Missing field '{name}'")
        return ""
    return element.value


def select_value(state: SubmissionState, name: str) -> str:
    """Return the value of the option chosen in the select identified by *name*."""

    element = _element(state, name)
    if element is None or element.selected_option is None:
        raise SubmissionStateError(f"Missing select '{name}'")
    return element.selected_option.value


def read_submission(state_payload: Mapping[str, Any]) -> RawSubmission:
    """Pull the four form values out of a ``view.state`` payload."""

    state = parse_view_state(state_payload)
    return RawSubmission(
        number_of_hours=input_value(state, HOURS_FIELD),
        url=input_value(state, URL_FIELD),
        description=input_value(state, DESCRIPTION_FIELD, required=False),
        country=select_value(state, COUNTRY_FIELD),
    )


@dataclass(frozen=True)
class ValidatedSubmission:
    """Form values that passed validation, still lacking the contributor name."""

    hours: int
    url: str
    country: str
    description: str

    def to_record(self, username: str) -> Record:
        return Record(
            username=username,
            hours=self.hours,
            country=self.country,
            url=self.url,
            description=self.description,
        )


def check_submission(submission: RawSubmission) -> ValidatedSubmission:
    """Validate the typed-in values or raise :class:`InputValidationError`.

    Checks run in order and stop at the first failure: hours must be an integer
    greater than zero, the URL must parse and use an http(s) scheme.
    """

    try:
        hours = parse_hours(submission.number_of_hours)
    except ValueError:
        raise InputValidationError(HOURS_FIELD, "not a valid integer") from None

    if hours <= 0:
        raise InputValidationError(HOURS_FIELD, "Number of hours must be greater than 0")

    try:
        url = parse_url(submission.url)
    except ValueError:
        raise InputValidationError(URL_FIELD, "Not a valid URL") from None

    if not url_scheme(url).startswith("http"):
        raise InputValidationError(URL_FIELD, "URL should point to an HTTP or HTTPS resource")

    return ValidatedSubmission(
        hours=hours,
        url=url,
        country=submission.country,
        description=submission.description,
    )


def validate_submission(submission: RawSubmission, *, username: str) -> Record:
    """Turn a raw submission into a record or raise :class:`InputValidationError`."""

    return check_submission(submission).to_record(username)
