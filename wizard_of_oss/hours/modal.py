"""Builder for the modal used to record OSS hours."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Sequence

from .records import OFFICES, is_known_office
from .submissions import COUNTRY_FIELD, DESCRIPTION_FIELD, HOURS_FIELD, URL_FIELD

RECORD_HOURS_CALLBACK_ID = "record_oss_hours"
MODAL_TITLE = "Record OSS hours"


def _plain_text(text: str) -> Dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _option(office: str) -> Dict[str, Any]:
    return {"text": _plain_text(office), "value": office}


def _text_input(name: str, label: str, placeholder: str, *, multiline: bool = False, optional: bool = False) -> Dict:
    element: Dict[str, Any] = {
        "type": "plain_text_input",
        "action_id": name,
        "placeholder": _plain_text(placeholder),
    }
    if multiline:
        element["multiline"] = True
    return {
        "type": "input",
        "block_id": name,
        "label": _plain_text(label),
        "element": element,
        "optional": optional,
    }


_BLOCKS: List[Dict[str, Any]] = [
    _text_input(HOURS_FIELD, "Number of hours", "How many hours did you spend?"),
    _text_input(URL_FIELD, "URL", "Link to the issue, pull request or project"),
    _text_input(
        DESCRIPTION_FIELD,
        "Description",
        "What did you work on?",
        multiline=True,
        optional=True,
    ),
    {
        "type": "input",
        "block_id": COUNTRY_FIELD,
        "label": _plain_text("Office"),
        "element": {
            "type": "static_select",
            "action_id": COUNTRY_FIELD,
            "placeholder": _plain_text("Select your office"),
            "options": [_option(office) for office in OFFICES],
        },
    },
]


def find_input_block(blocks: Sequence[Dict[str, Any]], block_id: str) -> Dict[str, Any] | None:
    """Return the ``input`` block carrying *block_id*; other block types are never matched."""

    for block in blocks:
        if block.get("type") == "input" and block.get("block_id") == block_id:
            return block
    return None


def build_record_hours_modal(default_country: str | None = None) -> Dict[str, Any]:
    """Build the modal payload, pre-selecting *default_country* when it is still offered."""

    blocks = copy.deepcopy(_BLOCKS)

    if is_known_office(default_country):
        country_block = find_input_block(blocks, COUNTRY_FIELD)
        if country_block is not None:
            country_block["element"]["initial_option"] = _option(default_country)

    return {
        "type": "modal",
        "callback_id": RECORD_HOURS_CALLBACK_ID,
        "title": _plain_text(MODAL_TITLE),
        "submit": _plain_text("Submit"),
        "close": _plain_text("Cancel"),
        "blocks": blocks,
    }
