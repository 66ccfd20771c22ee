"""Slack message payloads posted by the bot."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

from .fields import encode_record
from .records import Record
from .stats import format_stats

LOADING_MESSAGES_FILE = Path(__file__).resolve().parent.parent / "loading-messages.txt"

RECORD_COLOR = "good"
BOT_NAME = "Wizard of OSS"


def load_loading_messages(path: Path = LOADING_MESSAGES_FILE) -> tuple[str, ...]:
    """Read one phrase per line, ignoring blank lines."""

    with path.open("r", encoding="utf-8") as fp:
        return tuple(line.strip() for line in fp if line.strip())


LOADING_MESSAGES = load_loading_messages()


def build_loading_message(phrases: Sequence[str] = LOADING_MESSAGES) -> Dict[str, Any]:
    """Ephemeral acknowledgement shown while the real work runs in the background."""

    phrase = random.choice(phrases) if phrases else ""
    return {"response_type": "ephemeral", "text": f"Please wait... {phrase}..."}


def build_usage_message(command: str = "/woss") -> Dict[str, Any]:
    return {
        "response_type": "ephemeral",
        "text": (
            f"Use `{command}` to record the hours you spent on open source, "
            f"or `{command} stats` to see how many hours everyone has logged."
        ),
    }


def build_record_message(record: Record, *, icon_url: str | None = None) -> Dict[str, Any]:
    """Build the channel post for a newly submitted record."""

    return {
        "text": f"{record.username} logged {record.hours} OSS hour(s).",
        "attachments": [
            {
                "color": RECORD_COLOR,
                "fields": encode_record(record),
            }
        ],
        "username": f"{record.username} via {BOT_NAME}",
        "icon_url": icon_url,
    }


def build_stats_message(totals: Mapping[str, int]) -> Dict[str, Any]:
    return {"text": format_stats(totals)}
