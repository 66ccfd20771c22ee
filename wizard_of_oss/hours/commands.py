"""Parsing of the slash command text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

STATS_ACTION = "stats"
RECORD_ACTION = "record"


@dataclass(frozen=True)
class CommandContext:
    action: Literal["stats", "record"]
    show_usage: bool = False
    params: str = ""


def parse_slash_command(text: str | None) -> CommandContext:
    """Map the text typed after the command to what the bot should do.

    ``stats`` reports totals. Anything else opens the form; the text is kept as
    ``params`` for pre-filling and an empty text also asks for usage help.
    """

    params = (text or "").strip()
    if params == STATS_ACTION:
        return CommandContext(action=STATS_ACTION)
    return CommandContext(action=RECORD_ACTION, show_usage=not params, params=params)
