"""Pydantic-based configuration helpers for the Wizard of OSS bot."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Iterable, List

from pydantic import BaseModel, Field, ValidationError, field_validator


class AppSettings(BaseModel):
    """Settings required to initialise the Slack bot and its preference store."""

    bot_token: str = Field(..., alias="SLACK_BOT_TOKEN")
    signing_secret: str = Field(..., alias="SLACK_SIGNING_SECRET")
    oss_channel_id: str = Field(..., alias="SLACK_OSS_CHANNEL_ID")
    database_url: str = Field(..., alias="DATABASE_URL")
    stats_history_limit: int = Field(100, alias="STATS_HISTORY_LIMIT")
    slash_command: str = Field("/woss", alias="SLASH_COMMAND")

    @field_validator("oss_channel_id")
    @classmethod
    def _strip_channel(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Channel id must not be empty")
        return value

    @field_validator("stats_history_limit")
    @classmethod
    def _ensure_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("History limit must be greater than zero")
        return value

    @field_validator("slash_command")
    @classmethod
    def _ensure_leading_slash(cls, value: str) -> str:
        value = value.strip()
        return value if value.startswith("/") else f"/{value}"


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return AppSettings.model_validate(os.environ)
    except ValidationError as exc:
        missing = [str(error["loc"][0]) for error in exc.errors()]
        message = (
            "Missing required environment variables: "
            f"{_format_missing(missing)}"
        )
        raise RuntimeError(message) from exc
