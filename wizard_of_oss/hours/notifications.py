"""Slack API work performed in the background after a request is acknowledged.

None of these tasks report back to the request that scheduled them: failures
are logged and dropped.
"""

from __future__ import annotations

from slack_sdk.errors import SlackApiError
import structlog
from sqlalchemy.exc import SQLAlchemyError

from wizard_of_oss.preferences import get_default_country, set_default_country
from wizard_of_oss.slack_client import SlackClient

from .messages import build_record_message, build_stats_message
from .modal import build_record_hours_modal
from .records import Record
from .stats import aggregate_hours


def _log_slack_failure(log, logger, exc: SlackApiError, *, operation: str, message: str) -> None:
    status_code = getattr(exc.response, "status_code", None) if getattr(exc, "response", None) else None
    error_code = exc.response.get("error") if getattr(exc, "response", None) else str(exc)
    log.error("webhook_failed", operation=operation, error=error_code, status_code=status_code)
    logger.error(message, extra={"operation": operation, "error": error_code})


def open_record_modal(*, client, trigger_id: str, user_id: str | None, logger) -> None:
    """Open the hours modal, pre-selecting the user's last office."""

    log = structlog.get_logger().bind(user_id=user_id)
    view = build_record_hours_modal(default_country=get_default_country(user_id or ""))

    try:
        SlackClient(client=client).open_view(trigger_id=trigger_id, view=view)
    except SlackApiError as exc:
        _log_slack_failure(log, logger, exc, operation="open_record_modal", message="Failed to open OSS hours modal")
        return

    log.info("record_modal_opened")


def publish_record(
    *,
    client,
    channel: str,
    record: Record,
    user_id: str,
    logger,
    icon_url: str | None = None,
) -> None:
    """Post *record* to the OSS channel, then remember the office the user picked."""

    log = structlog.get_logger().bind(user_id=user_id, channel=channel)
    payload = build_record_message(record, icon_url=icon_url)

    try:
        SlackClient(client=client).post_message(
            channel=channel,
            text=payload["text"],
            attachments=payload["attachments"],
            username=payload["username"],
            icon_url=payload["icon_url"],
        )
    except SlackApiError as exc:
        _log_slack_failure(log, logger, exc, operation="publish_record", message="Failed to post OSS hours record")
        return

    log.info("record_published", username=record.username, hours=record.hours)

    try:
        set_default_country(user_id, record.country)
    except SQLAlchemyError:
        logger.exception("Failed to store default country", extra={"user_id": user_id})


def report_user_stats(*, client, channel: str, user_id: str, limit: int, logger) -> None:
    """Total everyone's hours from recent channel history and show them to *user_id*."""

    log = structlog.get_logger().bind(user_id=user_id, channel=channel)
    slack_client = SlackClient(client=client)

    try:
        messages = slack_client.fetch_history(channel=channel, limit=limit)
    except SlackApiError as exc:
        _log_slack_failure(log, logger, exc, operation="fetch_history", message="Failed to read OSS channel history")
        return

    totals = aggregate_hours(messages)
    payload = build_stats_message(totals)

    try:
        slack_client.post_ephemeral(channel=channel, user=user_id, text=payload["text"])
    except SlackApiError as exc:
        _log_slack_failure(log, logger, exc, operation="report_user_stats", message="Failed to post OSS stats")
        return

    log.info("stats_reported", message_count=len(messages), contributor_count=len(totals))
