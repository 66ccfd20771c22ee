"""Application entry point for the Wizard of OSS Slack bot."""

from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4

from flask import Flask, jsonify, request
from slack_bolt import App as SlackApp
from slack_bolt.adapter.flask import SlackRequestHandler
from sqlalchemy import text
import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars

from wizard_of_oss.background import run_async
from wizard_of_oss.config import AppSettings, get_settings
from wizard_of_oss.db import init_db, session_scope
from wizard_of_oss.errors import InputValidationError, internal_error_body
from wizard_of_oss.logging_config import configure_logging
from wizard_of_oss.hours import (
    RECORD_HOURS_CALLBACK_ID,
    RECORD_HOURS_SHORTCUT_ID,
    build_loading_message,
    build_usage_message,
    check_submission,
    parse_slash_command,
    read_submission,
)
from wizard_of_oss.hours.commands import STATS_ACTION
from wizard_of_oss.hours.notifications import open_record_modal, publish_record, report_user_stats
from wizard_of_oss.slack_client import SlackClient, largest_profile_image


def _create_bolt_app(settings: AppSettings) -> SlackApp:
    """Initialise the Slack Bolt application using validated settings."""

    return SlackApp(
        token=settings.bot_token,
        signing_secret=settings.signing_secret,
        token_verification_enabled=False,
    )


def _register_error_handlers(flask_app: Flask) -> None:
    """Register a JSON error handler that attaches a trace identifier."""

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        trace_id = str(uuid4())
        flask_app.logger.exception(
            "Unhandled application error", extra={"trace_id": trace_id}, exc_info=error
        )
        response = jsonify({**internal_error_body(), "trace_id": trace_id})
        response.status_code = 500
        return response


def _handle_listener_error(error, body, logger, response) -> None:
    """Log an unexpected listener failure and answer with an opaque 500."""

    structlog.get_logger().error(
        "listener_failed",
        error=repr(error),
        payload_type=(body or {}).get("type"),
    )
    logger.exception("Returning error response", exc_info=error)

    if response is None:
        return
    response.status = 500
    response.headers["content-type"] = ["application/json;charset=utf-8"]
    response.body = json.dumps(internal_error_body())


def _handle_oss_command(ack, command, client, logger):
    trace_id = str(uuid4())
    bind_contextvars(trace_id=trace_id)
    log = structlog.get_logger().bind(trace_id=trace_id)

    try:
        settings = get_settings()
        command_name = command.get("command")
        log.info("slash_command_received", command=command_name, text=command.get("text"))

        if command_name != settings.slash_command:
            raise RuntimeError(f"Unknown command {command_name}")

        context = parse_slash_command(command.get("text"))

        if context.action == STATS_ACTION:
            ack(build_loading_message())
            run_async(
                report_user_stats,
                client=client,
                channel=settings.oss_channel_id,
                user_id=command.get("user_id"),
                limit=settings.stats_history_limit,
                logger=logger,
                trace_id=trace_id,
            )
            return

        if context.show_usage:
            ack(build_usage_message(settings.slash_command))
        else:
            ack(build_loading_message())

        run_async(
            open_record_modal,
            client=client,
            trigger_id=command.get("trigger_id"),
            user_id=command.get("user_id"),
            logger=logger,
            trace_id=trace_id,
        )
    finally:
        unbind_contextvars("trace_id")


def _handle_record_shortcut(ack, shortcut, client, logger):
    trace_id = str(uuid4())
    bind_contextvars(trace_id=trace_id)

    try:
        user_id = (shortcut.get("user") or {}).get("id")
        structlog.get_logger().info("shortcut_received", callback_id=shortcut.get("callback_id"), user_id=user_id)
        ack()
        run_async(
            open_record_modal,
            client=client,
            trigger_id=shortcut.get("trigger_id"),
            user_id=user_id,
            logger=logger,
            trace_id=trace_id,
        )
    finally:
        unbind_contextvars("trace_id")


def _handle_view_submission(ack, body, client, logger):
    trace_id = str(uuid4())
    bind_contextvars(trace_id=trace_id)
    log = structlog.get_logger().bind(trace_id=trace_id)

    try:
        settings = get_settings()
        view = body.get("view", {})
        submission = read_submission(view.get("state", {}))
        user_id = body.get("user", {}).get("id")
        log = log.bind(user_id=user_id)
        log.info(
            "record_submission_received",
            number_of_hours=submission.number_of_hours,
            url=submission.url,
            country=submission.country,
        )

        try:
            validated = check_submission(submission)
        except InputValidationError as exc:
            log.info("record_submission_rejected", field=exc.field_name, reason=exc.message)
            ack(exc.to_response())
            return

        user = SlackClient(client=client).fetch_user(user_id)
        username = user.get("name")
        if not username:
            raise RuntimeError("The user information did not contain a username")

        record = validated.to_record(username)
        ack()
        log.info("record_submitted", hours=record.hours, country=record.country)
        run_async(
            publish_record,
            client=client,
            channel=settings.oss_channel_id,
            record=record,
            user_id=user_id,
            icon_url=largest_profile_image(user),
            logger=logger,
            trace_id=trace_id,
        )
    finally:
        unbind_contextvars("trace_id")


def _register_slack_handlers(bolt_app: SlackApp, settings: AppSettings) -> None:
    @bolt_app.command(settings.slash_command)
    def handle_oss_command(ack, command, client, logger):
        _handle_oss_command(ack=ack, command=command, client=client, logger=logger)

    @bolt_app.shortcut(RECORD_HOURS_SHORTCUT_ID)
    def handle_record_shortcut(ack, shortcut, client, logger):
        _handle_record_shortcut(ack=ack, shortcut=shortcut, client=client, logger=logger)

    @bolt_app.view(RECORD_HOURS_CALLBACK_ID)
    def handle_submission(ack, body, client, logger):
        _handle_view_submission(ack=ack, body=body, client=client, logger=logger)

    @bolt_app.error
    def handle_listener_error(error, body, logger, response):
        _handle_listener_error(error=error, body=body, logger=logger, response=response)


_LOGGING_CONFIGURED = False


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def create_app() -> Flask:
    """Create and configure the Flask application."""

    global _LOGGING_CONFIGURED
    if not _LOGGING_CONFIGURED:
        configure_logging()
        _LOGGING_CONFIGURED = True

    settings = get_settings()
    init_db()
    bolt_app = _create_bolt_app(settings)
    handler = SlackRequestHandler(bolt_app)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    flask_app.logger.setLevel("INFO")

    _register_error_handlers(flask_app)
    _register_slack_handlers(bolt_app, settings)

    @flask_app.route("/slack/events", methods=["POST"])
    def slack_events():
        # Bolt verifies the request signature and answers with whatever the listener acked.
        return handler.handle(request)

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")

        try:
            get_settings()
            health["config"] = "valid"
        except RuntimeError as exc:
            health["config"] = "invalid"
            health["config_error"] = str(exc)
            health["ok"] = False

        try:
            with session_scope() as session:
                session.execute(text("SELECT 1"))
            health["db"] = "up"
        except Exception as exc:
            health["db"] = "down"
            health["db_error"] = str(exc)
            health["ok"] = False

        status = 200 if health["ok"] else 503
        return jsonify(health), status

    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    application = create_app()
    application.run(host="0.0.0.0", port=3000, debug=True)
