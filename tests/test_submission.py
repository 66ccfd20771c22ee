"""Tests for view submission handling."""

import json
import logging
from pathlib import Path
import sys

import pytest
import structlog
from slack_bolt.response import BoltResponse
from slack_sdk.errors import SlackApiError
from structlog.contextvars import clear_contextvars
from structlog.testing import capture_logs

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import app as app_module  # noqa: E402
from wizard_of_oss import config  # noqa: E402
from wizard_of_oss.db import Base, get_engine, get_session_factory, init_db  # noqa: E402
from wizard_of_oss.errors import SubmissionStateError  # noqa: E402
from wizard_of_oss.hours import decode_fields  # noqa: E402
from wizard_of_oss.preferences import get_default_country  # noqa: E402


@pytest.fixture(autouse=True)
def configure_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("SLACK_BOT_TOKEN", "token")
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "secret")
    monkeypatch.setenv("SLACK_OSS_CHANNEL_ID", "COSS")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'prefs.db'}")

    config.get_settings.cache_clear()
    get_engine.cache_clear()
    get_session_factory.cache_clear()
    init_db()

    yield

    Base.metadata.drop_all(get_engine())
    config.get_settings.cache_clear()
    get_engine.cache_clear()
    get_session_factory.cache_clear()


@pytest.fixture
def logger():
    bolt_app = app_module._create_bolt_app(config.get_settings())
    return bolt_app.logger


class DummySlackWebClient:
    def __init__(self, username="alice"):
        self.calls = []
        self.username = username

    def users_info(self, **kwargs):
        self.calls.append(("users_info", kwargs))
        user = {"id": kwargs["user"], "profile": {"image_192": "https://avatars.example.com/192.png"}}
        if self.username:
            user["name"] = self.username
        return {"ok": True, "user": user}

    def chat_postMessage(self, **kwargs):
        self.calls.append(("post", kwargs))
        return {"ok": True, "channel": kwargs["channel"], "ts": "1700000000.000001"}


def run_async_sync(func, /, *args, **kwargs):
    """Execute background work immediately for tests while dropping trace metadata."""

    kwargs.pop("trace_id", None)
    return func(*args, **kwargs)


def _body(hours="3", url="https://github.com/example/repo/pull/7", description="Fixed docs", country="Sweden"):
    return {
        "type": "view_submission",
        "user": {"id": "U123"},
        "view": {
            "callback_id": "record_oss_hours",
            "state": {
                "values": {
                    "number_of_hours": {"number_of_hours": {"type": "plain_text_input", "value": hours}},
                    "url": {"url": {"type": "plain_text_input", "value": url}},
                    "description": {"description": {"type": "plain_text_input", "value": description}},
                    "country": {
                        "country": {"type": "static_select", "selected_option": {"value": country}},
                    },
                }
            },
        },
    }


def _ack_recorder():
    payloads = []

    def ack(payload=None):
        payloads.append(payload)

    return ack, payloads


def test_valid_submission_is_posted_and_country_remembered(logger, monkeypatch):
    monkeypatch.setattr(app_module, "run_async", run_async_sync)
    ack, payloads = _ack_recorder()
    client = DummySlackWebClient()

    app_module._handle_view_submission(ack=ack, body=_body(), client=client, logger=logger)

    assert payloads == [None]
    assert client.calls[0] == ("users_info", {"user": "U123"})
    kind, kwargs = client.calls[1]
    assert kind == "post"
    assert kwargs["channel"] == "COSS"
    assert kwargs["username"] == "alice via Wizard of OSS"
    assert kwargs["icon_url"] == "https://avatars.example.com/192.png"
    record = decode_fields(kwargs["attachments"][0]["fields"])
    assert record.username == "alice"
    assert record.hours == 3
    assert record.url == "https://github.com/example/repo/pull/7"
    assert get_default_country("U123") == "Sweden"


def test_submission_schedules_publish_with_trace(logger, monkeypatch):
    scheduled = []

    def fake_run_async(func, /, *args, **kwargs):
        scheduled.append((func, kwargs.pop("trace_id", None), kwargs))

    monkeypatch.setattr(app_module, "run_async", fake_run_async)
    ack, _ = _ack_recorder()

    app_module._handle_view_submission(ack=ack, body=_body(), client=DummySlackWebClient(), logger=logger)

    func, trace_id, kwargs = scheduled[0]
    assert func is app_module.publish_record
    assert trace_id
    assert kwargs["user_id"] == "U123"
    assert kwargs["record"].country == "Sweden"


@pytest.mark.parametrize(
    ("overrides", "field", "message"),
    [
        ({"hours": "0"}, "number_of_hours", "Number of hours must be greater than 0"),
        ({"hours": "many"}, "number_of_hours", "not a valid integer"),
        ({"url": "nowhere"}, "url", "Not a valid URL"),
        ({"url": "ftp://x.com"}, "url", "URL should point to an HTTP or HTTPS resource"),
    ],
)
def test_invalid_submission_acks_field_error(logger, monkeypatch, overrides, field, message):
    scheduled = []
    monkeypatch.setattr(app_module, "run_async", lambda *args, **kwargs: scheduled.append(args))
    ack, payloads = _ack_recorder()

    app_module._handle_view_submission(ack=ack, body=_body(**overrides), client=DummySlackWebClient(), logger=logger)

    assert payloads == [{"response_action": "errors", "errors": {field: message}}]
    assert scheduled == []
    assert get_default_country("U123") is None


def test_rejection_is_logged_with_trace(logger, monkeypatch):
    clear_contextvars()
    ack, _ = _ack_recorder()

    with capture_logs(processors=[structlog.contextvars.merge_contextvars]) as logs:
        app_module._handle_view_submission(ack=ack, body=_body(hours="-1"), client=DummySlackWebClient(), logger=logger)

    rejected = next(entry for entry in logs if entry["event"] == "record_submission_rejected")
    assert rejected["field"] == "number_of_hours"
    assert rejected["trace_id"]
    clear_contextvars()


class UnreachableSlackWebClient(DummySlackWebClient):
    def users_info(self, **kwargs):
        self.calls.append(("users_info", kwargs))
        raise SlackApiError("boom", {"ok": False, "error": "ratelimited"})


def test_invalid_submission_is_rejected_without_user_lookup(logger):
    ack, payloads = _ack_recorder()
    client = UnreachableSlackWebClient()

    app_module._handle_view_submission(ack=ack, body=_body(hours="0"), client=client, logger=logger)

    assert payloads == [
        {"response_action": "errors", "errors": {"number_of_hours": "Number of hours must be greater than 0"}}
    ]
    assert client.calls == []


def test_missing_username_is_an_internal_error(logger):
    ack, payloads = _ack_recorder()

    with pytest.raises(RuntimeError):
        app_module._handle_view_submission(ack=ack, body=_body(), client=DummySlackWebClient(username=None), logger=logger)

    assert payloads == []


def test_missing_input_is_an_internal_error(logger):
    ack, payloads = _ack_recorder()
    body = _body()
    del body["view"]["state"]["values"]["country"]

    with pytest.raises(SubmissionStateError):
        app_module._handle_view_submission(ack=ack, body=body, client=DummySlackWebClient(), logger=logger)

    assert payloads == []


def test_listener_error_becomes_opaque_500():
    response = BoltResponse(status=200, body="")

    app_module._handle_listener_error(
        error=RuntimeError("database password is hunter2"),
        body={"type": "view_submission"},
        logger=logging.getLogger("tests"),
        response=response,
    )

    assert response.status == 500
    assert json.loads(response.body) == {"error": "Something went wrong. See logs for details."}
    assert "hunter2" not in response.body
