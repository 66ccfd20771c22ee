"""Tests for background task utilities."""

from __future__ import annotations

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars
from structlog.testing import capture_logs

from wizard_of_oss.background import run_async


def test_run_async_propagates_structlog_context():
    """Trace IDs bound in the caller should be visible within the worker thread."""

    clear_contextvars()
    bind_contextvars(trace_id="trace-123")
    captured: dict[str, str] = {}

    future = run_async(lambda: captured.update(get_contextvars()))
    future.result(timeout=1)

    assert captured.get("trace_id") == "trace-123"

    clear_contextvars()


def test_run_async_accepts_explicit_trace_id():
    clear_contextvars()
    captured: dict[str, str] = {}

    future = run_async(lambda: captured.update(get_contextvars()), trace_id="trace-456")
    future.result(timeout=1)

    assert captured.get("trace_id") == "trace-456"
    assert "trace_id" not in get_contextvars()


def test_run_async_passes_arguments_through():
    future = run_async(lambda a, *, b: a + b, 2, b=3)

    assert future.result(timeout=1) == 5


def test_run_async_preserves_trace_id_in_background_logs():
    clear_contextvars()

    with capture_logs(processors=[structlog.contextvars.merge_contextvars]) as logs:
        future = run_async(lambda: structlog.get_logger().info("background_event"), trace_id="trace-789")
        future.result(timeout=1)

    assert logs, "expected background_event log to be captured"
    event = logs[0]
    assert event.get("event") == "background_event"
    assert event.get("trace_id") == "trace-789"

    clear_contextvars()


def test_run_async_logs_failures_of_detached_work():
    clear_contextvars()

    def fetch_history():
        raise ConnectionError("network down")

    with capture_logs(processors=[structlog.contextvars.merge_contextvars]) as logs:
        future = run_async(fetch_history, trace_id="trace-999")
        error = future.exception(timeout=1)

    assert isinstance(error, ConnectionError)
    failure = next(entry for entry in logs if entry["event"] == "background_task_failed")
    assert failure["func"] == "fetch_history"
    assert failure["log_level"] == "error"
    assert failure["trace_id"] == "trace-999"

    clear_contextvars()
