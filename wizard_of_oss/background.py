"""Fire-and-forget execution of Slack API work after a request is acknowledged."""

from contextvars import copy_context
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

import structlog
from structlog.contextvars import bind_contextvars, get_contextvars

MAX_WORKERS = 4

_executor = ThreadPoolExecutor(max_workers=MAX_WORKERS, thread_name_prefix="woss-worker")


def run_async(
    func: Callable[..., Any],
    /,
    *args: Any,
    trace_id: str | None = None,
    **kwargs: Any,
) -> Future:
    """Run *func* on the shared pool inside a copy of the caller's context.

    Nothing is reported back to the caller. An exception escaping *func* is
    logged as ``background_task_failed`` and left on the returned future.
    """

    context = copy_context()

    if trace_id is not None and context.run(lambda: get_contextvars().get("trace_id")) != trace_id:
        context.run(lambda: bind_contextvars(trace_id=trace_id))

    def call() -> Any:
        try:
            return func(*args, **kwargs)
        except Exception:
            structlog.get_logger().exception(
                "background_task_failed",
                func=getattr(func, "__name__", repr(func)),
            )
            raise

    def runner() -> Any:
        return context.run(call)

    return _executor.submit(runner)
