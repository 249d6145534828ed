"""Adapter for the legacy completion-callback calling convention.

Every async operation of the client also accepts ``done=callback``.  The
callback receives ``(error, result)``: ``(None, value)`` on success and
``(exc, None)`` on failure.  It is a thin shim over the coroutine; it
never changes how many requests are made.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from airtablify.observability import get_logger

log = get_logger("airtablify.callbacks")

T = TypeVar("T")

DoneCallback = Callable[[Exception | None, Any], Any]

# Callback-mode tasks still running; the loop only keeps weak references.
_pending_tasks: set[asyncio.Task[None]] = set()


def call_done_or_await(
    coro: Coroutine[Any, Any, T],
    done: DoneCallback | None,
) -> Coroutine[Any, Any, T] | asyncio.Task[None]:
    """Return *coro* unchanged, or run it in a task that reports to *done*.

    With a callback the returned :class:`asyncio.Task` may be awaited or
    ignored; *done* has been called by the time it completes.  An exception
    raised by *done* itself is logged on ``airtablify.callbacks`` and does
    not fail the task.  Must be called from inside a running event loop
    when *done* is given.
    """
    if done is None:
        return coro

    async def _run() -> None:
        try:
            result = await coro
        except Exception as exc:
            _report(done, exc, None)
            return
        _report(done, None, result)

    task = asyncio.get_running_loop().create_task(_run())
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)
    return task


def _report(done: DoneCallback, error: Exception | None, result: Any) -> None:
    try:
        done(error, result)
    except Exception:
        log.exception(
            "Completion callback raised",
            extra={"extra_fields": {"op": "callback", "callback": getattr(done, "__qualname__", repr(done))}},
        )


def split_trailing_callback(
    args: tuple[Any, ...],
    done: DoneCallback | None,
) -> tuple[tuple[Any, ...], DoneCallback | None]:
    """Peel a callback passed positionally as the last of *args*.

    Supports the legacy ``table.create(fields, callback)`` shape alongside
    ``table.create(fields, opts, done=callback)``.
    """
    if done is None and args and callable(args[-1]):
        return args[:-1], args[-1]
    return args, done
