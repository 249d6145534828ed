"""Unit tests for airtablify/callbacks.py."""

from __future__ import annotations

import asyncio
import inspect
from unittest.mock import MagicMock

from airtablify import callbacks
from airtablify.callbacks import call_done_or_await, split_trailing_callback


async def _value(v):
    await asyncio.sleep(0)
    return v


async def _boom():
    raise RuntimeError("boom")


class TestCallDoneOrAwait:
    async def test_without_callback_returns_coroutine(self):
        coro = call_done_or_await(_value(3), None)
        assert inspect.iscoroutine(coro)
        assert await coro == 3

    async def test_callback_receives_result(self):
        outcome = []
        task = call_done_or_await(_value(3), lambda err, result: outcome.append((err, result)))
        assert isinstance(task, asyncio.Task)
        await task
        assert outcome == [(None, 3)]

    async def test_callback_receives_error(self):
        outcome = []
        task = call_done_or_await(_boom(), lambda err, result: outcome.append((err, result)))
        await task
        err, result = outcome[0]
        assert isinstance(err, RuntimeError)
        assert result is None

    async def test_task_runs_without_being_awaited(self):
        outcome = asyncio.Event()
        call_done_or_await(_value(1), lambda err, result: outcome.set())
        await asyncio.wait_for(outcome.wait(), timeout=1)

    async def test_pending_task_is_held_until_finished(self):
        task = call_done_or_await(_value(1), lambda err, result: None)
        assert task in callbacks._pending_tasks
        await task
        await asyncio.sleep(0)
        assert task not in callbacks._pending_tasks

    async def test_callback_failure_is_logged_not_raised(self, monkeypatch):
        log = MagicMock()
        monkeypatch.setattr(callbacks, "log", log)

        def done(err, result):
            raise RuntimeError("boom in callback")

        task = call_done_or_await(_value(1), done)
        await task
        assert task.exception() is None
        log.exception.assert_called_once()
        assert log.exception.call_args.args[0] == "Completion callback raised"


class TestSplitTrailingCallback:
    def test_peels_callable(self):
        cb = lambda err, result: None  # noqa: E731
        assert split_trailing_callback(({"a": 1}, cb), None) == (({"a": 1},), cb)

    def test_explicit_done_wins(self):
        cb = lambda err, result: None  # noqa: E731
        other = lambda err, result: None  # noqa: E731
        assert split_trailing_callback((other,), cb) == ((other,), cb)

    def test_no_callable(self):
        assert split_trailing_callback(({"a": 1},), None) == (({"a": 1},), None)
        assert split_trailing_callback((), None) == ((), None)
