"""Shared test fixtures for the airtablify test suite."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from airtablify.client import Airtable
from airtablify.config import AirtablifyConfig, reset_defaults
from airtablify.deprecate import DeprecationRegistry, default_registry

TEST_API_KEY = "key_test_1234"


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch):
    """Keep env vars, ``configure()`` defaults and warn-once state per test."""
    monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)
    monkeypatch.delenv("AIRTABLE_ENDPOINT_URL", raising=False)
    reset_defaults()
    default_registry.reset()
    yield
    reset_defaults()
    default_registry.reset()


@pytest.fixture
def config() -> AirtablifyConfig:
    """Default test configuration with a dummy API key."""
    return AirtablifyConfig(api_key=TEST_API_KEY)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_airtable(sleep_recorder: SleepRecorder) -> Callable[..., Airtable]:
    """Factory for clients whose HTTP traffic goes to a ``MockTransport`` handler.

    Backoff sleeps are recorded instead of awaited and jitter is pinned to
    ``0.5``, so the first retry delay is exactly 7.5 seconds.
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs: object) -> Airtable:
        kwargs.setdefault("api_key", TEST_API_KEY)
        kwargs.setdefault("deprecations", DeprecationRegistry())
        return Airtable(
            transport=httpx.MockTransport(handler),
            sleep=sleep_recorder,
            rand=lambda: 0.5,
            **kwargs,
        )

    return factory

