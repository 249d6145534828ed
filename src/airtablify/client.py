"""Asynchronous Airtable client.

:class:`Airtable` owns the resolved configuration and the HTTP transport;
bases, tables and records borrow them.

Usage::

    import asyncio
    from airtablify import Airtable

    async def main():
        async with Airtable(api_key="pat_xxx") as airtable:
            table = airtable.base("appXXXXXXXX").table("Tasks")
            records = await table.select(view="Grid view").all()
            for record in records:
                print(record.id, record.get("Name"))

    asyncio.run(main())
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from airtablify.airtable_api.transport import AirtableTransport
from airtablify.base import Base
from airtablify.config import AirtablifyConfig
from airtablify.deprecate import DeprecationRegistry, default_registry
from airtablify.models import AirtableResponse


class Airtable:
    """Entry point of the client.

    Parameters
    ----------
    api_key, endpoint_url, api_version, request_timeout, no_retry_if_rate_limited:
        Override the values otherwise taken from :func:`airtablify.configure`
        defaults and the environment (see :mod:`airtablify.config`).
    transport:
        Optional ``httpx.AsyncBaseTransport`` for sending requests.
    sleep:
        Coroutine function used to wait between rate-limit retries.
    rand:
        Uniform ``[0, 1)`` source for backoff jitter.
    deprecations:
        Registry that deduplicates deprecation warnings.  Defaults to the
        process-wide :data:`~airtablify.deprecate.default_registry`.
    **config_kwargs:
        Any other :class:`AirtablifyConfig` field.
    """

    def __init__(
        self,
        api_key: str | None = None,
        endpoint_url: str | None = None,
        api_version: str | None = None,
        request_timeout: float | None = None,
        no_retry_if_rate_limited: bool | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        rand: Callable[[], float] | None = None,
        deprecations: DeprecationRegistry | None = None,
        **config_kwargs: Any,
    ) -> None:
        self._config = AirtablifyConfig.resolve(
            api_key=api_key,
            endpoint_url=endpoint_url,
            api_version=api_version,
            request_timeout=request_timeout,
            no_retry_if_rate_limited=no_retry_if_rate_limited,
            **config_kwargs,
        )
        self._transport = AirtableTransport(
            self._config, transport=transport, sleep=sleep, rand=rand,
        )
        self.deprecations = deprecations if deprecations is not None else default_registry

    @property
    def config(self) -> AirtablifyConfig:
        return self._config

    def base(self, base_id: str) -> Base:
        """Return a handle for the base with this id (``app...``)."""
        return Base(self, base_id)

    async def make_request(self, **kwargs: Any) -> AirtableResponse:
        """Send a raw request; see :meth:`AirtableTransport.make_request`."""
        return await self._transport.make_request(**kwargs)

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> Airtable:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
