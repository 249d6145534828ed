"""Async HTTP transport for the Airtable API.

:meth:`AirtableTransport.make_request` handles the full lifecycle of one
logical request:

1. Build the URL (``{endpoint}/v{major}{path}?{query}``) and headers.
2. Send the HTTP request, aborting it after ``request_timeout`` seconds.
3. On a network failure or timeout -- raise a ``CONNECTION_ERROR`` at once.
4. On ``429`` -- sleep for a jittered exponential backoff and send again,
   unless rate-limit retry is disabled or the attempt cap is reached.
5. Decode the body and classify the response; raise the typed error or
   return an :class:`~airtablify.models.AirtableResponse`.

The transport holds no per-request state, so independent requests can be
awaited concurrently.
"""

from __future__ import annotations

import asyncio
import json as _json
import random
import sys
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from airtablify._version import __version__
from airtablify.config import AirtablifyConfig
from airtablify.errors import AirtablifyConnectionError
from airtablify.models import AirtableResponse
from airtablify.observability import NoopMetricsHook, get_logger
from airtablify.utils.query_string import object_to_query_param_string
from airtablify.utils.redact import redact

from .classify import classify, parse_body
from .headers import build_request_headers
from .retries import exponential_backoff_with_jitter

log = get_logger("airtablify.transport")

USER_AGENT = f"airtablify/{__version__}"

# Distinguishes "no body" from an explicit JSON ``null`` body.
_NO_BODY: Any = object()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _can_request_method_include_body(method: str) -> bool:
    return method not in ("GET", "DELETE")


def _dump_payload(
    method: str,
    url: str,
    headers: dict[str, str],
    payload: Any,
    response_status: int | None,
    response_body: Any,
    api_key: str | None = None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    dump: dict[str, Any] = {
        "method": method,
        "url": url,
        "request_headers": headers,
    }
    if payload is not _NO_BODY:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, api_key)
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class AirtableTransport:
    """Async HTTP transport with auth, timeouts and rate-limit retry.

    Parameters
    ----------
    config:
        An :class:`AirtablifyConfig` controlling all transport behaviour.
    transport:
        Optional ``httpx.AsyncBaseTransport`` used to send requests.
        Tests pass an ``httpx.MockTransport`` here.
    sleep:
        Coroutine function awaited between rate-limit retries.  Defaults
        to :func:`asyncio.sleep`.
    rand:
        Uniform ``[0, 1)`` source for backoff jitter.
    """

    def __init__(
        self,
        config: AirtablifyConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        rand: Callable[[], float] | None = None,
    ) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._sleep = sleep or asyncio.sleep
        self._rand = rand or random.random
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(config.request_timeout),
        )

    @property
    def config(self) -> AirtablifyConfig:
        return self._config

    # -- public API --------------------------------------------------------

    async def make_request(
        self,
        method: str = "GET",
        path: str = "/",
        qs: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        body: Any = _NO_BODY,
    ) -> AirtableResponse:
        """Execute a request against the Airtable API.

        Parameters
        ----------
        method:
            HTTP method, case-insensitive.
        path:
            Path below the versioned root, e.g. ``/appXXX/Tasks/recYYY``.
        qs:
            Query parameters.  Nested mappings and lists are bracket
            encoded.
        headers:
            Extra headers.  Keys are case-insensitive and override the
            defaults; ``X-Airtable-User-Agent`` sets ``User-Agent``.
        body:
            JSON-serializable payload.  Ignored for ``GET`` and ``DELETE``.

        Returns
        -------
        AirtableResponse
            The status, headers and decoded object body.

        Raises
        ------
        AirtablifyConnectionError
            When the server cannot be reached or the attempt times out.
        AirtablifyError
            The classified error for any ``>= 400`` status or for a body
            that is not a JSON object.
        """
        method = method.upper()
        url = self._build_url(path, qs or {})
        request_headers = build_request_headers(self._config.api_key, USER_AGENT, headers)

        content: bytes | None = None
        if body is not _NO_BODY and _can_request_method_include_body(method):
            content = _json.dumps(body).encode("utf-8")

        attempt = 0
        while True:
            response = await self._send(method, url, path, request_headers, content, attempt)
            if response.status_code != 429 or not self._may_retry_rate_limit(attempt):
                break

            delay = exponential_backoff_with_jitter(
                attempt,
                initial=self._config.retry_initial_delay,
                maximum=self._config.retry_max_delay,
                rand=self._rand,
            )
            self._metrics.increment(
                "airtablify.rate_limited_total",
                tags={"method": method},
            )
            self._metrics.increment(
                "airtablify.retries_total",
                tags={"method": method, "reason": "rate_limited"},
            )
            log.warning(
                "Rate limited by Airtable API",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "attempt": attempt + 1,
                        "delay": delay,
                    }
                },
            )
            await self._sleep(delay)
            attempt += 1

        response_body = parse_body(response.content)
        if self._config.debug_dump_payload:
            _dump_payload(
                method, url, request_headers,
                _json.loads(content) if content is not None else _NO_BODY,
                response.status_code, response.text[:1000],
                api_key=self._config.api_key,
            )

        error = classify(
            response.status_code,
            response_body,
            context={"method": method, "path": path, "attempts": attempt + 1},
        )
        if error is not None:
            log.debug(
                "Request failed",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                        "code": error.code,
                    }
                },
            )
            raise error

        return AirtableResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=response_body,
        )

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AirtableTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # -- internals -----------------------------------------------------------

    def _build_url(self, path: str, qs: dict[str, Any]) -> str:
        url = f"{self._config.endpoint_url}/v{self._config.api_version_major}{path}"
        query = object_to_query_param_string(qs)
        return f"{url}?{query}" if query else url

    def _may_retry_rate_limit(self, attempt: int) -> bool:
        if self._config.no_retry_if_rate_limited:
            return False
        cap = self._config.retry_max_attempts
        return cap is None or attempt < cap

    async def _send(
        self,
        method: str,
        url: str,
        path: str,
        headers: dict[str, str],
        content: bytes | None,
        attempt: int,
    ) -> httpx.Response:
        """Send one attempt, translating transport failures."""
        request = self._client.build_request(method, url, headers=headers, content=content)
        t0 = time.monotonic()
        try:
            # wait_for cancels the send and disposes of its timer on every
            # exit path.
            response = await asyncio.wait_for(
                self._client.send(request),
                timeout=self._config.request_timeout,
            )
        except (httpx.TransportError, asyncio.TimeoutError) as exc:
            self._metrics.increment(
                "airtablify.requests_total",
                tags={"method": method, "status": "error"},
            )
            reason = str(exc) or (
                f"Request timed out after {self._config.request_timeout}s"
            )
            log.warning(
                "Request network error",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "attempt": attempt + 1,
                        "error": reason,
                    }
                },
            )
            raise AirtablifyConnectionError(
                message=reason,
                context={"method": method, "path": path, "attempt": attempt + 1},
                cause=exc,
            ) from exc

        elapsed_ms = (time.monotonic() - t0) * 1000
        tags = {"method": method, "status": str(response.status_code)}
        self._metrics.increment("airtablify.requests_total", tags=tags)
        self._metrics.timing("airtablify.request_duration_ms", elapsed_ms, tags=tags)
        return response
