"""Client configuration for airtablify.

:class:`AirtablifyConfig` is a frozen dataclass that captures every
tuneable knob exposed by the client.  It is resolved once, when a client
is constructed, and never changes afterwards.

Values are resolved with the following priority:

1. Explicit keyword arguments to :meth:`AirtablifyConfig.resolve`.
2. Process-wide defaults registered with :func:`configure`.
3. Environment variables (``AIRTABLE_API_KEY``, ``AIRTABLE_ENDPOINT_URL``).
4. The dataclass defaults.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any

DEFAULT_ENDPOINT_URL = "https://api.airtable.com"
DEFAULT_API_VERSION = "0.1.0"
DEFAULT_REQUEST_TIMEOUT = 300.0  # 5 minutes

ENV_API_KEY = "AIRTABLE_API_KEY"
ENV_ENDPOINT_URL = "AIRTABLE_ENDPOINT_URL"

# Process-wide defaults set through ``configure``.  Only the keys below are
# accepted; anything else is a programming error.
_CONFIGURABLE_KEYS = frozenset({
    "api_key",
    "endpoint_url",
    "api_version",
    "no_retry_if_rate_limited",
})
_process_defaults: dict[str, Any] = {}

# Empty strings and a zero timeout count as "not given" for these keys.
_FALSY_MEANS_UNSET = frozenset({
    "api_key",
    "endpoint_url",
    "api_version",
    "request_timeout",
})


def _given(values: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value
        for key, value in values.items()
        if value is not None and (value or key not in _FALSY_MEANS_UNSET)
    }


def configure(**defaults: Any) -> None:
    """Register process-wide defaults used by every subsequently built client.

    Accepts ``api_key``, ``endpoint_url``, ``api_version`` and
    ``no_retry_if_rate_limited``.  Passing ``None`` for a key removes it.
    """
    unknown = set(defaults) - _CONFIGURABLE_KEYS
    if unknown:
        raise TypeError(f"configure() got unexpected keys: {sorted(unknown)}")
    for key, value in defaults.items():
        if value is None:
            _process_defaults.pop(key, None)
        else:
            _process_defaults[key] = value


def reset_defaults() -> None:
    """Forget every default registered with :func:`configure`."""
    _process_defaults.clear()


@dataclass(frozen=True)
class AirtablifyConfig:
    """Complete configuration for an airtablify client.

    Parameters
    ----------
    api_key:
        Airtable API key or personal access token.  **Required.**  Never
        logged.
    endpoint_url:
        API root URL.  Override for proxy or testing environments.
    api_version:
        API version string.  Only the major component (text before the
        first ``.``) is used, to build the ``/v{major}`` URL prefix.
    request_timeout:
        Seconds a single HTTP attempt may take before it is aborted.
    no_retry_if_rate_limited:
        Surface ``429`` responses immediately instead of backing off.
    retry_initial_delay:
        Backoff delay (seconds) before the first rate-limit retry.
    retry_max_delay:
        Cap (seconds) on the un-jittered backoff delay.
    retry_max_attempts:
        Maximum number of rate-limit retries per request.  ``None`` keeps
        retrying for as long as the server answers ``429``.
    metrics:
        Optional :class:`~airtablify.observability.MetricsHook`.
    debug_dump_payload:
        Write the (redacted) request and response to *stderr*.
    """

    api_key: str = ""

    endpoint_url: str = DEFAULT_ENDPOINT_URL

    api_version: str = DEFAULT_API_VERSION

    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    no_retry_if_rate_limited: bool = False

    # ── Retry ───────────────────────────────────────────────────────────
    retry_initial_delay: float = 5.0

    retry_max_delay: float = 600.0

    retry_max_attempts: int | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.api_key:
            raise ValueError("An API key is required to connect to Airtable")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.retry_initial_delay < 0:
            raise ValueError(f"retry_initial_delay must be >= 0, got {self.retry_initial_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.retry_max_attempts is not None and self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1 or None, got {self.retry_max_attempts}")
        # Endpoint is joined with "/v0/..." paths.
        object.__setattr__(self, "endpoint_url", self.endpoint_url.rstrip("/"))

    @property
    def api_version_major(self) -> str:
        return self.api_version.split(".")[0]

    @classmethod
    def resolve(cls, **explicit: Any) -> AirtablifyConfig:
        """Build a config from explicit values, process defaults and the environment.

        Explicit values of ``None`` fall through to the next source, as do
        empty or zero ``api_key``, ``endpoint_url``, ``api_version`` and
        ``request_timeout`` values (and ``False`` for
        ``no_retry_if_rate_limited``).
        """
        env: dict[str, Any] = {}
        if os.environ.get(ENV_API_KEY):
            env["api_key"] = os.environ[ENV_API_KEY]
        if os.environ.get(ENV_ENDPOINT_URL):
            env["endpoint_url"] = os.environ[ENV_ENDPOINT_URL]

        values: dict[str, Any] = {}
        for source in (env, _process_defaults, explicit):
            values.update(_given(source))

        # Retry opt-out is sticky: any source asking for it wins.
        values["no_retry_if_rate_limited"] = bool(
            explicit.get("no_retry_if_rate_limited")
            or _process_defaults.get("no_retry_if_rate_limited")
        )
        return cls(**values)

    def __repr__(self) -> str:
        """Mask the API key to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "api_key":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"api_key='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"AirtablifyConfig({', '.join(parts)})"
