"""API-key redaction for safe debug output.

Before a request or response is written to logs or debug dumps the
:func:`redact` function must be applied.  It enforces the following rules:

* Values under **sensitive keys** (``authorization``, ``api_key``,
  ``token`` ...) are masked, keeping only the last four characters of the
  API key when it appears in them.
* The full **API key is never present** in the output, wherever it was
  embedded.
* ``Bearer <token>`` fragments in any string are masked.
"""

from __future__ import annotations

import copy
import re
from typing import Any

# Substrings: if any of these appear in a key name (case-insensitive), the
# value is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "authorization",
    "api_key",
    "api-key",
    "apikey",
    "token",
    "secret",
    "password",
    "cookie",
})

_BEARER_RE = re.compile(r"(Bearer\s+)\S+")


def _mask_api_key(value: str, api_key: str | None) -> str:
    """Replace the API key and bearer tokens with safe placeholders."""
    if api_key and api_key in value:
        suffix = api_key[-4:] if len(api_key) >= 4 else "****"
        placeholder = f"<redacted:...{suffix}>"
        if api_key in placeholder:
            placeholder = "<redacted>"
        value = value.replace(api_key, placeholder)
    return _BEARER_RE.sub(lambda m: f"{m.group(1)}<redacted>", value)


def _redact_value(value: Any, api_key: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, api_key)
    if isinstance(value, list):
        return [_redact_value(item, api_key) for item in value]
    if isinstance(value, str):
        return _mask_api_key(value, api_key)
    return value


def _redact_dict(d: dict, api_key: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            if isinstance(value, str):
                masked = _mask_api_key(value, api_key)
                result[key] = masked if masked != value else "<redacted>"
            else:
                result[key] = "<redacted>"
        else:
            result[key] = _redact_value(value, api_key)
    return result


def redact(payload: dict, api_key: str | None = None) -> dict:
    """Return a deep copy of *payload* with credentials removed.

    Parameters
    ----------
    payload:
        The dictionary to sanitize (a request dump, header mapping or
        response body).
    api_key:
        The configured API key.  Any occurrence of this exact string
        anywhere in the payload is replaced.

    Returns
    -------
    dict
        A new dictionary.  The original *payload* is never mutated.

    Examples
    --------
    >>> redact({"Authorization": "Bearer keyABC123"})
    {'Authorization': 'Bearer <redacted>'}
    """
    safe = copy.deepcopy(payload)
    return _redact_dict(safe, api_key)
