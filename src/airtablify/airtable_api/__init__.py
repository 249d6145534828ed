"""airtablify.airtable_api -- Airtable API transport and its building blocks.

This sub-package provides:

* :mod:`.retries` -- Exponential backoff with jitter for ``429`` retries.
* :mod:`.classify` -- Response body decoding and status classification.
* :mod:`.headers` -- Case-insensitive request header construction.
* :mod:`.transport` -- Async HTTP transport (the request executor).
"""

from __future__ import annotations

from .classify import INVALID_JSON, classify, is_plain_object, parse_body
from .headers import HttpHeaders, build_request_headers
from .retries import exponential_backoff_with_jitter
from .transport import USER_AGENT, AirtableTransport

__all__ = [
    "INVALID_JSON",
    "USER_AGENT",
    "AirtableTransport",
    "HttpHeaders",
    "build_request_headers",
    "classify",
    "exponential_backoff_with_jitter",
    "is_plain_object",
    "parse_body",
]
