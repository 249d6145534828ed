"""airtablify -- asyncio client for the Airtable REST API.

Public re-exports
-----------------

* **Client:** :class:`Airtable`, plus :class:`Base`, :class:`Table`,
  :class:`Record` and :class:`Query`
* **Configuration:** :class:`AirtablifyConfig`, :func:`configure`
* **Errors:** Every :class:`AirtablifyError` subclass and :class:`ErrorCode`
* **Models:** :class:`AirtableResponse`, :class:`ParamValidationResult`

Usage::

    from airtablify import Airtable

    airtable = Airtable(api_key="pat_xxx")
    record = await airtable.base("appXXX").table("Tasks").find("recYYY")
"""

from __future__ import annotations

from airtablify._version import __version__
from airtablify.base import Base

# ── Client ─────────────────────────────────────────────────────────────
from airtablify.client import Airtable

# ── Configuration ───────────────────────────────────────────────────────
from airtablify.config import AirtablifyConfig, configure, reset_defaults
from airtablify.deprecate import DeprecationRegistry

# ── Errors ──────────────────────────────────────────────────────────────
from airtablify.errors import (
    AirtablifyAuthError,
    AirtablifyConnectionError,
    AirtablifyError,
    AirtablifyNotFoundError,
    AirtablifyPermissionError,
    AirtablifyRateLimitError,
    AirtablifyRequestTooLargeError,
    AirtablifyServerError,
    AirtablifyServiceUnavailableError,
    AirtablifyUnexpectedError,
    AirtablifyUnprocessableError,
    ErrorCode,
)

# ── Models ──────────────────────────────────────────────────────────────
from airtablify.models import AirtableResponse, ParamValidationResult
from airtablify.query import Query
from airtablify.record import Record
from airtablify.table import Table

__all__ = [
    "AirtableResponse",
    "Airtable",
    "AirtablifyAuthError",
    "AirtablifyConfig",
    "AirtablifyConnectionError",
    "AirtablifyError",
    "AirtablifyNotFoundError",
    "AirtablifyPermissionError",
    "AirtablifyRateLimitError",
    "AirtablifyRequestTooLargeError",
    "AirtablifyServerError",
    "AirtablifyServiceUnavailableError",
    "AirtablifyUnexpectedError",
    "AirtablifyUnprocessableError",
    "Base",
    "DeprecationRegistry",
    "ErrorCode",
    "ParamValidationResult",
    "Query",
    "Record",
    "Table",
    "__version__",
    "configure",
    "reset_defaults",
]
