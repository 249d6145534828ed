"""Mapping of HTTP responses onto the airtablify error taxonomy.

:func:`classify` is pure: given a status code and an already decoded body
it returns the error to raise, or ``None`` when the response is a usable
success.  Decoding happens in :func:`parse_body`, which never raises and
instead returns the :data:`INVALID_JSON` sentinel.
"""

from __future__ import annotations

import json
from typing import Any

from airtablify.errors import (
    AirtablifyAuthError,
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


# Returned by ``parse_body`` for bodies that are not valid JSON.
INVALID_JSON: Any = object()

INVALID_JSON_MESSAGE = "The response from Airtable was invalid JSON. Please try again soon."


def parse_body(content: bytes) -> Any:
    """Decode a response body, returning :data:`INVALID_JSON` on failure."""
    try:
        return json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return INVALID_JSON


def is_plain_object(value: Any) -> bool:
    """Return ``True`` only for JSON objects.

    Lists, scalars, ``None`` and :data:`INVALID_JSON` are all rejected.
    """
    return isinstance(value, dict)


def _embedded_error(body: dict[str, Any]) -> tuple[str | None, str | None]:
    """Return ``(type, message)`` from ``body["error"]`` when present."""
    error = body.get("error")
    if not isinstance(error, dict):
        return None, None
    err_type = error.get("type")
    err_message = error.get("message")
    return (
        err_type if isinstance(err_type, str) else None,
        err_message if isinstance(err_message, str) else None,
    )


def classify(
    status_code: int,
    body: Any,
    context: dict[str, Any] | None = None,
) -> AirtablifyError | None:
    """Classify a response into an :class:`AirtablifyError`, or ``None``.

    A body that is not a JSON object always yields ``UNEXPECTED_ERROR``,
    whatever the status.  Otherwise statuses below 400 are successes and
    the rest are mapped by exact status code, with unmapped codes using
    the type and message embedded in the body when the server sent them.

    *context* is attached to the returned error unchanged.
    """
    if not is_plain_object(body):
        return AirtablifyUnexpectedError(
            INVALID_JSON_MESSAGE, status_code=status_code, context=context,
        )

    if status_code < 400:
        return None

    err_type, err_message = _embedded_error(body)

    if status_code == 401:
        return AirtablifyAuthError(
            "You should provide valid api key to perform this operation",
            status_code=status_code,
            context=context,
        )
    if status_code == 403:
        return AirtablifyPermissionError(
            "You are not authorized to perform this operation",
            status_code=status_code,
            context=context,
        )
    if status_code == 404:
        return AirtablifyNotFoundError(
            err_message or "Could not find what you are looking for",
            status_code=status_code,
            context=context,
        )
    if status_code == 413:
        return AirtablifyRequestTooLargeError(
            "Request body is too large",
            status_code=status_code,
            context=context,
        )
    if status_code == 422:
        return AirtablifyUnprocessableError(
            err_message or "The operation cannot be processed",
            status_code=status_code,
            context=context,
            code=err_type or ErrorCode.UNPROCESSABLE_ENTITY,
        )
    if status_code == 429:
        return AirtablifyRateLimitError(
            "You have made too many requests in a short period of time. "
            "Please retry your request later",
            status_code=status_code,
            context=context,
        )
    if status_code == 500:
        return AirtablifyServerError(
            "Try again. If the problem persists, contact support.",
            status_code=status_code,
            context=context,
        )
    if status_code == 503:
        return AirtablifyServiceUnavailableError(
            "The service is temporarily unavailable. Please retry shortly.",
            status_code=status_code,
            context=context,
        )

    return AirtablifyUnexpectedError(
        err_message or "An unexpected error occurred",
        status_code=status_code,
        context=context,
        code=err_type or ErrorCode.UNEXPECTED_ERROR,
    )
