"""Full error hierarchy for the airtablify client.

Every public error class inherits from AirtablifyError. Each carries a
machine-readable ``code`` (normally a member of :class:`ErrorCode`, or a
type string supplied by the server), a human-readable ``message``, the
HTTP ``status_code`` when one applies, an optional structured ``context``
dict, and an optional ``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the client can raise."""

    CONNECTION_ERROR = "CONNECTION_ERROR"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    UNPROCESSABLE_ENTITY = "UNPROCESSABLE_ENTITY"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    SERVER_ERROR = "SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class AirtablifyError(Exception):
    """Base exception for all airtablify errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode`, or the error type string the
        server embedded in its response body.
    message:
        A developer-friendly description of what went wrong.
    status_code:
        HTTP status of the response that produced the error, or ``None``
        when no response was received.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code.value if isinstance(code, ErrorCode) else code
        self.message: str = message
        self.status_code: int | None = status_code
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        status = f"[Http code {self.status_code}]" if self.status_code else ""
        return f"{self.message}({self.code}){status}"

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return (
            f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, "
            f"status_code={self.status_code!r}{ctx})"
        )


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------

class AirtablifyConnectionError(AirtablifyError):
    """The server could not be reached, or the request timed out.

    Context keys: ``method``, ``path``, ``attempt``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONNECTION_ERROR,
            message=message,
            status_code=None,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# HTTP status errors
# ---------------------------------------------------------------------------

class _StatusError(AirtablifyError):
    """Shared constructor for errors bound to a fixed :class:`ErrorCode`."""

    default_code: ErrorCode = ErrorCode.UNEXPECTED_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(
            code=code or self.default_code,
            message=message,
            status_code=status_code,
            context=context,
        )


class AirtablifyAuthError(_StatusError):
    """The API returned 401 -- the API key is missing or invalid."""

    default_code = ErrorCode.AUTHENTICATION_REQUIRED


class AirtablifyPermissionError(_StatusError):
    """The API returned 403 -- the key lacks access to the resource."""

    default_code = ErrorCode.NOT_AUTHORIZED


class AirtablifyNotFoundError(_StatusError):
    """The API returned 404 -- the base, table or record does not exist."""

    default_code = ErrorCode.NOT_FOUND


class AirtablifyRequestTooLargeError(_StatusError):
    """The API returned 413."""

    default_code = ErrorCode.REQUEST_TOO_LARGE


class AirtablifyUnprocessableError(_StatusError):
    """The API returned 422.

    ``code`` is the error type the server reported (for example
    ``INVALID_VALUE_FOR_COLUMN``) and falls back to
    ``UNPROCESSABLE_ENTITY``.
    """

    default_code = ErrorCode.UNPROCESSABLE_ENTITY


class AirtablifyRateLimitError(_StatusError):
    """The API returned 429 and the request was not (or no longer) retried.

    Context keys: ``attempts``.
    """

    default_code = ErrorCode.TOO_MANY_REQUESTS


class AirtablifyServerError(_StatusError):
    """The API returned 500."""

    default_code = ErrorCode.SERVER_ERROR


class AirtablifyServiceUnavailableError(_StatusError):
    """The API returned 503."""

    default_code = ErrorCode.SERVICE_UNAVAILABLE


class AirtablifyUnexpectedError(_StatusError):
    """Any other failure, including responses whose body is not a JSON object."""

    default_code = ErrorCode.UNEXPECTED_ERROR
