"""Public data models for the airtablify client.

Plain dataclasses with no behaviour beyond structural equality.  The
:class:`~airtablify.record.Record` entity lives in its own module because
it carries network operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass(frozen=True)
class AirtableResponse:
    """A successful, classified API response.

    Attributes
    ----------
    status_code:
        HTTP status (always below 400).
    headers:
        Response headers.
    body:
        Decoded JSON body.  Always a ``dict``; any other shape is rejected
        by the transport before an instance is built.
    """

    status_code: int
    headers: httpx.Headers
    body: dict[str, Any]


@dataclass
class ParamValidationResult:
    """Outcome of :meth:`Query.validate_params`.

    Attributes
    ----------
    valid_params:
        Recognised keys whose values passed validation.
    ignored_keys:
        Keys with no validator.  Tolerated for forward compatibility.
    errors:
        One message per recognised key whose value failed validation.
    """

    valid_params: dict[str, Any] = field(default_factory=dict)
    ignored_keys: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
