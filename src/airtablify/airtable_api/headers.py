"""Case-insensitive request header accumulation."""

from __future__ import annotations

# Browsers refuse to let scripts set User-Agent, so callers used this
# alias instead.  It is folded back into the standard header.
USER_AGENT_ALIAS = "x-airtable-user-agent"


class HttpHeaders:
    """Ordered header mapping with case-insensitive, last-write-wins keys.

    The casing of the most recent ``set`` for a key is the one sent on the
    wire.
    """

    def __init__(self) -> None:
        self._headers_by_lowercased_key: dict[str, tuple[str, str]] = {}

    def set(self, key: str, value: str) -> None:
        lowercased = key.lower()
        if lowercased == USER_AGENT_ALIAS:
            lowercased = "user-agent"
            key = "User-Agent"
        self._headers_by_lowercased_key[lowercased] = (key, value)

    def get(self, key: str) -> str | None:
        entry = self._headers_by_lowercased_key.get(key.lower())
        return entry[1] if entry is not None else None

    def to_dict(self) -> dict[str, str]:
        return dict(self._headers_by_lowercased_key.values())


def build_request_headers(
    api_key: str,
    user_agent: str,
    extra: dict[str, str] | None = None,
) -> dict[str, str]:
    """Return the headers for one request.

    Authorization, User-Agent and Content-Type are always present; *extra*
    headers are applied afterwards and may override them.
    """
    headers = HttpHeaders()
    headers.set("Authorization", f"Bearer {api_key}")
    headers.set("User-Agent", user_agent)
    headers.set("Content-Type", "application/json")
    for key, value in (extra or {}).items():
        headers.set(key, str(value))
    return headers.to_dict()
