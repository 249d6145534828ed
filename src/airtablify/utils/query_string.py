"""Bracket-notation query-string encoding.

Nested mappings and sequences are flattened the way jQuery's ``$.param``
does it, which is what the API expects::

    >>> object_to_query_param_string({"sort": [{"field": "Name"}]})
    'sort%5B0%5D%5Bfield%5D=Name'
    >>> object_to_query_param_string({"records": ["rec1", "rec2"]})
    'records%5B%5D=rec1&records%5B%5D=rec2'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

# Characters left alone by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _scalar_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _build_params(prefix: str, obj: Any, add: Callable[[str, Any], None]) -> None:
    if isinstance(obj, (list, tuple)):
        for index, value in enumerate(obj):
            if prefix.endswith("[]"):
                add(prefix, value)
            else:
                # Only non-scalar items keep their numeric index.
                is_nested = isinstance(value, (Mapping, list, tuple))
                _build_params(f"{prefix}[{index if is_nested else ''}]", value, add)
    elif isinstance(obj, Mapping):
        for key, value in obj.items():
            _build_params(f"{prefix}[{key}]", value, add)
    else:
        add(prefix, obj)


def object_to_query_param_string(obj: Mapping[str, Any]) -> str:
    """Serialize *obj* into a query string (without the leading ``?``).

    ``None`` values become empty strings and spaces are encoded as ``+``.
    """
    parts: list[str] = []

    def add(key: str, value: Any) -> None:
        parts.append(f"{_encode_component(key)}={_encode_component(_scalar_to_str(value))}")

    for key, value in obj.items():
        _build_params(key, value, add)

    return "&".join(parts).replace("%20", "+")
