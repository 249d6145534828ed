"""Validators for the parameters accepted by ``Table.select``.

Each validator takes a value and returns ``None`` when it is acceptable,
or the error message to report otherwise.  Keys are the API's own
parameter names.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Validator = Callable[[Any], "str | None"]

SORT_DIRECTIONS = ("asc", "desc")
CELL_FORMATS = ("json", "string")


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def _is_list_of(item_check: Callable[[Any], bool]) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, list) and all(item_check(item) for item in value)

    return check


def _is_one_of(options: tuple[str, ...]) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return value in options

    return check


def _is_sort_object(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_string(value.get("field"))
        and value.get("direction", "asc") in SORT_DIRECTIONS
    )


def check(predicate: Callable[[Any], bool], error: str) -> Validator:
    """Turn a predicate into a validator reporting *error* on failure."""

    def validate(value: Any) -> str | None:
        return None if predicate(value) else error

    return validate


PARAM_VALIDATORS: dict[str, Validator] = {
    "fields": check(
        _is_list_of(_is_string),
        "the value for `fields` should be an array of strings",
    ),
    "filterByFormula": check(
        _is_string,
        "the value for `filterByFormula` should be a string",
    ),
    "maxRecords": check(
        _is_number,
        "the value for `maxRecords` should be a number",
    ),
    "pageSize": check(
        _is_number,
        "the value for `pageSize` should be a number",
    ),
    "offset": check(
        _is_string,
        "the value for `offset` should be a string",
    ),
    "sort": check(
        _is_list_of(_is_sort_object),
        "the value for `sort` should be an array of sort objects. "
        "Each sort object must have a string `field` value, and an optional "
        '`direction` value that is "asc" or "desc".',
    ),
    "view": check(
        _is_string,
        "the value for `view` should be a string",
    ),
    "cellFormat": check(
        _is_one_of(CELL_FORMATS),
        'the value for `cellFormat` should be "json" or "string"',
    ),
    "timeZone": check(
        _is_string,
        "the value for `timeZone` should be a string",
    ),
    "userLocale": check(
        _is_string,
        "the value for `userLocale` should be a string",
    ),
    "returnFieldsByFieldId": check(
        _is_boolean,
        "the value for `returnFieldsByFieldId` should be a boolean",
    ),
    "recordMetadata": check(
        _is_list_of(_is_string),
        "the value for `recordMetadata` should be an array of strings",
    ),
}
