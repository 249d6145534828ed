"""Table handle: record lookup, listing and batch CRUD.

All methods return a coroutine (or a task when ``done=`` is given, see
:mod:`airtablify.callbacks`).  Single-record operations go through a
:class:`~airtablify.record.Record`; batch operations take a list and send
one request for the whole list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from airtablify.callbacks import DoneCallback, call_done_or_await, split_trailing_callback
from airtablify.models import AirtableResponse
from airtablify.observability import get_logger
from airtablify.query import Query
from airtablify.record import Record

if TYPE_CHECKING:
    from airtablify.base import Base

log = get_logger("airtablify.table")

RECORDS_PER_PAGE_FOR_ITERATION = 100


class Table:
    """A named table inside a :class:`~airtablify.base.Base`.

    Parameters
    ----------
    base:
        Owning base.
    table_id:
        Table id (``tbl...``).  Preferred over the name when both are given.
    table_name:
        Human-readable table name.
    """

    def __init__(
        self,
        base: Base,
        table_id: str | None = None,
        table_name: str | None = None,
    ) -> None:
        if not table_id and not table_name:
            raise ValueError("Table name or table ID is required")
        self._base = base
        self.id = table_id
        self.name = table_name

    @property
    def base(self) -> Base:
        return self._base

    @property
    def name_or_id(self) -> str:
        return self.id or self.name or ""

    def _url_encoded_name_or_id(self) -> str:
        return self.id or quote(self.name or "", safe="-_.!~*'()")

    def __repr__(self) -> str:
        return f"Table(base={self._base.get_id()!r}, name_or_id={self.name_or_id!r})"

    async def make_request(
        self,
        method: str = "GET",
        path: str = "",
        **kwargs: Any,
    ) -> AirtableResponse:
        """Send a request below this table's path (``/{base}/{table}{path}``)."""
        return await self._base.make_request(
            method=method,
            path=f"/{self._url_encoded_name_or_id()}{path}",
            **kwargs,
        )

    # -- reading ---------------------------------------------------------------

    def find(self, record_id: str, done: DoneCallback | None = None):
        """Fetch one record by id."""
        return Record(self, record_id).fetch(done)

    def select(self, params: dict[str, Any] | None = None, **kwargs: Any) -> Query:
        """Build a :class:`~airtablify.query.Query`; no request is sent yet.

        Parameters may be passed as a dict, as keyword arguments, or both,
        using the API's parameter names (``filterByFormula``, ``pageSize``,
        ``sort`` ...).

        Raises
        ------
        ValueError
            If any recognised parameter has an invalid value.
        """
        if params is not None and not isinstance(params, dict):
            raise TypeError("Table.select expects a dict of parameters")
        merged = {**(params or {}), **kwargs}

        validation = Query.validate_params(merged)
        if validation.errors:
            formatted = "\n".join(f"  * {error}" for error in validation.errors)
            raise ValueError(f"Airtable: invalid parameters for `select`:\n{formatted}")
        if validation.ignored_keys:
            log.warning(
                "Ignoring unknown parameters for select",
                extra={
                    "extra_fields": {
                        "op": "select",
                        "table": self.name_or_id,
                        "ignored_keys": validation.ignored_keys,
                    }
                },
            )
        return Query(self, validation.valid_params)

    # -- writing ---------------------------------------------------------------

    def create(
        self,
        records_data: dict[str, Any] | list[dict[str, Any]],
        *args: Any,
        done: DoneCallback | None = None,
    ):
        """Create one record (``fields`` dict) or many (list of ``{"fields": ...}``).

        An optional positional *opts* dict is merged into the body, e.g.
        ``{"typecast": True}``.  Resolves to a :class:`Record` or a list of
        them, in request order.
        """
        args, done = split_trailing_callback(args, done)
        opts = dict(args[0] or {}) if args else {}
        return call_done_or_await(self._create(records_data, opts), done)

    async def _create(
        self,
        records_data: dict[str, Any] | list[dict[str, Any]],
        opts: dict[str, Any],
    ) -> Record | list[Record]:
        if isinstance(records_data, list):
            response = await self.make_request(
                method="POST", body={"records": records_data, **opts},
            )
            return [
                Record(self, record_json["id"], record_json)
                for record_json in response.body.get("records", [])
            ]
        response = await self.make_request(
            method="POST", body={"fields": records_data, **opts},
        )
        return Record(self, response.body.get("id"), response.body)

    def update(self, target: str | list[dict[str, Any]], *args: Any, done: DoneCallback | None = None):
        """Partially update records (``PATCH``).

        Either ``update(record_id, fields[, opts])`` or
        ``update([{"id": ..., "fields": {...}}, ...][, opts])``.
        """
        return self._update_records("PATCH", target, args, done)

    def replace(self, target: str | list[dict[str, Any]], *args: Any, done: DoneCallback | None = None):
        """Fully replace records (``PUT``); same call shapes as :meth:`update`."""
        return self._update_records("PUT", target, args, done)

    def _update_records(
        self,
        method: str,
        target: str | list[dict[str, Any]],
        args: tuple[Any, ...],
        done: DoneCallback | None,
    ):
        args, done = split_trailing_callback(args, done)
        if isinstance(target, list):
            opts = dict(args[0] or {}) if args else {}
            return call_done_or_await(self._update_many(method, target, opts), done)

        if not args:
            raise TypeError("update of a single record requires a fields mapping")
        fields = args[0]
        opts = dict(args[1] or {}) if len(args) > 1 else {}
        record = Record(self, target)
        if method == "PUT":
            return record.put_update(fields, opts, done)
        return record.patch_update(fields, opts, done)

    async def _update_many(
        self,
        method: str,
        records: list[dict[str, Any]],
        opts: dict[str, Any],
    ) -> list[Record]:
        response = await self.make_request(method=method, body={"records": records, **opts})
        return [
            Record(self, record_json["id"], record_json)
            for record_json in response.body.get("records", [])
        ]

    def destroy(self, target: str | list[str], done: DoneCallback | None = None):
        """Delete one record id or a list of ids.

        Resolves to the deleted :class:`Record` (or a list of them in the
        order the server confirmed), each carrying the deleted id.
        """
        if isinstance(target, list):
            return call_done_or_await(self._destroy_many(target), done)
        return Record(self, target).destroy(done)

    async def _destroy_many(self, record_ids: list[str]) -> list[Record]:
        response = await self.make_request(method="DELETE", qs={"records": record_ids})
        return [
            Record(self, record_json["id"])
            for record_json in response.body.get("records", [])
        ]

    # -- deprecated ------------------------------------------------------------

    def list_records(
        self,
        page_size: int | None = None,
        offset: str | None = None,
        opts: dict[str, Any] | None = None,
        done: DoneCallback | None = None,
    ):
        """Fetch one page of records.  Deprecated; use :meth:`select`.

        Resolves to ``(records, next_offset)``.
        """
        self._base.deprecations.warn_once(
            "table.list_records",
            "Table.list_records is deprecated. Use Table.select instead.",
        )
        return call_done_or_await(self._list_records(page_size, offset, opts or {}), done)

    async def _list_records(
        self,
        page_size: int | None,
        offset: str | None,
        opts: dict[str, Any],
    ) -> tuple[list[Record], str | None]:
        qs = {"offset": offset, "pageSize": page_size, **opts}
        qs = {key: value for key, value in qs.items() if value is not None}
        response = await self.make_request(method="GET", qs=qs)
        records = [
            Record(self, None, record_json)
            for record_json in response.body.get("records", [])
        ]
        return records, response.body.get("offset")

    def for_each(self, callback, opts: dict[str, Any] | None = None, done: DoneCallback | None = None):
        """Call *callback* with every record.  Deprecated; use :meth:`select`."""
        self._base.deprecations.warn_once(
            "table.for_each",
            "Table.for_each is deprecated. Use Table.select instead.",
        )
        return call_done_or_await(self._for_each(callback, opts or {}), done)

    async def _for_each(self, callback, opts: dict[str, Any]) -> None:
        offset: str | None = None
        while True:
            records, offset = await self._list_records(
                RECORDS_PER_PAGE_FOR_ITERATION, offset, opts,
            )
            for record in records:
                callback(record)
            if not offset:
                return
