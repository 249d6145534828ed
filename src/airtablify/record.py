"""The :class:`Record` entity: one row of a table.

Each network operation (:meth:`Record.fetch`, :meth:`Record.save`,
:meth:`Record.patch_update`, :meth:`Record.put_update`,
:meth:`Record.destroy`) issues exactly one logical request through the
owning table; rate-limit retries happen inside the transport and are not
visible here.  Every operation returns a coroutine, or, when ``done=`` is
passed, a task that reports to the callback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from airtablify.callbacks import DoneCallback, call_done_or_await

if TYPE_CHECKING:
    from airtablify.table import Table


def _split_update_args(
    opts: dict[str, Any] | DoneCallback | None,
    done: DoneCallback | None,
) -> tuple[dict[str, Any], DoneCallback | None]:
    """Allow ``update(fields, done)`` as well as ``update(fields, opts, done)``."""
    if callable(opts) and done is None:
        return {}, opts
    return dict(opts or {}), done


class Record:
    """A row identified by ``id`` with a mapping of field name to value.

    Parameters
    ----------
    table:
        The :class:`~airtablify.table.Table` the record belongs to.
    record_id:
        Record identifier (``rec...``).  Falls back to ``record_json["id"]``.
    record_json:
        Raw record payload from the API.  Its ``fields`` become
        :attr:`fields`; without it the record starts with no fields.
    """

    def __init__(
        self,
        table: Table,
        record_id: str | None = None,
        record_json: dict[str, Any] | None = None,
    ) -> None:
        self._table = table
        self._id = record_id or (record_json or {}).get("id")
        self._raw_json: dict[str, Any] | None = None
        self.fields: dict[str, Any] = {}
        self.set_raw_json(record_json)

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def table(self) -> Table:
        return self._table

    @property
    def raw_json(self) -> dict[str, Any] | None:
        return self._raw_json

    @property
    def comment_count(self) -> int | None:
        """Present when the query asked for ``recordMetadata=["commentCount"]``."""
        return (self._raw_json or {}).get("commentCount")

    def get_id(self) -> str | None:
        return self._id

    def get(self, field_name: str) -> Any:
        return self.fields.get(field_name)

    def set(self, field_name: str, value: Any) -> None:
        self.fields[field_name] = value

    def set_raw_json(self, raw_json: dict[str, Any] | None) -> None:
        """Replace the whole local state with a server payload."""
        self._raw_json = raw_json
        self.fields = (raw_json or {}).get("fields") or {}

    def __repr__(self) -> str:
        return f"Record(id={self._id!r}, fields={self.fields!r})"

    # -- network operations ------------------------------------------------

    def _path(self) -> str:
        if not self._id:
            raise ValueError("Record has no id; create it through Table.create first")
        return f"/{self._id}"

    def fetch(self, done: DoneCallback | None = None):
        """Reload the record from the server, replacing :attr:`fields`."""
        return call_done_or_await(self._fetch(), done)

    async def _fetch(self) -> Record:
        response = await self._table.make_request(method="GET", path=self._path())
        self.set_raw_json(response.body)
        return self

    def save(self, done: DoneCallback | None = None):
        """Persist the current :attr:`fields` with a full (``PUT``) update."""
        return call_done_or_await(self._update("PUT", self.fields, {}), done)

    def patch_update(
        self,
        fields: dict[str, Any],
        opts: dict[str, Any] | DoneCallback | None = None,
        done: DoneCallback | None = None,
    ):
        """Update only the given fields (``PATCH``).

        *opts* are merged into the request body, e.g. ``{"typecast": True}``.
        On success :attr:`fields` holds the server's view of the record.
        """
        opts, done = _split_update_args(opts, done)
        return call_done_or_await(self._update("PATCH", fields, opts), done)

    def put_update(
        self,
        fields: dict[str, Any],
        opts: dict[str, Any] | DoneCallback | None = None,
        done: DoneCallback | None = None,
    ):
        """Replace every field of the record (``PUT``); omitted fields are cleared."""
        opts, done = _split_update_args(opts, done)
        return call_done_or_await(self._update("PUT", fields, opts), done)

    update_fields = patch_update
    replace_fields = put_update

    async def _update(self, method: str, fields: dict[str, Any], opts: dict[str, Any]) -> Record:
        body = {"fields": fields, **opts}
        response = await self._table.make_request(method=method, path=self._path(), body=body)
        self.set_raw_json(response.body)
        return self

    def destroy(self, done: DoneCallback | None = None):
        """Delete the record.  Resolves to this record, whose id is the one deleted."""
        return call_done_or_await(self._destroy(), done)

    async def _destroy(self) -> Record:
        await self._table.make_request(method="DELETE", path=self._path())
        return self
