"""Lazy, paginated record queries.

A :class:`Query` does nothing until one of its access methods is used:

* :meth:`Query.iter_pages` -- async iterator over pages (the primitive).
* :meth:`Query.each_page` -- callback per page with an explicit
  ``fetch_next_page`` continuation.
* :meth:`Query.first_page` -- records of the first page only.
* :meth:`Query.all` -- every record across all pages, in server order.

Pages are always fetched strictly one after another: the request for page
``N + 1`` is not sent before page ``N`` has been classified and handed to
the caller.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING, Any

from airtablify.callbacks import DoneCallback, call_done_or_await
from airtablify.models import ParamValidationResult
from airtablify.observability import get_logger
from airtablify.query_params import PARAM_VALIDATORS
from airtablify.record import Record

if TYPE_CHECKING:
    from airtablify.table import Table

log = get_logger("airtablify.query")

PageCallback = Callable[[list[Record], Callable[[], None]], Any]


class Query:
    """A record listing against one table with a fixed parameter set.

    Parameters
    ----------
    table:
        The table to list.
    params:
        Query parameters, normally the ``valid_params`` of
        :meth:`validate_params`.
    """

    def __init__(self, table: Table, params: dict[str, Any] | None = None) -> None:
        self._table = table
        self._params: dict[str, Any] = dict(params or {})

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    # -- the primitive ---------------------------------------------------------

    def iter_pages(self) -> AsyncIterator[list[Record]]:
        """Iterate over pages of records.

        The parameter set is copied when this method is called, so later
        changes to the caller's dict do not affect the traversal.  The next
        page is only requested when the iterator is advanced.
        """
        return self._iter_pages(dict(self._params))

    async def _iter_pages(self, params: dict[str, Any]) -> AsyncIterator[list[Record]]:
        page_number = 0
        while True:
            response = await self._table.make_request(method="GET", qs=params)
            body = response.body
            records = [
                Record(self._table, None, record_json)
                for record_json in body.get("records", [])
            ]
            offset = body.get("offset")
            page_number += 1
            log.debug(
                "Fetched page",
                extra={
                    "extra_fields": {
                        "op": "query",
                        "table": self._table.name_or_id,
                        "page": page_number,
                        "records": len(records),
                        "has_more": bool(offset),
                    }
                },
            )
            yield records
            if not offset:
                return
            params["offset"] = offset

    async def __aiter__(self) -> AsyncIterator[Record]:
        """Iterate over individual records across every page."""
        async for records in self.iter_pages():
            for record in records:
                yield record

    # -- access modes ----------------------------------------------------------

    def each_page(self, page_callback: PageCallback, done: DoneCallback | None = None):
        """Call ``page_callback(records, fetch_next_page)`` for every page.

        Nothing further is fetched until the callback (or anything it hands
        the continuation to) calls ``fetch_next_page()``.  Calling it after
        the last page completes the traversal.  The callback may be a plain
        function or a coroutine function.

        If the continuation is never called the traversal never completes.
        """
        if not callable(page_callback):
            raise TypeError("The first parameter to `each_page` must be a function")
        if done is not None and not callable(done):
            raise TypeError("The second parameter to `each_page` must be a function or None")
        return call_done_or_await(self._each_page(page_callback), done)

    async def _each_page(self, page_callback: PageCallback) -> None:
        pages = self.iter_pages()
        try:
            async for records in pages:
                advance = asyncio.Event()
                result = page_callback(records, advance.set)
                if inspect.isawaitable(result):
                    await result
                await advance.wait()
        finally:
            await pages.aclose()

    def first_page(self, done: DoneCallback | None = None):
        """Fetch exactly one page and return its records."""
        return call_done_or_await(self._first_page(), done)

    async def _first_page(self) -> list[Record]:
        pages = self.iter_pages()
        try:
            async for records in pages:
                return records
            return []
        finally:
            await pages.aclose()

    def all(self, done: DoneCallback | None = None):
        """Fetch every page and return all records in server order."""
        return call_done_or_await(self._all(), done)

    async def _all(self) -> list[Record]:
        all_records: list[Record] = []
        async for records in self.iter_pages():
            all_records.extend(records)
        return all_records

    # -- validation ------------------------------------------------------------

    @staticmethod
    def validate_params(params: dict[str, Any]) -> ParamValidationResult:
        """Partition *params* into valid values, ignored keys and errors.

        Never raises.  Unknown keys are reported in ``ignored_keys`` rather
        than rejected so that newer API parameters do not break callers.
        """
        result = ParamValidationResult()
        for key, value in params.items():
            validator = PARAM_VALIDATORS.get(key)
            if validator is None:
                result.ignored_keys.append(key)
                continue
            error = validator(value)
            if error is None:
                result.valid_params[key] = value
            else:
                result.errors.append(error)
        return result
