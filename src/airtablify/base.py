"""Base handle: a container of tables addressed by its id."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from airtablify.callbacks import DoneCallback, call_done_or_await
from airtablify.deprecate import DeprecationRegistry
from airtablify.models import AirtableResponse
from airtablify.table import Table

if TYPE_CHECKING:
    from airtablify.client import Airtable


class Base:
    """One Airtable base.

    Obtain instances through :meth:`Airtable.base`; get tables with
    :meth:`table`.
    """

    def __init__(self, airtable: Airtable, base_id: str) -> None:
        if not base_id:
            raise ValueError("A base id is required")
        self._airtable = airtable
        self._id = base_id

    def get_id(self) -> str:
        return self._id

    @property
    def id(self) -> str:
        return self._id

    @property
    def deprecations(self) -> DeprecationRegistry:
        return self._airtable.deprecations

    def table(self, table_name: str) -> Table:
        """Return a handle for the table with this name."""
        return Table(self, table_name=table_name)

    async def make_request(
        self,
        method: str = "GET",
        path: str = "/",
        **kwargs: Any,
    ) -> AirtableResponse:
        """Send a request below this base's path (``/{base_id}{path}``)."""
        return await self._airtable.make_request(
            method=method,
            path=f"/{self._id}{path}",
            **kwargs,
        )

    def run_action(
        self,
        method: str,
        path: str,
        qs: dict[str, Any] | None,
        body: Any,
        done: DoneCallback,
    ):
        """Callback-only request helper.  Deprecated; use :meth:`make_request`.

        *done* receives ``(error, response)``.  A ``None`` *body* sends no
        body at all.
        """
        self.deprecations.warn_once(
            "base.run_action",
            "Base.run_action is deprecated. Use Base.make_request instead.",
        )
        kwargs: dict[str, Any] = {
            "qs": qs,
            "headers": {"x-airtable-application-id": self._id},
        }
        if body is not None:
            kwargs["body"] = body

        return call_done_or_await(self.make_request(method=method, path=path, **kwargs), done)

    def __repr__(self) -> str:
        return f"Base(id={self._id!r})"
