"""Unit tests for airtablify/query.py.

Covers:
- iter_pages offset chaining and laziness
- each_page continuation (sync and async callbacks, pause/resume)
- first_page / all, including the legacy done-callback form
- validate_params partitioning
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from hypothesis import given
from hypothesis import strategies as st

from airtablify.errors import AirtablifyUnexpectedError
from airtablify.query import Query

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

PAGES = {
    None: {"records": [{"id": "rec1", "fields": {"n": 1}}, {"id": "rec2", "fields": {"n": 2}}],
           "offset": "itrA"},
    "itrA": {"records": [{"id": "rec3", "fields": {"n": 3}}], "offset": "itrB"},
    "itrB": {"records": [{"id": "rec4", "fields": {"n": 4}}]},
}


class PagedHandler:
    """Serves ``PAGES`` keyed by the ``offset`` query parameter."""

    def __init__(self, pages: dict | None = None) -> None:
        self.pages = pages or PAGES
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        offset = request.url.params.get("offset")
        return httpx.Response(200, json=self.pages[offset])

    @property
    def offsets(self) -> list[str | None]:
        return [r.url.params.get("offset") for r in self.requests]


def make_table(make_airtable, handler):
    return make_airtable(handler).base("app123").table("Tasks")


def ids(records) -> list[str]:
    return [record.id for record in records]


# ---------------------------------------------------------------------------
# iter_pages
# ---------------------------------------------------------------------------

class TestIterPages:
    async def test_follows_offsets_until_exhausted(self, make_airtable):
        handler = PagedHandler()
        query = make_table(make_airtable, handler).select(pageSize=2)
        pages = [ids(page) async for page in query.iter_pages()]
        assert pages == [["rec1", "rec2"], ["rec3"], ["rec4"]]
        assert handler.offsets == [None, "itrA", "itrB"]
        assert all(r.url.params["pageSize"] == "2" for r in handler.requests)
        assert handler.requests[0].url.path == "/v0/app123/Tasks"

    async def test_nothing_sent_until_advanced(self, make_airtable):
        handler = PagedHandler()
        query = make_table(make_airtable, handler).select()
        pages = query.iter_pages()
        assert handler.requests == []
        first = await pages.__anext__()
        assert ids(first) == ["rec1", "rec2"]
        assert len(handler.requests) == 1
        await pages.aclose()
        assert len(handler.requests) == 1

    async def test_records_are_bound_to_table(self, make_airtable):
        table = make_table(make_airtable, PagedHandler())
        page = await table.select().first_page()
        assert page[0].table is table
        assert page[0].fields == {"n": 1}

    async def test_comment_count_from_record_metadata(self, make_airtable):
        handler = PagedHandler({None: {"records": [
            {"id": "rec1", "fields": {}, "commentCount": 3},
            {"id": "rec2", "fields": {}},
        ]}})
        query = make_table(make_airtable, handler).select(recordMetadata=["commentCount"])
        records = await query.first_page()
        assert [r.comment_count for r in records] == [3, None]
        assert handler.requests[0].url.params.get_list("recordMetadata[]") == ["commentCount"]

    async def test_record_iteration(self, make_airtable):
        query = make_table(make_airtable, PagedHandler()).select()
        assert [record.id async for record in query] == ["rec1", "rec2", "rec3", "rec4"]

    async def test_params_copied_at_construction(self, make_airtable):
        handler = PagedHandler()
        table = make_table(make_airtable, handler)
        params = {"view": "Grid view"}
        query = Query(table, params)
        params["view"] = "Other"
        await query.first_page()
        assert handler.requests[0].url.params["view"] == "Grid view"

    async def test_traversal_does_not_mutate_query_params(self, make_airtable):
        query = make_table(make_airtable, PagedHandler()).select()
        await query.all()
        assert query.params == {}

    async def test_error_stops_traversal(self, make_airtable):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if request.url.params.get("offset"):
                return httpx.Response(200, content=b"garbage")
            return httpx.Response(200, json=PAGES[None])

        query = make_table(make_airtable, handler).select()
        with pytest.raises(AirtablifyUnexpectedError):
            await query.all()
        assert len(calls) == 2


# ---------------------------------------------------------------------------
# each_page
# ---------------------------------------------------------------------------

class TestEachPage:
    async def test_sync_callback_with_immediate_continuation(self, make_airtable):
        seen = []

        def page_callback(records, fetch_next_page):
            seen.append(ids(records))
            fetch_next_page()

        query = make_table(make_airtable, PagedHandler()).select()
        await query.each_page(page_callback)
        assert seen == [["rec1", "rec2"], ["rec3"], ["rec4"]]

    async def test_async_callback(self, make_airtable):
        seen = []

        async def page_callback(records, fetch_next_page):
            await asyncio.sleep(0)
            seen.append(len(records))
            fetch_next_page()

        query = make_table(make_airtable, PagedHandler()).select()
        await query.each_page(page_callback)
        assert seen == [2, 1, 1]

    async def test_next_page_waits_for_continuation(self, make_airtable):
        handler = PagedHandler()
        continuations = []

        def page_callback(records, fetch_next_page):
            continuations.append(fetch_next_page)

        query = make_table(make_airtable, handler).select()
        traversal = asyncio.ensure_future(query.each_page(page_callback))

        for expected_requests in (1, 2, 3):
            while len(continuations) < expected_requests and not traversal.done():
                await asyncio.sleep(0)
            for _ in range(5):
                await asyncio.sleep(0)
            assert len(handler.requests) == expected_requests
            assert not traversal.done()
            continuations[-1]()

        await traversal
        assert handler.offsets == [None, "itrA", "itrB"]

    async def test_done_callback_receives_completion(self, make_airtable):
        outcome = []

        def page_callback(records, fetch_next_page):
            fetch_next_page()

        query = make_table(make_airtable, PagedHandler()).select()
        task = query.each_page(page_callback, lambda err, result: outcome.append((err, result)))
        await task
        assert outcome == [(None, None)]

    async def test_done_callback_receives_error(self, make_airtable):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": {"type": "NOT_FOUND", "message": "gone"}})

        outcome = []
        query = make_table(make_airtable, handler).select()
        page_callback_calls = []
        await query.each_page(
            lambda records, nxt: page_callback_calls.append(records),
            lambda err, result: outcome.append((err, result)),
        )
        assert page_callback_calls == []
        err, result = outcome[0]
        assert err.code == "NOT_FOUND"
        assert result is None

    def test_rejects_non_callable_arguments(self):
        query = Query(table=None, params={})
        with pytest.raises(TypeError, match="first parameter"):
            query.each_page("nope")
        with pytest.raises(TypeError, match="second parameter"):
            query.each_page(lambda r, n: None, "nope")


# ---------------------------------------------------------------------------
# first_page / all
# ---------------------------------------------------------------------------

class TestFirstPageAndAll:
    async def test_first_page_sends_one_request(self, make_airtable):
        handler = PagedHandler()
        records = await make_table(make_airtable, handler).select().first_page()
        assert ids(records) == ["rec1", "rec2"]
        assert len(handler.requests) == 1

    async def test_all_concatenates_pages_in_order(self, make_airtable):
        handler = PagedHandler()
        query = make_table(make_airtable, handler).select()
        pages = [ids(page) async for page in query.iter_pages()]
        everything = ids(await query.all())
        assert everything == [record_id for page in pages for record_id in page]

    async def test_single_page_without_offset(self, make_airtable):
        handler = PagedHandler({None: {"records": [
            {"id": "rec123", "fields": {"Name": "a"}},
            {"id": "rec456", "fields": {"Name": "b"}},
        ]}})
        query = make_table(make_airtable, handler).select()

        pages = []

        def page_callback(records, fetch_next_page):
            pages.append(ids(records))
            fetch_next_page()

        await query.each_page(page_callback)
        assert pages == [["rec123", "rec456"]]
        assert ids(await query.all()) == ["rec123", "rec456"]
        assert len(handler.requests) == 2

    async def test_empty_table(self, make_airtable):
        handler = PagedHandler({None: {"records": []}})
        query = make_table(make_airtable, handler).select()
        assert await query.all() == []
        assert await query.first_page() == []

    async def test_all_with_done_callback(self, make_airtable):
        outcome = []
        query = make_table(make_airtable, PagedHandler()).select()
        await query.all(lambda err, result: outcome.append((err, ids(result))))
        assert outcome == [(None, ["rec1", "rec2", "rec3", "rec4"])]

    async def test_rate_limited_page_is_retried_transparently(self, make_airtable, sleep_recorder):
        served = []

        def handler(request: httpx.Request) -> httpx.Response:
            served.append(request.url.params.get("offset"))
            if served == [None, "itrA"]:
                return httpx.Response(429, json={})
            return httpx.Response(200, json=PAGES[request.url.params.get("offset")])

        records = await make_table(make_airtable, handler).select().all()
        assert ids(records) == ["rec1", "rec2", "rec3", "rec4"]
        assert served == [None, "itrA", "itrA", "itrB"]
        assert sleep_recorder.delays == [7.5]


# ---------------------------------------------------------------------------
# validate_params
# ---------------------------------------------------------------------------

class TestValidateParams:
    def test_partitions_params(self):
        result = Query.validate_params({
            "fields": ["Name"],
            "pageSize": "ten",
            "unknownKey": 1,
            "sort": [{"field": "Name", "direction": "desc"}],
        })
        assert result.valid_params == {
            "fields": ["Name"],
            "sort": [{"field": "Name", "direction": "desc"}],
        }
        assert result.ignored_keys == ["unknownKey"]
        assert result.errors == ["the value for `pageSize` should be a number"]

    @pytest.mark.parametrize(
        "key, value",
        [
            ("fields", ["a", "b"]),
            ("filterByFormula", "{Done} = 1"),
            ("maxRecords", 10),
            ("pageSize", 100),
            ("offset", "itr123/rec456"),
            ("sort", [{"field": "Name"}]),
            ("view", "Grid view"),
            ("cellFormat", "string"),
            ("timeZone", "Europe/Paris"),
            ("userLocale", "fr"),
            ("returnFieldsByFieldId", True),
            ("recordMetadata", ["commentCount"]),
        ],
    )
    def test_accepts_valid_values(self, key, value):
        result = Query.validate_params({key: value})
        assert result.valid_params == {key: value}
        assert result.errors == []

    @pytest.mark.parametrize(
        "key, value",
        [
            ("fields", "Name"),
            ("fields", ["a", 1]),
            ("maxRecords", True),
            ("sort", [{"field": "Name", "direction": "up"}]),
            ("sort", [{"direction": "asc"}]),
            ("sort", {"field": "Name"}),
            ("cellFormat", "xml"),
            ("returnFieldsByFieldId", "yes"),
            ("offset", 5),
        ],
    )
    def test_rejects_invalid_values(self, key, value):
        result = Query.validate_params({key: value})
        assert result.valid_params == {}
        assert len(result.errors) == 1
        assert f"`{key}`" in result.errors[0]

    @given(
        st.dictionaries(
            st.sampled_from(["fields", "view", "pageSize", "bogus", "cellFormat"]),
            st.one_of(st.text(max_size=5), st.integers(), st.lists(st.text(max_size=3), max_size=3)),
        )
    )
    def test_valid_params_revalidate_cleanly(self, params):
        first = Query.validate_params(params)
        second = Query.validate_params(first.valid_params)
        assert second.valid_params == first.valid_params
        assert second.ignored_keys == []
        assert second.errors == []
        assert len(first.valid_params) + len(first.ignored_keys) + len(first.errors) == len(params)
