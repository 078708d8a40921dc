"""Integration tests for specification retrieval and parsing."""

from __future__ import annotations

import httpx
import pytest

from specwatch.errors import DocumentError, FetchError
from specwatch.sources.fetcher import SpecFetcher, load_document

pytestmark = pytest.mark.integration

_URL = "https://specs.example.com/openapi.yml"


class RecordingSleep:
    def __init__(self) -> None:
        self.waits: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


def _fetcher(handler, sleep: RecordingSleep) -> SpecFetcher:
    return SpecFetcher(transport=httpx.MockTransport(handler), sleep=sleep)


class TestFetch:
    async def test_success_on_first_attempt(self) -> None:
        sleep = RecordingSleep()
        fetcher = _fetcher(lambda request: httpx.Response(200, text="openapi: 3.1.0\n"), sleep)

        assert await fetcher.fetch(_URL) == "openapi: 3.1.0\n"
        assert sleep.waits == []

    async def test_retries_with_fixed_backoff(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, text="paths: {}\n")

        sleep = RecordingSleep()
        assert await _fetcher(handler, sleep).fetch(_URL) == "paths: {}\n"
        assert len(calls) == 3
        assert sleep.waits == [5.0, 30.0]

    async def test_gives_up_after_three_attempts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sleep = RecordingSleep()
        with pytest.raises(FetchError) as exc_info:
            await _fetcher(handler, sleep).fetch(_URL)

        assert exc_info.value.attempts == 3
        assert exc_info.value.url == _URL
        assert sleep.waits == [5.0, 30.0]

    async def test_redirects_are_followed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/latest":
                return httpx.Response(302, headers={"Location": "https://specs.example.com/v2.yml"})
            return httpx.Response(200, text="v2")

        assert await _fetcher(handler, RecordingSleep()).fetch("https://specs.example.com/latest") == "v2"


class TestLoadDocument:
    def test_json_by_extension(self) -> None:
        assert load_document('{"paths": {}}', "openapi.json") == {"paths": {}}

    def test_yaml_keeps_dates_as_strings(self) -> None:
        document = load_document("info:\n  version: 2024-06-01\n  released: 2024-06-01T10:00:00Z\n", "openapi.yml")
        assert document == {"info": {"version": "2024-06-01", "released": "2024-06-01T10:00:00Z"}}

    def test_yaml_still_resolves_other_scalars(self) -> None:
        assert load_document("a: 1\nb: true\nc: null\n", "spec.yaml") == {"a": 1, "b": True, "c": None}

    def test_unparseable_document(self) -> None:
        with pytest.raises(DocumentError):
            load_document("{not json", "openapi.json")
        with pytest.raises(DocumentError):
            load_document("paths: [unclosed", "openapi.yml")
