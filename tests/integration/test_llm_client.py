"""Integration tests for the generation client over a mocked HTTP transport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from specwatch.errors import ContextWindowExceededError, GenerationError
from specwatch.llm.client import GenerationClient
from specwatch.llm.schema import CHANGE_SCHEMA, SCHEMA_NAME
from specwatch.models.config import LLMConfig

pytestmark = pytest.mark.integration

_REPLY = {"changes": [], "summary": "nothing to report"}


def _completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class Recorder:
    """MockTransport handler replaying responses and recording request bodies."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def body(self, index: int) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


def _client(recorder: Recorder, **overrides: Any) -> GenerationClient:
    config = LLMConfig(endpoint="http://llm.test", model="test-model", api_key="secret", **overrides)
    return GenerationClient(config, transport=httpx.MockTransport(recorder))


class TestGenerate:
    async def test_structured_reply_is_parsed(self) -> None:
        recorder = Recorder(_completion(json.dumps(_REPLY)))
        async with _client(recorder) as client:
            assert await client.generate("classify this", CHANGE_SCHEMA) == _REPLY

        request = recorder.requests[0]
        assert request.url == "http://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer secret"
        body = recorder.body(0)
        assert body["model"] == "test-model"
        assert body["messages"][1] == {"role": "user", "content": "classify this"}
        assert body["response_format"]["json_schema"]["name"] == SCHEMA_NAME
        assert body["response_format"]["json_schema"]["schema"] == CHANGE_SCHEMA

    async def test_malformed_reply_is_retried_with_correction(self) -> None:
        recorder = Recorder(_completion("Sure! Here you go: {"), _completion(json.dumps(_REPLY)))
        async with _client(recorder) as client:
            assert await client.generate("classify this", CHANGE_SCHEMA) == _REPLY

        retry_messages = recorder.body(1)["messages"]
        assert retry_messages[2] == {"role": "assistant", "content": "Sure! Here you go: {"}
        assert retry_messages[3]["content"].startswith("Your previous response was not valid JSON.")

    async def test_persistently_malformed_reply_fails(self) -> None:
        recorder = Recorder(_completion("[1, 2]"), _completion("still not an object"))
        async with _client(recorder) as client:
            with pytest.raises(GenerationError, match="malformed JSON"):
                await client.generate("classify this", CHANGE_SCHEMA)
        assert len(recorder.requests) == 2

    async def test_no_retries_configured(self) -> None:
        recorder = Recorder(_completion("nope"))
        async with _client(recorder, max_retries=0) as client:
            with pytest.raises(GenerationError):
                await client.generate("classify this", CHANGE_SCHEMA)
        assert len(recorder.requests) == 1


class TestFailures:
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(400, json={"error": {"code": "context_length_exceeded", "message": "too long"}}),
            httpx.Response(400, json={"error": {"message": "prompt is too long: 250000 tokens > 200000 maximum"}}),
            httpx.Response(413, text="Request Entity Too Large"),
        ],
    )
    async def test_oversized_prompt(self, response: httpx.Response) -> None:
        async with _client(Recorder(response)) as client:
            with pytest.raises(ContextWindowExceededError):
                await client.generate("huge", CHANGE_SCHEMA)

    async def test_other_bad_request_is_not_oversized(self) -> None:
        response = httpx.Response(400, json={"error": {"message": "unknown parameter: temperature"}})
        async with _client(Recorder(response)) as client:
            with pytest.raises(GenerationError) as exc_info:
                await client.generate("classify this", CHANGE_SCHEMA)
        assert not isinstance(exc_info.value, ContextWindowExceededError)

    async def test_server_error(self) -> None:
        async with _client(Recorder(httpx.Response(503, text="overloaded"))) as client:
            with pytest.raises(GenerationError, match="HTTP 503"):
                await client.generate("classify this", CHANGE_SCHEMA)

    async def test_connection_error(self) -> None:
        async with _client(Recorder(httpx.ConnectError("refused"))) as client:
            with pytest.raises(GenerationError, match="unavailable"):
                await client.generate("classify this", CHANGE_SCHEMA)

    async def test_timeout(self) -> None:
        async with _client(Recorder(httpx.ReadTimeout("slow"))) as client:
            with pytest.raises(GenerationError, match="timeout"):
                await client.generate("classify this", CHANGE_SCHEMA)

    async def test_unexpected_response_shape(self) -> None:
        async with _client(Recorder(httpx.Response(200, json={"output": "?"}))) as client:
            with pytest.raises(GenerationError, match="response shape"):
                await client.generate("classify this", CHANGE_SCHEMA)
