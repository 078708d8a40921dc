"""Shared fixtures for integration tests."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from specwatch.errors import GenerationError

# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------

_SPEC_V1: dict[str, Any] = {
    "openapi": "3.1.0",
    "info": {"title": "Example API", "version": "2.0.0", "x-generated-at": "2026-02-18"},
    "paths": {
        "/v1/chat/completions": {
            "post": {
                "operationId": "createChatCompletion",
                "summary": "Create a chat completion",
                "requestBody": {
                    "content": {"application/json": {"schema": {"$ref": "#/components/schemas/ChatRequest"}}},
                },
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/v1/models": {
            "get": {
                "operationId": "listModels",
                "responses": {
                    "200": {
                        "description": "OK",
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/ModelList"}}},
                    },
                },
            },
        },
    },
    "components": {
        "schemas": {
            "ChatRequest": {
                "type": "object",
                "properties": {
                    "model": {"type": "string"},
                    "sample_rate": {"type": "integer", "description": "Output sample rate"},
                },
            },
            "ModelList": {
                "type": "object",
                "properties": {"data": {"type": "array", "items": {"type": "string"}}},
                "x-stainless-naming": "ModelListResponse",
            },
        },
    },
}


@pytest.fixture()
def spec_v1() -> dict[str, Any]:
    return copy.deepcopy(_SPEC_V1)


@pytest.fixture()
def spec_v2() -> dict[str, Any]:
    """spec_v1 with sample_rate retyped, /v1/models removed and /v1/batches added."""
    doc = copy.deepcopy(_SPEC_V1)
    doc["components"]["schemas"]["ChatRequest"]["properties"]["sample_rate"]["type"] = "string"
    del doc["paths"]["/v1/models"]
    doc["paths"]["/v1/batches"] = {"post": {"summary": "Create a batch", "responses": {"200": {"description": "OK"}}}}
    return doc


# ---------------------------------------------------------------------------
# Generation fixtures
# ---------------------------------------------------------------------------


def _record(change: str, breaking: bool, note: str) -> dict[str, Any]:
    return {
        "change": change,
        "target": "route" if change != "changed" else "request",
        "breaking": breaking,
        "deprecated": False,
        "doc_only": False,
        "note": note,
        "paths": [],
    }


class FakeGenerator:
    """Answers classification prompts according to the route status in the prompt."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.prompts: list[str] = []

    async def generate(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]:
        self.prompts.append(prompt)
        if self.fail:
            raise GenerationError("generation service unavailable")
        if prompt.startswith("A new API route was added"):
            return {"changes": [_record("added", False, "New batch endpoint")], "summary": "added"}
        if prompt.startswith("An API route was removed"):
            return {"changes": [_record("removed", True, "Models listing removed")], "summary": "removed"}
        return {"changes": [_record("changed", True, "sample_rate is now a string")], "summary": "changed"}


@pytest.fixture()
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def failing_generator() -> FakeGenerator:
    return FakeGenerator(fail=True)
