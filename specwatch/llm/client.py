"""Client for an OpenAI-compatible chat completions endpoint.

Sends a prompt plus a JSON Schema (``response_format: json_schema``) and
returns the parsed object. Failures are split into two classes the
classifier can act on:

* ContextWindowExceededError -- the prompt is larger than the model accepts.
* GenerationError            -- everything else (transport, HTTP, bad reply).

A malformed (non-JSON) reply is retried with a correction prompt up to
``max_retries`` times before GenerationError is raised.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from specwatch.errors import ContextWindowExceededError, GenerationError
from specwatch.llm.prompts import RETRY_PROMPT, SYSTEM_PROMPT
from specwatch.llm.schema import SCHEMA_NAME
from specwatch.models.config import LLMConfig
from specwatch.observability.metrics import generation_requests_total

_log = structlog.get_logger(component="llm.client")

_COMPLETIONS_PATH = "/v1/chat/completions"

# Lower-cased fragments providers use to report oversized input.
_CONTEXT_EXCEEDED_MARKERS = (
    "context_length_exceeded",
    "exceeds the context window",
    "maximum context length",
    "prompt is too long",
    "request too large",
    "too many tokens",
)


def _is_context_exceeded(response: httpx.Response) -> bool:
    if response.status_code == 413:
        return True
    if response.status_code != 400:
        return False
    body = response.text.lower()
    return any(marker in body for marker in _CONTEXT_EXCEEDED_MARKERS)


class GenerationClient:
    """Structured-output generation over httpx.

    Args:
        config:    LLM endpoint, model, key and sampling settings.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(self, config: LLMConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        headers = {"Content-Type": "application/json"}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        self._client = httpx.AsyncClient(
            base_url=config.endpoint,
            headers=headers,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> GenerationClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]:
        """Return a JSON object generated for *prompt*, shaped by *schema*."""
        messages: list[dict[str, str]] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        last_error: Exception | None = None
        for attempt in range(self._config.max_retries + 1):
            content = await self._complete(messages, schema)
            try:
                data = json.loads(content)
                if not isinstance(data, dict):
                    raise ValueError("reply is not a JSON object")
                return data
            except ValueError as exc:
                last_error = exc
                _log.warning("generation_malformed_json", attempt=attempt + 1, error=str(exc))
                messages = [
                    *messages,
                    {"role": "assistant", "content": content},
                    {"role": "user", "content": RETRY_PROMPT.format(parse_error=str(exc))},
                ]
        raise GenerationError(f"Generation service returned malformed JSON: {last_error}")

    async def _complete(self, messages: list[dict[str, str]], schema: dict[str, Any]) -> str:
        payload = {
            "model": self._config.model,
            "messages": messages,
            "temperature": self._config.temperature,
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": SCHEMA_NAME, "strict": True, "schema": schema},
            },
        }
        try:
            response = await self._client.post(_COMPLETIONS_PATH, json=payload)
        except httpx.TimeoutException as exc:
            generation_requests_total.labels(outcome="timeout").inc()
            raise GenerationError(f"Generation service timeout: {exc}") from exc
        except httpx.HTTPError as exc:
            generation_requests_total.labels(outcome="unavailable").inc()
            raise GenerationError(f"Generation service unavailable: {exc}") from exc

        if _is_context_exceeded(response):
            generation_requests_total.labels(outcome="too_large").inc()
            raise ContextWindowExceededError(
                f"Prompt exceeds the context window of {self._config.model}: {response.text[:200]}"
            )
        if not response.is_success:
            generation_requests_total.labels(outcome="http_error").inc()
            raise GenerationError(f"Generation service returned HTTP {response.status_code}: {response.text[:200]}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            generation_requests_total.labels(outcome="bad_response").inc()
            raise GenerationError(f"Unexpected generation response shape: {exc}") from exc

        generation_requests_total.labels(outcome="success").inc()
        return content or ""
