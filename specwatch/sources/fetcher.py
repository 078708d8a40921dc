"""Specification retrieval and parsing."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog
import yaml

from specwatch.errors import DocumentError, FetchError
from specwatch.models.config import FetchConfig

_log = structlog.get_logger(component="sources.fetcher")


class _DocumentLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates and date-times as plain strings.

    Unit content is serialised as JSON, which has no date type.
    """


_DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_document(text: str, filename: str) -> Any:
    """Parse a specification as JSON (``*.json``) or YAML (anything else)."""
    try:
        if filename.endswith(".json"):
            return json.loads(text)
        return yaml.load(text, Loader=_DocumentLoader)  # noqa: S506 - SafeLoader subclass
    except (ValueError, yaml.YAMLError) as exc:
        raise DocumentError(f"Could not parse {filename}: {exc}") from exc


class SpecFetcher:
    """Downloads specification documents with a fixed retry schedule.

    Args:
        config:    Timeout, attempt cap and backoff schedule.
        transport: Optional httpx transport, used by tests.
        sleep:     Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or FetchConfig()
        self._transport = transport
        self._sleep = sleep

    def _backoff(self, attempt: int) -> float:
        schedule = self._config.backoff_seconds
        return schedule[min(attempt, len(schedule) - 1)]

    async def fetch(self, url: str) -> str:
        """Return the raw document text at *url*.

        Raises FetchError once every attempt has failed.
        """
        attempts = self._config.max_attempts
        last_error: Exception | None = None
        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            for attempt in range(attempts):
                try:
                    _log.info("fetching_spec", url=url, attempt=attempt + 1, max_attempts=attempts)
                    response = await client.get(url)
                    response.raise_for_status()
                    return response.text
                except httpx.HTTPError as exc:
                    last_error = exc
                    if attempt == attempts - 1:
                        break
                    wait = self._backoff(attempt)
                    _log.warning("fetch_attempt_failed", url=url, attempt=attempt + 1, error=str(exc), retry_in=wait)
                    await self._sleep(wait)

        _log.error("fetch_failed", url=url, attempts=attempts, error=str(last_error))
        raise FetchError(url, attempts, last_error)
