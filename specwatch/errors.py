"""Exception hierarchy for specwatch."""

from __future__ import annotations


class SpecwatchError(Exception):
    """Base class for every error raised by specwatch."""


class FetchError(SpecwatchError):
    """The specification document could not be retrieved."""

    def __init__(self, url: str, attempts: int, cause: Exception | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s){detail}")
        self.url = url
        self.attempts = attempts
        self.cause = cause


class DocumentError(SpecwatchError):
    """The specification document is unparseable or has no ``paths``."""


class GenerationError(SpecwatchError):
    """The generation service failed or returned an unusable reply."""


class ContextWindowExceededError(GenerationError):
    """The prompt exceeded the generation service's input-size limit."""


class LedgerError(SpecwatchError):
    """An existing ledger file could not be read."""
