"""Route change classifier.

Turns one RouteChange into structured ChangeRecords via the generation
service. Prompts are tried in a fixed order of decreasing size:

1. ``full``            -- complete old/new unit content.
2. ``stripped``        -- content without description/example/examples keys.
3. ``structural_diff`` -- only the structural diff of the two units.

Only an input-too-large failure moves on to the next strategy; every other
failure propagates to the caller. Modifications that disappear once example
timestamps are normalised never reach the generation service.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from specwatch.compare.diff import diff, format_diff
from specwatch.compare.normalize import identical_after_normalizing
from specwatch.errors import ContextWindowExceededError, GenerationError
from specwatch.llm.prompts import build_diff_prompt, build_prompt
from specwatch.llm.schema import CHANGE_SCHEMA
from specwatch.models.changes import (
    ChangeKind,
    ChangeRecord,
    ChangeStatus,
    ChangeTarget,
    Classification,
    RouteChange,
)
from specwatch.observability.metrics import classifications_total

_log = structlog.get_logger(component="analyst.classifier")

DOC_KEYS = frozenset({"description", "example", "examples"})

NORMALIZED_TIER = "normalized"
TIMESTAMP_CHURN_NOTE = "Only timestamps in examples changed"


class Generator(Protocol):
    """Anything that can produce a schema-conforming object from a prompt."""

    async def generate(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]: ...


@dataclass(frozen=True)
class Attempt:
    """Outcome of one prompt strategy: an output, or the input was too large."""

    output: dict[str, Any] | None = None
    too_large: bool = False


@dataclass(frozen=True)
class PromptStrategy:
    """A named way of building the classification prompt for a change."""

    name: str
    build: Callable[[RouteChange], str]


def strip_docs(node: Any) -> Any:
    """Return a copy of *node* without description/example/examples keys."""
    if isinstance(node, dict):
        return {key: strip_docs(value) for key, value in node.items() if key not in DOC_KEYS}
    if isinstance(node, list):
        return [strip_docs(item) for item in node]
    return node


def _load(content: str) -> Any:
    return json.loads(content) if content else {}


def _restrip(content: str) -> str:
    if not content:
        return ""
    return json.dumps(strip_docs(json.loads(content)), indent=2, ensure_ascii=False)


def _full_prompt(change: RouteChange) -> str:
    return build_prompt(change.status, change.route, change.old_content, change.new_content)


def _stripped_prompt(change: RouteChange) -> str:
    return build_prompt(change.status, change.route, _restrip(change.old_content), _restrip(change.new_content))


def _structural_diff_prompt(change: RouteChange) -> str:
    entries = diff(_load(change.old_content), _load(change.new_content))
    return build_diff_prompt(change.status, change.route, format_diff(entries))


STRATEGIES: tuple[PromptStrategy, ...] = (
    PromptStrategy("full", _full_prompt),
    PromptStrategy("stripped", _stripped_prompt),
    PromptStrategy("structural_diff", _structural_diff_prompt),
)


class ChangeClassifier:
    """Classifies route changes with a generation service.

    Args:
        generator:  Generation capability (usually a GenerationClient).
        strategies: Prompt strategies in the order they are tried.
    """

    def __init__(
        self,
        generator: Generator,
        strategies: tuple[PromptStrategy, ...] = STRATEGIES,
    ) -> None:
        self._generator = generator
        self._strategies = strategies

    async def classify(self, change: RouteChange, date: str) -> Classification:
        """Classify *change*, stamping every record with its route and *date*.

        Raises ContextWindowExceededError when every strategy is too large,
        and GenerationError (or subclasses) for any other failure.
        """
        route = change.route
        if change.status == ChangeStatus.MODIFIED and identical_after_normalizing(
            change.old_content, change.new_content
        ):
            _log.info("example_timestamp_churn", route=route)
            classifications_total.labels(tier=NORMALIZED_TIER).inc()
            record = ChangeRecord(
                change=ChangeKind.CHANGED,
                target=ChangeTarget.ROUTE,
                breaking=False,
                deprecated=False,
                doc_only=True,
                note=TIMESTAMP_CHURN_NOTE,
                route=route,
                date=date,
            )
            return Classification(changes=[record], summary=TIMESTAMP_CHURN_NOTE, tier=NORMALIZED_TIER)

        for strategy in self._strategies:
            attempt = await self._attempt(strategy.build(change))
            if attempt.too_large:
                _log.warning("context_window_exceeded", route=route, tier=strategy.name)
                continue
            assert attempt.output is not None
            classification = _parse_output(attempt.output, route, date)
            classification.tier = strategy.name
            classifications_total.labels(tier=strategy.name).inc()
            _log.info(
                "route_classified",
                route=route,
                status=change.status.value,
                tier=strategy.name,
                records=len(classification.changes),
            )
            return classification

        raise ContextWindowExceededError(f"{route}: prompt exceeds the context window with every strategy")

    async def _attempt(self, prompt: str) -> Attempt:
        try:
            output = await self._generator.generate(prompt, CHANGE_SCHEMA)
        except ContextWindowExceededError:
            return Attempt(too_large=True)
        return Attempt(output=output)


def _parse_output(output: dict[str, Any], route: str, date: str) -> Classification:
    try:
        records = [ChangeRecord.from_dict(item) for item in output["changes"]]
        summary = str(output.get("summary", ""))
    except (KeyError, TypeError, ValueError) as exc:
        raise GenerationError(f"{route}: generation output does not match the change schema: {exc}") from exc
    for record in records:
        record.route = route
        record.date = date
    return Classification(changes=records, summary=summary)
