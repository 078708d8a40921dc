"""Change detection pipeline for one provider.

Order of a ``check`` run:
    read previous units, fetch, split, detect changes, classify (bounded
    fan-out), append to ledger, store the new snapshot, build title/body.

A first run stores the snapshot and stops after splitting. Every step that
fails raises; nothing is partially reported. The ledger is only written
after every classification has succeeded, and the snapshot only after the
ledger, so an aborted run is detected again by the next one.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from specwatch.analyst.classifier import ChangeClassifier
from specwatch.analyst.fanout import DEFAULT_CONCURRENCY, run_bounded
from specwatch.compare.detect import detect_changes
from specwatch.ledger.change_ledger import ChangeLedger
from specwatch.models.changes import Classification, RouteChange
from specwatch.models.result import ChangedRoute, PipelineResult
from specwatch.observability.logging import get_logger
from specwatch.routes.operation_id import derive_operation_id
from specwatch.routes.splitter import split
from specwatch.sources.fetcher import SpecFetcher, load_document
from specwatch.sources.store import RouteStore
from specwatch.summary import build_body, build_title

_logger = get_logger("pipeline")


def _today() -> str:
    return datetime.now(tz=UTC).date().isoformat()


async def split_snapshot(store: RouteStore, filename: str) -> dict[str, str]:
    """Split the stored raw document and replace the stored units."""
    document = load_document(await store.read_raw(filename), filename)
    units = split(document)
    await store.write_routes(units)
    return units


def changed_route(change: RouteChange) -> ChangedRoute:
    """Downstream view of a change; removed routes use their old content."""
    content = change.new_content or change.old_content
    return ChangedRoute(
        relative_path=change.relative_path,
        status=change.status,
        operation_id=derive_operation_id(change.relative_path, content),
    )


class ChangePipeline:
    """Runs change detection, classification and recording for a provider.

    Args:
        provider:    Provider name, e.g. ``openai``.
        store:       Cached snapshot of the provider.
        fetcher:     Specification retrieval.
        classifier:  Route change classifier.
        ledger:      Change ledger.
        concurrency: Maximum classification calls in flight.
        today:       Date stamp provider (ISO date), replaceable in tests.
    """

    def __init__(
        self,
        provider: str,
        store: RouteStore,
        fetcher: SpecFetcher,
        classifier: ChangeClassifier,
        ledger: ChangeLedger,
        concurrency: int = DEFAULT_CONCURRENCY,
        today: Callable[[], str] = _today,
    ) -> None:
        self._provider = provider
        self._store = store
        self._fetcher = fetcher
        self._classifier = classifier
        self._ledger = ledger
        self._concurrency = concurrency
        self._today = today

    async def run(self, url: str, filename: str) -> PipelineResult:
        log = _logger.bind(provider=self._provider)

        old_units = await self._store.read_routes()
        first_run = not self._store.has_snapshot(filename)
        log.info("previous_snapshot_read", routes=len(old_units), first_run=first_run)

        raw = await self._fetcher.fetch(url)
        new_units = split(load_document(raw, filename))
        log.info("document_split", routes=len(new_units))

        if first_run:
            log.info("first_run_detected_skipping_analysis")
            await self._save_snapshot(filename, raw, new_units)
            return PipelineResult(first_run=True)

        changes = detect_changes(old_units, new_units)
        if not changes:
            log.info("no_changes_detected")
            await self._save_snapshot(filename, raw, new_units)
            return PipelineResult()
        log.info("changes_detected", routes=len(changes))

        date = self._today()

        async def _classify(change: RouteChange) -> Classification:
            log.info("analyzing_route", route=change.route, status=change.status.value)
            return await self._classifier.classify(change, date)

        classifications = await run_bounded(changes, _classify, self._concurrency)
        records = [record for c in classifications for record in c.changes]

        await self._ledger.append(self._provider, records)
        await self._save_snapshot(filename, raw, new_units)

        return PipelineResult(
            has_changes=True,
            title=build_title(self._provider, records),
            body=build_body(records),
            changed_routes=[changed_route(change) for change in changes],
        )

    async def _save_snapshot(self, filename: str, raw: str, units: dict[str, str]) -> None:
        await self._store.write_raw(filename, raw)
        await self._store.write_routes(units)
