"""Append-only per-route change ledger.

One YAML file per ``(provider, path, method)`` under the changes directory,
e.g. ``changes/openai/v1/chat/completions/post.yml``. Each file holds the
full history of ChangeRecords for that route in insertion order; records
are only ever appended.

Appends read the whole file and write it back, so two writers appending to
the same route concurrently lose updates. The pipeline appends once per
run, after every classification has completed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml

from specwatch.errors import LedgerError
from specwatch.models.changes import ChangeRecord
from specwatch.observability.metrics import ledger_records_total
from specwatch.routes.splitter import escape_path

_log = structlog.get_logger(component="ledger.change_ledger")

LEDGER_SUFFIX = ".yml"

# Persisted field order; ``route`` is implied by the file location.
FIELD_ORDER = ("date", "change", "target", "breaking", "deprecated", "doc_only", "note", "paths")


def parse_route(route: str) -> tuple[str, str] | None:
    """``POST /v1/chat/completions`` -> ``("post", "/v1/chat/completions")``.

    Returns None when *route* is not of the form ``METHOD /path``.
    """
    method, sep, path = route.partition(" ")
    if not sep or not method or not path.startswith("/"):
        return None
    return method.lower(), path


def _as_mapping(record: ChangeRecord | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(record, ChangeRecord):
        return record.to_dict()
    return record


def _ordered(record: Mapping[str, Any]) -> dict[str, Any]:
    ordered = {key: record[key] for key in FIELD_ORDER if key in record}
    ordered.update({k: v for k, v in record.items() if k not in ordered and k != "route"})
    return ordered


class ChangeLedger:
    """YAML-backed change history rooted at *root* (``changes/`` by default)."""

    def __init__(self, root: Path | str = "changes") -> None:
        self._root = Path(root)

    def path_for(self, provider: str, method: str, path: str) -> Path:
        """Storage file for one route."""
        return self._root / provider / escape_path(path).lstrip("/") / f"{method.lower()}{LEDGER_SUFFIX}"

    async def append(self, provider: str, records: Iterable[ChangeRecord | Mapping[str, Any]]) -> int:
        """Append *records* to their per-route files; return how many were written.

        Records without a usable ``route`` are dropped with a warning.
        Not idempotent: appending the same records twice stores them twice.
        """
        by_file: dict[Path, list[dict[str, Any]]] = {}
        for record in records:
            data = _as_mapping(record)
            route = data.get("route")
            if not route:
                _log.warning("change_record_missing_route", record=dict(data))
                continue
            parsed = parse_route(str(route))
            if parsed is None:
                _log.warning("change_record_invalid_route", route=route)
                continue
            method, path = parsed
            by_file.setdefault(self.path_for(provider, method, path), []).append(_ordered(data))

        if not by_file:
            _log.info("no_changes_to_append", provider=provider)
            return 0

        written = 0
        for file_path, new_records in by_file.items():
            await asyncio.to_thread(self._append_file, file_path, new_records)
            written += len(new_records)
            _log.info("ledger_appended", file=str(file_path), records=len(new_records))
        ledger_records_total.inc(written)
        return written

    async def read(self, provider: str, route: str) -> list[dict[str, Any]]:
        """Return the stored history for *route* (``METHOD /path``), oldest first."""
        parsed = parse_route(route)
        if parsed is None:
            raise ValueError(f"Invalid route format (expected 'METHOD /path'): {route}")
        method, path = parsed
        return await asyncio.to_thread(_load, self.path_for(provider, method, path))

    def _append_file(self, file_path: Path, new_records: list[dict[str, Any]]) -> None:
        merged = [*_load(file_path), *new_records]
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(
            yaml.safe_dump(merged, sort_keys=False, allow_unicode=True, width=float("inf")),
            encoding="utf-8",
        )


def _load(file_path: Path) -> list[dict[str, Any]]:
    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    try:
        existing = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise LedgerError(f"Ledger file {file_path} is not valid YAML: {exc}") from exc
    if existing is None:
        return []
    if not isinstance(existing, list):
        raise LedgerError(f"Ledger file {file_path} does not hold a sequence of records")
    return existing
