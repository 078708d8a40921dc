"""Integration tests for the YAML change ledger."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from specwatch.errors import LedgerError
from specwatch.ledger.change_ledger import FIELD_ORDER, ChangeLedger, parse_route
from specwatch.models.changes import ChangeKind, ChangeRecord, ChangeTarget, PathChange

pytestmark = pytest.mark.integration


def _change(route: str, note: str, **overrides: object) -> dict[str, object]:
    change: dict[str, object] = {
        "route": route,
        "date": "2026-02-19",
        "change": "changed",
        "target": "request",
        "breaking": False,
        "deprecated": False,
        "doc_only": False,
        "note": note,
        "paths": [],
    }
    change.update(overrides)
    return change


def _load(path: Path) -> list[dict[str, object]]:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


class TestAppend:
    async def test_records_are_grouped_per_route(self, tmp_path: Path) -> None:
        ledger = ChangeLedger(tmp_path)
        written = await ledger.append(
            "openai",
            [
                _change("POST /v1/chat/completions", "Added modalities"),
                _change("GET /v1/models", "New models endpoint", change="added", target="route"),
                _change("POST /v1/chat/completions", "Added audio"),
            ],
        )

        assert written == 3
        chat = _load(tmp_path / "openai" / "v1" / "chat" / "completions" / "post.yml")
        models = _load(tmp_path / "openai" / "v1" / "models" / "get.yml")
        assert [r["note"] for r in chat] == ["Added modalities", "Added audio"]
        assert len(models) == 1
        assert all("route" not in r for r in chat + models)

    async def test_appends_after_existing_history(self, tmp_path: Path) -> None:
        target = tmp_path / "openai" / "v1" / "models" / "get.yml"
        target.parent.mkdir(parents=True)
        existing = [{"date": "2026-01-01", "change": "added", "target": "response", "note": "Added gpt-5 model"}]
        target.write_text(yaml.safe_dump(existing), encoding="utf-8")

        ledger = ChangeLedger(tmp_path)
        await ledger.append("openai", [_change("GET /v1/models", "Added gpt-5-turbo model")])

        assert [r["note"] for r in _load(target)] == ["Added gpt-5 model", "Added gpt-5-turbo model"]

    async def test_two_appends_compose(self, tmp_path: Path) -> None:
        ledger = ChangeLedger(tmp_path)
        await ledger.append("openai", [_change("GET /v1/models", "first")])
        await ledger.append("openai", [_change("GET /v1/models", "second")])

        history = await ledger.read("openai", "GET /v1/models")
        assert [r["note"] for r in history] == ["first", "second"]

    async def test_field_order_and_values(self, tmp_path: Path) -> None:
        ledger = ChangeLedger(tmp_path)
        await ledger.append(
            "openai",
            [
                _change(
                    "POST /v1/chat/completions",
                    "sample_rate type changed",
                    breaking=True,
                    paths=[{"path": "schema.properties.sample_rate.type", "before": "number", "after": "integer"}],
                )
            ],
        )

        [record] = await ledger.read("openai", "POST /v1/chat/completions")
        assert tuple(record) == FIELD_ORDER
        assert record["breaking"] is True
        assert record["paths"] == [{"path": "schema.properties.sample_rate.type", "before": "number", "after": "integer"}]
        assert record["date"] == "2026-02-19"

    async def test_change_records_are_accepted(self, tmp_path: Path) -> None:
        record = ChangeRecord(
            change=ChangeKind.ADDED,
            target=ChangeTarget.ROUTE,
            breaking=False,
            deprecated=True,
            doc_only=False,
            note="New deprecated endpoint",
            paths=[PathChange(path="deprecated", after="true")],
            route="POST /v1/new-endpoint",
            date="2026-02-19",
        )
        ledger = ChangeLedger(tmp_path)
        assert await ledger.append("openai", [record]) == 1

        [stored] = await ledger.read("openai", "POST /v1/new-endpoint")
        assert stored["deprecated"] is True
        assert stored["paths"] == [{"path": "deprecated", "before": "null", "after": "true"}]
        assert "route" not in stored

    async def test_query_routes_use_escaped_directories(self, tmp_path: Path) -> None:
        ledger = ChangeLedger(tmp_path)
        await ledger.append("anthropic", [_change("GET /v1/files?beta=true", "Added beta listing")])

        assert (tmp_path / "anthropic" / "v1" / "files_QMARK_beta_EQ_true" / "get.yml").is_file()

    async def test_malformed_records_are_dropped(self, tmp_path: Path) -> None:
        ledger = ChangeLedger(tmp_path)
        records = [
            _change("", "no route"),
            _change("chat completions", "no method"),
            _change("GET /v1/models", "kept"),
        ]
        assert await ledger.append("openai", records) == 1
        assert [r["note"] for r in await ledger.read("openai", "GET /v1/models")] == ["kept"]

    async def test_empty_input_writes_nothing(self, tmp_path: Path) -> None:
        assert await ChangeLedger(tmp_path).append("openai", []) == 0
        assert list(tmp_path.iterdir()) == []

    async def test_dates_survive_as_strings(self, tmp_path: Path) -> None:
        ledger = ChangeLedger(tmp_path)
        await ledger.append("openai", [_change("GET /v1/models", "x")])
        text = (tmp_path / "openai" / "v1" / "models" / "get.yml").read_text(encoding="utf-8")
        assert "date: '2026-02-19'" in text


class TestRead:
    async def test_missing_history_is_empty(self, tmp_path: Path) -> None:
        assert await ChangeLedger(tmp_path).read("openai", "GET /v1/unknown") == []

    async def test_corrupt_file_is_reported(self, tmp_path: Path) -> None:
        target = tmp_path / "openai" / "v1" / "models" / "get.yml"
        target.parent.mkdir(parents=True)
        target.write_text("note: not a list\n", encoding="utf-8")

        with pytest.raises(LedgerError):
            await ChangeLedger(tmp_path).read("openai", "GET /v1/models")

    async def test_invalid_route(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            await ChangeLedger(tmp_path).read("openai", "models")


class TestParseRoute:
    @pytest.mark.parametrize(
        ("route", "expected"),
        [
            ("POST /v1/chat/completions", ("post", "/v1/chat/completions")),
            ("get /", ("get", "/")),
            ("GET v1/models", None),
            ("/v1/models", None),
            ("GET", None),
        ],
    )
    def test_parse(self, route: str, expected: tuple[str, str] | None) -> None:
        assert parse_route(route) == expected
