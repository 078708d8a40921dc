"""specwatch command-line interface.

Results are printed to stdout as JSON; progress is logged to stderr.
Fatal errors are logged at critical level and exit with status 1.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import click

from specwatch.analyst.classifier import ChangeClassifier
from specwatch.config import load_config
from specwatch.errors import SpecwatchError
from specwatch.ledger.change_ledger import ChangeLedger
from specwatch.llm.client import GenerationClient
from specwatch.models.changes import ChangeStatus, RouteChange
from specwatch.models.config import SpecwatchConfig
from specwatch.models.result import ChangedRoute
from specwatch.notifications import DispatchSummary, NotificationDispatcher, WebhookNotificationChannel
from specwatch.observability.logging import bind_run_context, get_logger, setup_logging
from specwatch.observability.metrics import write_metrics
from specwatch.pipeline import ChangePipeline, split_snapshot
from specwatch.routes.splitter import route_id
from specwatch.sources.fetcher import SpecFetcher
from specwatch.sources.store import RouteStore

_T = TypeVar("_T")


def _run(ctx: click.Context, coro: Coroutine[Any, Any, _T]) -> _T:
    """Run *coro*, turning specwatch errors into a logged non-zero exit."""
    try:
        return asyncio.run(coro)
    except SpecwatchError as exc:
        get_logger("cli").critical("fatal_error", command=ctx.info_name, error=str(exc))
        raise SystemExit(1) from exc
    finally:
        metrics_file = ctx.find_root().obj.get("metrics_file")
        if metrics_file:
            write_metrics(metrics_file)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, ensure_ascii=False))


def _config(ctx: click.Context) -> SpecwatchConfig:
    return ctx.find_root().obj["config"]


def _read_or_empty(path: str | None) -> str:
    if not path:
        return ""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


@click.group()
@click.option("--log-level", default=None, help="Override SPECWATCH_LOG_LEVEL.")
@click.option("--metrics-file", default=None, type=click.Path(dir_okay=False), help="Write Prometheus metrics here on exit.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, metrics_file: str | None) -> None:
    """Track OpenAPI specifications and classify their changes."""
    config = load_config()
    if log_level:
        config.log.level = log_level.lower()
    setup_logging(config.log.level)
    bind_run_context(command=ctx.invoked_subcommand)
    ctx.obj = {"config": config, "metrics_file": metrics_file}


@cli.command()
@click.argument("provider")
@click.argument("url")
@click.argument("filename")
@click.pass_context
def check(ctx: click.Context, provider: str, url: str, filename: str) -> None:
    """Fetch PROVIDER's spec from URL, detect, classify and record changes."""
    bind_run_context(provider=provider)
    config = _config(ctx)

    async def _check() -> dict[str, Any]:
        async with GenerationClient(config.llm) as client:
            pipeline = ChangePipeline(
                provider=provider,
                store=RouteStore(config.storage.cache_dir, provider),
                fetcher=SpecFetcher(config.fetch),
                classifier=ChangeClassifier(client),
                ledger=ChangeLedger(config.storage.changes_dir),
                concurrency=config.pipeline.concurrency,
            )
            result = await pipeline.run(url, filename)
        return result.to_dict()

    _echo_json(_run(ctx, _check()))


@cli.command("split")
@click.argument("provider")
@click.argument("filename")
@click.pass_context
def split_command(ctx: click.Context, provider: str, filename: str) -> None:
    """Re-split PROVIDER's cached FILENAME into route units."""
    bind_run_context(provider=provider)
    config = _config(ctx)
    store = RouteStore(config.storage.cache_dir, provider)
    if not store.has_snapshot(filename):
        raise click.UsageError(f"no cached {filename} for {provider}; run check first")
    units = _run(ctx, split_snapshot(store, filename))
    _echo_json(sorted(units))


@cli.command()
@click.argument("status", type=click.Choice([s.value for s in ChangeStatus]))
@click.argument("route")
@click.argument("date")
@click.argument("old_file", required=False)
@click.argument("new_file", required=False)
@click.pass_context
def analyze(
    ctx: click.Context,
    status: str,
    route: str,
    date: str,
    old_file: str | None,
    new_file: str | None,
) -> None:
    """Classify a single ROUTE change (e.g. "POST /v1/chat/completions")."""
    config = _config(ctx)
    method, _, path = route.partition(" ")
    if not method or not path.startswith("/"):
        raise click.BadParameter("expected 'METHOD /path'", param_hint="ROUTE")
    change = RouteChange(
        relative_path=route_id(path, method),
        status=ChangeStatus(status),
        old_content=_read_or_empty(old_file),
        new_content=_read_or_empty(new_file),
    )

    async def _analyze() -> dict[str, Any]:
        async with GenerationClient(config.llm) as client:
            classification = await ChangeClassifier(client).classify(change, date)
        return classification.to_dict()

    _echo_json(_run(ctx, _analyze()))


@cli.command()
@click.argument("provider")
@click.argument("changes_json")
@click.pass_context
def append(ctx: click.Context, provider: str, changes_json: str) -> None:
    """Append CHANGES_JSON (a JSON array of change records) to the ledger."""
    bind_run_context(provider=provider)
    config = _config(ctx)
    try:
        records = json.loads(changes_json)
    except ValueError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="CHANGES_JSON") from exc
    if not isinstance(records, list):
        raise click.BadParameter("expected a JSON array", param_hint="CHANGES_JSON")
    ledger = ChangeLedger(config.storage.changes_dir)
    written = _run(ctx, ledger.append(provider, records))
    _echo_json({"appended": written})


@cli.command()
@click.argument("provider")
@click.argument("changed_routes_json")
@click.pass_context
def notify(ctx: click.Context, provider: str, changed_routes_json: str) -> None:
    """Send notifications for CHANGED_ROUTES_JSON from a ``check`` result."""
    bind_run_context(provider=provider)
    config = _config(ctx)
    if not config.notifications.webhook_url:
        raise click.UsageError("SPECWATCH_WEBHOOK_URL is required")
    try:
        routes = [
            ChangedRoute(
                relative_path=item["relativePath"],
                status=ChangeStatus(item["status"]),
                operation_id=item.get("operationId"),
            )
            for item in json.loads(changed_routes_json)
        ]
    except (ValueError, KeyError, TypeError) as exc:
        raise click.BadParameter(f"invalid changed routes: {exc}", param_hint="CHANGED_ROUTES_JSON") from exc

    headers = {}
    if config.notifications.webhook_token:
        headers["Authorization"] = f"Bearer {config.notifications.webhook_token}"

    async def _notify() -> DispatchSummary:
        async with WebhookNotificationChannel(config.notifications.webhook_url, headers) as channel:
            return await NotificationDispatcher([channel]).dispatch(provider, routes)

    summary = _run(ctx, _notify())
    _echo_json({"sent": summary.sent, "failed": summary.failed, "skipped": summary.skipped})
    if summary.failed:
        raise SystemExit(1)
