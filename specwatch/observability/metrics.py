"""Prometheus counters for specwatch runs.

specwatch runs as a batch job, so metrics are dumped to a textfile
(``--metrics-file``) for the node-exporter textfile collector instead of
being scraped.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, write_to_textfile

registry = CollectorRegistry()

classifications_total = Counter(
    "specwatch_classifications_total",
    "Route classifications completed, by prompt tier",
    ["tier"],
    registry=registry,
)

generation_requests_total = Counter(
    "specwatch_generation_requests_total",
    "Requests sent to the generation service, by outcome",
    ["outcome"],
    registry=registry,
)

ledger_records_total = Counter(
    "specwatch_ledger_records_total",
    "Change records appended to the ledger",
    registry=registry,
)

notifications_total = Counter(
    "specwatch_notifications_total",
    "Route-change notifications sent",
    ["channel", "success"],
    registry=registry,
)


def write_metrics(path: str) -> None:
    """Write every specwatch metric to *path* in Prometheus text format."""
    write_to_textfile(path, registry)
