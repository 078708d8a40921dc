"""Unit-map comparison between two snapshots."""

from __future__ import annotations

from specwatch.models.changes import ChangeStatus, RouteChange


def detect_changes(old_units: dict[str, str], new_units: dict[str, str]) -> list[RouteChange]:
    """Compare two ``{unit_id: content}`` maps by existence and verbatim equality.

    New-map order first (additions and modifications), then removals in
    old-map order. Example-timestamp churn is not filtered here; the
    classifier short-circuits it.
    """
    changes: list[RouteChange] = []
    for unit_id, new_content in new_units.items():
        old_content = old_units.get(unit_id)
        if old_content is None:
            changes.append(RouteChange(unit_id, ChangeStatus.ADDED, "", new_content))
        elif old_content != new_content:
            changes.append(RouteChange(unit_id, ChangeStatus.MODIFIED, old_content, new_content))

    for unit_id, old_content in old_units.items():
        if unit_id not in new_units:
            changes.append(RouteChange(unit_id, ChangeStatus.DELETED, old_content, ""))
    return changes
