"""Pipeline result structures consumed by the PR / notification step."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from specwatch.models.changes import ChangeStatus


@dataclass(frozen=True)
class ChangedRoute:
    """A changed route unit as reported to downstream consumers."""

    relative_path: str
    status: ChangeStatus
    operation_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "relativePath": self.relative_path,
            "status": self.status.value,
            "operationId": self.operation_id,
        }


@dataclass
class PipelineResult:
    """Outcome of one ``check`` run for a provider.

    ``first_run`` is True exactly when no previous snapshot existed; in that
    case nothing is diffed or classified and ``has_changes`` is False.
    """

    has_changes: bool = False
    first_run: bool = False
    title: str = ""
    body: str = ""
    changed_routes: list[ChangedRoute] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_changes": self.has_changes,
            "first_run": self.first_run,
            "title": self.title,
            "body": self.body,
            "changed_routes": [r.to_dict() for r in self.changed_routes],
        }
