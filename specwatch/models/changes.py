"""Change-tracking data structures and enumerations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from specwatch.routes.splitter import route_from_id

# Literal used in PathChange.before/after when one side is absent.
ABSENT = "null"


class ChangeStatus(StrEnum):
    """Status of a route unit between two snapshots."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"


class ChangeKind(StrEnum):
    """What happened to the changed element."""

    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"


class ChangeTarget(StrEnum):
    """Which part of the route a change applies to."""

    ROUTE = "route"
    REQUEST = "request"
    RESPONSE = "response"


class DiffType(StrEnum):
    """Kind of a structural diff entry."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True)
class PathChange:
    """Before/after values of a single location inside a route unit."""

    path: str
    before: str = ABSENT
    after: str = ABSENT

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "before": self.before, "after": self.after}


@dataclass
class ChangeRecord:
    """A classified change to one route.

    ``route`` and ``date`` are pipeline metadata stamped after classification.
    ``route`` is implicit in the ledger storage key and is never persisted.
    """

    change: ChangeKind
    target: ChangeTarget
    breaking: bool
    deprecated: bool
    doc_only: bool
    note: str
    paths: list[PathChange] = field(default_factory=list)
    route: str = ""
    date: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChangeRecord:
        """Build a record from a generation reply or a JSON payload.

        Raises ValueError on unknown ``change`` / ``target`` values.
        """
        return cls(
            change=ChangeKind(data["change"]),
            target=ChangeTarget(data["target"]),
            breaking=bool(data.get("breaking", False)),
            deprecated=bool(data.get("deprecated", False)),
            doc_only=bool(data.get("doc_only", False)),
            note=str(data.get("note", "")),
            paths=[
                PathChange(
                    path=str(p["path"]),
                    before=str(p.get("before", ABSENT)),
                    after=str(p.get("after", ABSENT)),
                )
                for p in data.get("paths") or []
            ],
            route=str(data.get("route", "")),
            date=str(data.get("date", "")),
        )

    def to_ledger_dict(self) -> dict[str, Any]:
        """Serialise in ledger field order, without ``route``."""
        return {
            "date": self.date,
            "change": self.change.value,
            "target": self.target.value,
            "breaking": self.breaking,
            "deprecated": self.deprecated,
            "doc_only": self.doc_only,
            "note": self.note,
            "paths": [p.to_dict() for p in self.paths],
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialise for JSON output, ``route`` included."""
        return {"route": self.route, **self.to_ledger_dict()}


@dataclass(frozen=True)
class DiffEntry:
    """One structural difference between two trees.

    ``old`` / ``new`` hold summarised (possibly truncated) renderings and are
    None on the side where the value does not exist.
    """

    path: str
    type: DiffType
    old: str | None = None
    new: str | None = None


@dataclass(frozen=True)
class RouteChange:
    """A route unit whose content differs between two snapshots."""

    relative_path: str
    status: ChangeStatus
    old_content: str = ""
    new_content: str = ""

    @property
    def route(self) -> str:
        """``METHOD /path`` form of the unit identifier."""
        return route_from_id(self.relative_path)


@dataclass
class Classification:
    """Output of the change classifier for a single route."""

    changes: list[ChangeRecord] = field(default_factory=list)
    summary: str = ""
    tier: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "changes": [c.to_dict() for c in self.changes],
            "summary": self.summary,
        }
