"""Core data structures for specwatch."""

from specwatch.models.changes import (
    ABSENT,
    ChangeKind,
    ChangeRecord,
    ChangeStatus,
    ChangeTarget,
    Classification,
    DiffEntry,
    DiffType,
    PathChange,
    RouteChange,
)
from specwatch.models.config import SpecwatchConfig
from specwatch.models.result import ChangedRoute, PipelineResult

__all__ = [
    "ABSENT",
    "ChangeKind",
    "ChangeRecord",
    "ChangeStatus",
    "ChangeTarget",
    "ChangedRoute",
    "Classification",
    "DiffEntry",
    "DiffType",
    "PathChange",
    "PipelineResult",
    "RouteChange",
    "SpecwatchConfig",
]
