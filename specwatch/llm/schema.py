"""JSON Schema for the classifier's structured output."""

from __future__ import annotations

from typing import Any

from specwatch.models.changes import ChangeKind, ChangeTarget

PATH_CHANGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {"type": "string"},
        "before": {"type": "string"},
        "after": {"type": "string"},
    },
    "required": ["path", "before", "after"],
    "additionalProperties": False,
}

CHANGE_RECORD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "change": {"type": "string", "enum": [k.value for k in ChangeKind]},
        "target": {"type": "string", "enum": [t.value for t in ChangeTarget]},
        "breaking": {"type": "boolean"},
        "deprecated": {"type": "boolean"},
        "doc_only": {"type": "boolean"},
        "note": {"type": "string"},
        "paths": {"type": "array", "items": PATH_CHANGE_SCHEMA},
    },
    "required": ["change", "target", "breaking", "deprecated", "doc_only", "note", "paths"],
    "additionalProperties": False,
}

CHANGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "changes": {"type": "array", "items": CHANGE_RECORD_SCHEMA},
        "summary": {
            "type": "string",
            "description": "One-line summary of changes to this route (max 100 chars)",
        },
    },
    "required": ["changes", "summary"],
    "additionalProperties": False,
}

SCHEMA_NAME = "route_changes"
