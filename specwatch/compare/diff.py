"""Recursive structural diff over JSON-like trees.

Produces a path-addressed list of DiffEntry objects. Paths use dotted keys
and bracketed list indices (``responses.200.content[0].type``). Lists are
compared positionally: a reordered list shows up as changed elements, not
as moves.
"""

from __future__ import annotations

import json
from typing import Any

from specwatch.models.changes import DiffEntry, DiffType

MAX_VALUE_CHARS = 300
_ELLIPSIS = "..."


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def summarize(value: Any) -> str:
    """Render *value* for a prompt, truncated to MAX_VALUE_CHARS.

    Strings are rendered raw, everything else as compact JSON.
    """
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    if len(text) > MAX_VALUE_CHARS:
        return text[:MAX_VALUE_CHARS] + _ELLIPSIS
    return text


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def diff(old: Any, new: Any, path: str = "") -> list[DiffEntry]:
    """Return every structural difference between *old* and *new*.

    ``diff(t, t)`` is always empty.
    """
    if old is new:
        return []

    old_kind, new_kind = _kind(old), _kind(new)
    if old_kind != new_kind:
        return [DiffEntry(path=path, type=DiffType.CHANGED, old=summarize(old), new=summarize(new))]

    if old_kind == "array":
        entries: list[DiffEntry] = []
        for i in range(max(len(old), len(new))):
            item_path = f"{path}[{i}]"
            if i >= len(old):
                entries.append(DiffEntry(path=item_path, type=DiffType.ADDED, new=summarize(new[i])))
            elif i >= len(new):
                entries.append(DiffEntry(path=item_path, type=DiffType.REMOVED, old=summarize(old[i])))
            else:
                entries.extend(diff(old[i], new[i], item_path))
        return entries

    if old_kind == "object":
        entries = []
        keys = list(old) + [key for key in new if key not in old]
        for key in keys:
            key_path = _join(path, str(key))
            if key not in old:
                entries.append(DiffEntry(path=key_path, type=DiffType.ADDED, new=summarize(new[key])))
            elif key not in new:
                entries.append(DiffEntry(path=key_path, type=DiffType.REMOVED, old=summarize(old[key])))
            else:
                entries.extend(diff(old[key], new[key], key_path))
        return entries

    if old == new:
        return []
    return [DiffEntry(path=path, type=DiffType.CHANGED, old=summarize(old), new=summarize(new))]


def format_diff(entries: list[DiffEntry]) -> str:
    """Render entries one per line for the structural-diff prompt."""
    lines = []
    for entry in entries:
        location = entry.path or "(root)"
        if entry.type == DiffType.ADDED:
            lines.append(f"+ {location}: {entry.new}")
        elif entry.type == DiffType.REMOVED:
            lines.append(f"- {location}: {entry.old}")
        else:
            lines.append(f"~ {location}: {entry.old} -> {entry.new}")
    return "\n".join(lines)
