"""Timestamp normalisation inside documentation examples.

Providers regenerate illustrative timestamps on every publish. Replacing
timestamp-shaped values under ``example`` / ``examples`` keys with fixed
placeholders lets two snapshots that differ only in those values compare
equal. Values outside example subtrees are never touched.
"""

from __future__ import annotations

import json
import re
from typing import Any

from specwatch.routes.splitter import canonical_json

EXAMPLE_KEYS = frozenset({"example", "examples"})

TIMESTAMP_PLACEHOLDER = "[TIMESTAMP]"
ISO_DATE_PLACEHOLDER = "[ISO_DATE]"

# Unix timestamps in seconds or milliseconds.
_TIMESTAMP_RE = re.compile(r"\b\d{10,13}\b")
_TIMESTAMP_NUMBER_RE = re.compile(r"^\d{10,13}$")
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{3})?(?:Z|[+-]\d{2}:\d{2})")


def _normalize_scalar(value: Any) -> Any:
    if isinstance(value, str):
        value = _TIMESTAMP_RE.sub(TIMESTAMP_PLACEHOLDER, value)
        return _ISO_DATE_RE.sub(ISO_DATE_PLACEHOLDER, value)
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and _TIMESTAMP_NUMBER_RE.match(str(value)):
        return TIMESTAMP_PLACEHOLDER
    return value


def normalize(node: Any, in_example: bool = False) -> Any:
    """Return a copy of *node* with example timestamps replaced by placeholders.

    Mapping keys are coerced to ``str`` so YAML status codes such as ``200``
    sort alongside ``default``.
    """
    if isinstance(node, dict):
        return {str(key): normalize(value, in_example or key in EXAMPLE_KEYS) for key, value in node.items()}
    if isinstance(node, list):
        return [normalize(item, in_example) for item in node]
    if in_example:
        return _normalize_scalar(node)
    return node


def _parse(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def identical_after_normalizing(old: Any, new: Any) -> bool:
    """True when *old* and *new* only differ by timestamps inside examples.

    Accepts parsed trees or JSON text. When either side fails to parse the
    comparison falls back to verbatim equality.
    """
    try:
        old_tree = _parse(old)
        new_tree = _parse(new)
    except ValueError:
        return old == new
    return canonical_json(normalize(old_tree)) == canonical_json(normalize(new_tree))
