"""Split an OpenAPI document into one bundled unit per (path, method).

Unit identifiers are filesystem-safe relative paths such as
``v1/chat/completions/post.json``; ``?`` and ``=`` in the route path are
replaced by fixed tokens so the identifiers survive artifact uploads.
"""

from __future__ import annotations

import json
from typing import Any

from specwatch.errors import DocumentError
from specwatch.observability.logging import get_logger
from specwatch.routes.bundle import bundle

_logger = get_logger("routes.splitter")

EXTENSION_PREFIX = "x-"
UNIT_SUFFIX = ".json"

# Order matters for unescaping: tokens must not overlap.
_ESCAPES: tuple[tuple[str, str], ...] = (
    ("?", "_QMARK_"),
    ("=", "_EQ_"),
)


def strip_extensions(node: Any) -> Any:
    """Return a copy of *node* without ``x-`` keys, at every depth.

    Mapping keys are coerced to ``str``: YAML loads unquoted status codes
    such as ``200`` as integers.
    """
    if isinstance(node, dict):
        return {
            str(key): strip_extensions(value)
            for key, value in node.items()
            if not str(key).startswith(EXTENSION_PREFIX)
        }
    if isinstance(node, list):
        return [strip_extensions(item) for item in node]
    return node


def escape_path(path: str) -> str:
    for char, token in _ESCAPES:
        path = path.replace(char, token)
    return path


def unescape_path(path: str) -> str:
    for char, token in _ESCAPES:
        path = path.replace(token, char)
    return path


def route_id(path: str, method: str) -> str:
    """``/v1/models`` + ``get`` -> ``v1/models/get.json``."""
    directory = escape_path(path).lstrip("/")
    filename = f"{method.lower()}{UNIT_SUFFIX}"
    return f"{directory}/{filename}" if directory else filename


def route_from_id(unit_id: str) -> str:
    """``v1/models/get.json`` -> ``GET /v1/models``."""
    head, _, filename = unit_id.rpartition("/")
    method = filename.removesuffix(UNIT_SUFFIX).upper()
    return f"{method} /{unescape_path(head)}"


def canonical_json(node: Any) -> str:
    """Deterministic serialisation: sorted keys, 2-space indent, trailing newline."""
    return json.dumps(node, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def split(document: Any) -> dict[str, str]:
    """Split *document* into ``{unit_id: canonical bundled content}``.

    Extension keys are stripped from the whole document first, so they
    neither appear in units nor participate in reference resolution.
    """
    if not isinstance(document, dict) or not isinstance(document.get("paths"), dict):
        raise DocumentError("Specification document has no 'paths' mapping")

    cleaned = strip_extensions(document)
    units: dict[str, str] = {}
    for path, operations in cleaned["paths"].items():
        if not isinstance(operations, dict):
            _logger.warning("path_item_not_a_mapping", path=path)
            continue
        for method, operation in operations.items():
            units[route_id(path, method)] = canonical_json(bundle(operation, cleaned))
    _logger.debug("document_split", units=len(units))
    return units
