"""Operation identifiers for route units.

Used as the suffix of notification event types (``api:{provider}:{id}``).
"""

from __future__ import annotations

import json

from specwatch.routes.splitter import UNIT_SUFFIX

# Path-item level keys split into their own units; they are not operations.
NON_OPERATION_FILES = frozenset({"parameters.json", "servers.json", "description.json"})

_QUERY_TOKEN = "_QMARK_"


def derive_operation_id(relative_path: str, content: str) -> str | None:
    """Return the operationId for a unit, generating one when it is missing.

    ``batches/{id}/get.json`` without an operationId yields ``get_batches``.
    Non-operation units yield None.
    """
    parts = relative_path.split("/")
    filename = parts.pop()
    if filename in NON_OPERATION_FILES:
        return None

    try:
        parsed = json.loads(content)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict) and parsed.get("operationId"):
        return str(parsed["operationId"])

    method = filename.removesuffix(UNIT_SUFFIX).lower()
    segments = [p.split(_QUERY_TOKEN, 1)[0] for p in parts if p and not p.startswith("{")]
    if not segments:
        return method
    return f"{method}_{'_'.join(segments)}"
