"""Reference bundling for single operations.

Makes an operation node self-contained by collecting the transitive closure
of the local ``$ref`` pointers it uses and attaching the referenced subtrees
next to it, at the location each pointer names. ``$ref`` strings themselves
are left untouched, so a bundled operation still resolves with the usual
``#/components/...`` semantics against itself.
"""

from __future__ import annotations

import copy
from collections import deque
from typing import Any

from specwatch.observability.logging import get_logger

_logger = get_logger("routes.bundle")

_LOCAL_PREFIX = "#/"
WRAPPED_VALUE_KEY = "value"


class _NotFound:
    """Sentinel type for pointers that do not resolve."""

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND: Any = _NotFound()


def _pointer_segments(pointer: str) -> list[str]:
    # RFC 6901 unescaping, ~1 before ~0
    return [seg.replace("~1", "/").replace("~0", "~") for seg in pointer[len(_LOCAL_PREFIX) :].split("/")]


def resolve_pointer(document: Any, pointer: str) -> Any:
    """Resolve a local ``#/a/b/c`` pointer against *document*.

    Returns NOT_FOUND for non-local pointers and for paths that do not exist.
    """
    if not pointer.startswith(_LOCAL_PREFIX):
        return NOT_FOUND
    current = document
    for segment in _pointer_segments(pointer):
        if isinstance(current, dict):
            if segment not in current:
                return NOT_FOUND
            current = current[segment]
        elif isinstance(current, list):
            if not segment.isdigit() or int(segment) >= len(current):
                return NOT_FOUND
            current = current[int(segment)]
        else:
            return NOT_FOUND
    return current


def _find_refs(node: Any, visited: set[str], queue: deque[str]) -> None:
    if isinstance(node, list):
        for item in node:
            _find_refs(item, visited, queue)
        return
    if not isinstance(node, dict):
        return
    ref = node.get("$ref")
    if isinstance(ref, str) and ref not in visited:
        visited.add(ref)
        queue.append(ref)
    for key, value in node.items():
        if key != "$ref":
            _find_refs(value, visited, queue)


def collect_refs(document: Any, node: Any) -> dict[str, Any]:
    """Return every pointer reachable from *node*, mapped to its resolved value.

    Breadth-first over pointers; the visited set is keyed by pointer string so
    cyclic and repeated references terminate. Dangling pointers are skipped.
    """
    refs: dict[str, Any] = {}
    visited: set[str] = set()
    queue: deque[str] = deque()

    _find_refs(node, visited, queue)
    while queue:
        pointer = queue.popleft()
        resolved = resolve_pointer(document, pointer)
        if resolved is NOT_FOUND:
            _logger.debug("unresolved_ref_skipped", ref=pointer)
            continue
        refs[pointer] = resolved
        _find_refs(resolved, visited, queue)
    return refs


def _attach(tree: dict[str, Any], segments: list[str], value: Any) -> None:
    target = tree
    for segment in segments[:-1]:
        child = target.get(segment)
        if not isinstance(child, dict):
            child = {}
            target[segment] = child
        target = child
    target[segments[-1]] = copy.deepcopy(value)


def bundle(operation: Any, document: Any) -> Any:
    """Return *operation* with its transitive references attached.

    With no references the operation itself is returned. Keys of the
    operation win over referenced subtrees of the same top-level name.
    A node that is not a mapping (a path-level ``parameters`` list) is
    placed under ``WRAPPED_VALUE_KEY`` next to the attached subtrees.
    """
    refs = collect_refs(document, operation)
    if not refs:
        return operation
    if not isinstance(operation, dict):
        operation = {WRAPPED_VALUE_KEY: operation}

    extra: dict[str, Any] = {}
    # ancestors first, so a nested pointer is already carried by its parent
    for pointer in sorted(refs, key=lambda p: len(_pointer_segments(p))):
        if resolve_pointer(extra, pointer) is not NOT_FOUND:
            continue
        _attach(extra, _pointer_segments(pointer), refs[pointer])

    return {**extra, **operation}
