"""Prompt templates for the route change classifier.

One template per change status, plus a structural-diff variant of the
modification template used when full content does not fit the context
window, and the correction prompt sent after a malformed reply.
"""

from __future__ import annotations

from specwatch.models.changes import ChangeStatus

SYSTEM_PROMPT: str = """\
You are an API change analyst. You compare versions of a single route from a
dereferenced OpenAPI specification and describe every change as a structured
record. Base your records ONLY on the specifications provided. Return ONLY JSON
conforming to the requested schema.\
"""

ADDED_PROMPT_TEMPLATE: str = """\
A new API route was added: {route}

Here is the full dereferenced OpenAPI specification for this route:

{new_spec}

Produce change records for this addition. Since the entire route is new, create a single record with change "added" and target "route". Include a brief note describing what this endpoint does. The paths array should be empty for route-level additions.

Also provide a one-line summary (max 100 chars).\
"""

REMOVED_PROMPT_TEMPLATE: str = """\
An API route was removed: {route}

Here was the full dereferenced OpenAPI specification for this route:

{old_spec}

Produce change records for this removal. Create a single record with change "removed", target "route", breaking true. Include a brief note describing what this endpoint was. The paths array should be empty for route-level removals.

Also provide a one-line summary (max 100 chars).\
"""

_RECORD_INSTRUCTIONS: str = """\
Analyze the differences and produce change records. For each logical change, create a record with:
- change: "added" (new property/option), "changed" (type/value change), or "removed" (property/option gone)
- target: "request" or "response"
- breaking: true if the change could break existing consumers
- deprecated: true if something was marked as deprecated
- doc_only: true if only descriptions/examples changed, not schema structure. Ignore if only examples changed.
- note: human-readable description of the change
- paths: array of {{path, before, after}} with JSON-path-like notation relative to the route spec. Use "null" string for before on additions and after on removals.

Also provide a one-line summary of all changes to this route (max 100 chars).\
"""

MODIFIED_PROMPT_TEMPLATE: str = (
    """\
An API route was modified: {route}

Here is the OLD dereferenced specification:

{old_spec}

Here is the NEW dereferenced specification:

{new_spec}

"""
    + _RECORD_INSTRUCTIONS
)

DIFF_PROMPT_TEMPLATE: str = (
    """\
An API route was modified: {route}

The specification is too large to include in full. Here is the structural diff
between the OLD and NEW dereferenced specification, one change per line.
"+ path: value" was added, "- path: value" was removed,
"~ path: old -> new" was changed. Long values are truncated with "...".

{diff}

"""
    + _RECORD_INSTRUCTIONS
)

RETRY_PROMPT: str = """\
Your previous response was not valid JSON.
Error: {parse_error}

Return ONLY a valid JSON object with these exact keys:
changes, summary

No markdown code blocks. No explanatory text. Only JSON.\
"""


def build_prompt(status: ChangeStatus, route: str, old_spec: str, new_spec: str) -> str:
    """Prompt embedding the full (or stripped) content of the route."""
    if status == ChangeStatus.ADDED:
        return ADDED_PROMPT_TEMPLATE.format(route=route, new_spec=new_spec)
    if status == ChangeStatus.DELETED:
        return REMOVED_PROMPT_TEMPLATE.format(route=route, old_spec=old_spec)
    return MODIFIED_PROMPT_TEMPLATE.format(route=route, old_spec=old_spec, new_spec=new_spec)


def build_diff_prompt(status: ChangeStatus, route: str, diff_text: str) -> str:
    """Prompt embedding only the structural diff of the route.

    Additions and removals reuse their route-level templates with the diff
    against an empty unit standing in for the specification.
    """
    if status == ChangeStatus.ADDED:
        return ADDED_PROMPT_TEMPLATE.format(route=route, new_spec=diff_text)
    if status == ChangeStatus.DELETED:
        return REMOVED_PROMPT_TEMPLATE.format(route=route, old_spec=diff_text)
    return DIFF_PROMPT_TEMPLATE.format(route=route, diff=diff_text)
