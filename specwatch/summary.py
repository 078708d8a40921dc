"""Pull-request title and body for a set of classified changes."""

from __future__ import annotations

from specwatch.models.changes import ChangeKind, ChangeRecord

MAX_TITLE_CHARS = 100


def build_title(provider: str, changes: list[ChangeRecord]) -> str:
    if len(changes) == 1:
        return changes[0].note[:MAX_TITLE_CHARS]
    return f"update {provider} API specification ({len(changes)} changes)"


def _section(heading: str, changes: list[ChangeRecord]) -> str:
    lines = [f"### {heading}", ""]
    lines.extend(f"- **{c.route}**: {c.note}" for c in changes)
    return "\n".join(lines) + "\n"


def build_body(changes: list[ChangeRecord]) -> str:
    """Markdown body grouping changes into breaking / features / doc fixes.

    Non-breaking removals appear in no section.
    """
    breaking = [c for c in changes if c.breaking]
    features = [c for c in changes if not c.breaking and c.change != ChangeKind.REMOVED and not c.doc_only]
    doc_fixes = [c for c in changes if c.doc_only]

    sections = []
    if breaking:
        sections.append(_section("Breaking changes", breaking))
    if features:
        sections.append(_section("New features", features))
    if doc_fixes:
        sections.append(_section("Documentation fixes", doc_fixes))
    return "\n".join(sections)
