"""Entry point for `python -m specwatch`.

Usage:
    python -m specwatch check openai https://example.com/openapi.yml openapi.yml
    uv run python -m specwatch append openai '[...]'
"""

from __future__ import annotations

from specwatch.cli import cli

cli()
