"""specwatch command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``specwatch`` script).
"""

from specwatch.cli.main import cli

__all__ = ["cli"]
