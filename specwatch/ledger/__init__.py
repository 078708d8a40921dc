"""Change Ledger for specwatch.

Persists classified ChangeRecords per route, append-only, as YAML files.

Submodules:
    change_ledger   -- Route parsing, grouping and read-then-write appends.
"""

from specwatch.ledger.change_ledger import ChangeLedger, parse_route

__all__ = ["ChangeLedger", "parse_route"]
