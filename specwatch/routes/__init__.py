"""Route units: splitting a document into bundled per-route pieces.

Submodules:
    bundle        -- Transitive $ref collection and attachment.
    splitter      -- Unit identifiers, canonical serialisation, splitting.
    operation_id  -- operationId lookup / derivation per unit.
"""

from specwatch.routes.bundle import bundle
from specwatch.routes.operation_id import derive_operation_id
from specwatch.routes.splitter import canonical_json, route_from_id, route_id, split, strip_extensions

__all__ = [
    "bundle",
    "canonical_json",
    "derive_operation_id",
    "route_from_id",
    "route_id",
    "split",
    "strip_extensions",
]
