"""specwatch: OpenAPI change tracking and classification."""

__version__ = "0.1.0"
