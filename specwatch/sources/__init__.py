"""Specification sources: retrieval, parsing and the cached snapshot."""

from specwatch.sources.fetcher import SpecFetcher, load_document
from specwatch.sources.store import RouteStore

__all__ = ["RouteStore", "SpecFetcher", "load_document"]
