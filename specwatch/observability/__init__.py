"""Logging and metrics for specwatch."""
