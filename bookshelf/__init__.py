"""Persisted book catalog kept in sync with filesystem libraries."""

__version__ = "0.1.0"
