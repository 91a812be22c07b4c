"""Ports - interfaces/protocols for external dependencies."""

from .store import EntryStore

__all__ = [
    "EntryStore",
]
