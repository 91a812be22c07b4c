"""Adapters - I/O implementations of ports."""

from .sql_store import SqlStore
from .legacy_snapshot import LegacySnapshot, ImportStats, load_snapshot

__all__ = [
    "SqlStore",
    "LegacySnapshot",
    "ImportStats",
    "load_snapshot",
]
