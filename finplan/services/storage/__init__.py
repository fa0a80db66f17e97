"""
Storage Services Package

Provides the abstract record source the workspace flow reads from, and an
in-memory implementation. Designed to be swappable.
"""

from finplan.services.storage.interface import (
    FinanceRecordSource,
    NotFoundError,
    RecordCollection,
    StorageError,
)
from finplan.services.storage.memory import InMemoryRecordSource

__all__ = [
    # Interfaces
    "FinanceRecordSource",
    "RecordCollection",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryRecordSource",
]
