"""Services package."""

from finplan.services.storage import (
    FinanceRecordSource,
    InMemoryRecordSource,
    NotFoundError,
    RecordCollection,
    StorageError,
)

__all__ = [
    "FinanceRecordSource",
    "InMemoryRecordSource",
    "NotFoundError",
    "RecordCollection",
    "StorageError",
]
