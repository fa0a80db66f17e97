"""
In-Memory Record Source

Backs the workspace flow with plain dicts. Used by the test-suite and by
local tooling that replays exported data.
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from finplan.services.storage.interface import (
    FinanceRecordSource,
    NotFoundError,
    RecordCollection,
)


class InMemoryRecordSource(FinanceRecordSource):
    """
    Record source holding rows per user and collection.

    Rows are deep-copied on the way in and out so callers can never
    mutate the stored snapshot.
    """

    def __init__(
        self,
        currency_catalog: Iterable[Mapping[str, Any]] = (),
        strict_users: bool = False,
    ):
        self._records: dict[str, dict[RecordCollection, list[dict[str, Any]]]] = {}
        self._preferences: dict[str, dict[str, Any]] = {}
        self._currency_catalog = [dict(row) for row in currency_catalog]
        self._strict_users = strict_users

    def add_records(
        self,
        user_id: str,
        collection: RecordCollection,
        rows: Iterable[Mapping[str, Any]],
    ) -> None:
        """Append rows to a user's collection."""
        by_collection = self._records.setdefault(user_id, {})
        by_collection.setdefault(collection, []).extend(copy.deepcopy(dict(row)) for row in rows)

    def set_preferences(self, user_id: str, preferences: Mapping[str, Any]) -> None:
        self._records.setdefault(user_id, {})
        self._preferences[user_id] = dict(preferences)

    async def list_records(self, user_id: str, collection: RecordCollection) -> list[dict[str, Any]]:
        if self._strict_users and user_id not in self._records:
            raise NotFoundError(f"No records for user {user_id}")
        rows = self._records.get(user_id, {}).get(RecordCollection(collection), [])
        return copy.deepcopy(rows)

    async def get_preferences(self, user_id: str) -> Optional[dict[str, Any]]:
        preferences = self._preferences.get(user_id)
        return dict(preferences) if preferences is not None else None

    async def list_currency_catalog(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._currency_catalog)
