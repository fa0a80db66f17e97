"""
Abstract Record Source Interface

DESIGN DECISION: The engine never talks to a database directly. A record
source hands it per-user collections of loosely-typed rows. This allows us to:
1. Keep every computation a pure function over in-memory snapshots
2. Use in-memory sources for testing
3. Put any backend behind the same three read operations

Only reads are modelled. Writes, upserts and audit trails live with the
storage layer, not here.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class RecordCollection(str, Enum):
    """Per-user collections the workspace is built from."""

    INCOMES = "incomes"
    BILLS = "bills"
    CARDS = "cards"
    LOANS = "loans"
    ACCOUNTS = "accounts"
    MONTH_CLOSE_SNAPSHOTS = "monthCloseSnapshots"
    PLANNING_VERSIONS = "planningMonthVersions"
    PLANNING_TASKS = "planningActionTasks"
    FINANCE_STATES = "personalFinanceStates"
    GOALS = "financeGoals"
    GOAL_EVENTS = "goalEvents"
    ENVELOPE_BUDGETS = "envelopeBudgets"


class FinanceRecordSource(ABC):
    """
    Abstract interface for reading a user's finance records.

    Any backend (document store, SQL, fixtures) must implement these methods.
    """

    @abstractmethod
    async def list_records(self, user_id: str, collection: RecordCollection) -> list[dict[str, Any]]:
        """
        List every row of one collection owned by the user.

        Args:
            user_id: Owner of the rows
            collection: Which collection to read

        Returns:
            Raw rows, in storage order

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def get_preferences(self, user_id: str) -> Optional[dict[str, Any]]:
        """
        Get the user's finance preferences row.

        Args:
            user_id: Owner of the preferences

        Returns:
            The raw preferences row (currency, displayCurrency, locale),
            or None when the user has none
        """
        pass

    @abstractmethod
    async def list_currency_catalog(self) -> list[dict[str, Any]]:
        """
        List the shared currency catalog.

        Returns:
            Rows with at least a `code` field
        """
        pass


class StorageError(Exception):
    """Base exception for record source operations."""
    pass


class NotFoundError(StorageError):
    """Requested user or collection does not exist."""
    pass
