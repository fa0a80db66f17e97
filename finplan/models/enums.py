"""
Closed value sets for the planning workspace.

Every enum exposes a `parse` classmethod: it trims and lower-cases the
raw value, resolves known aliases, and returns the documented default for
anything else. Parsing never raises.
"""

from enum import Enum
from typing import Any, Optional


class _ParsableEnum(str, Enum):
    """String enum with a total parse function."""

    @classmethod
    def _default(cls) -> "_ParsableEnum":
        return next(iter(cls))

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def parse(cls, value: Any) -> "_ParsableEnum":
        if isinstance(value, cls):
            return value
        candidate = value.strip().lower() if isinstance(value, str) else ""
        candidate = cls._aliases().get(candidate, candidate)
        for member in cls:
            if member.value == candidate:
                return member
        return cls._default()


class PlanningVersionStatus(_ParsableEnum):
    """Lifecycle of a monthly plan version."""
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"
    LOCKED = "locked"

    @classmethod
    def _default(cls):
        return cls.DRAFT


class ScenarioType(_ParsableEnum):
    """Intent of a plan version."""
    BASE = "base"
    DOWNSIDE = "downside"
    RECOVERY = "recovery"
    STRETCH = "stretch"

    @classmethod
    def _default(cls):
        return cls.BASE

    @property
    def ux_label(self) -> str:
        """Month label shown next to projections of this scenario type."""
        return _SCENARIO_LABELS.get(self, "Normal month")


_SCENARIO_LABELS = {
    ScenarioType.DOWNSIDE: "Tight month",
    ScenarioType.RECOVERY: "Recovery month",
    ScenarioType.STRETCH: "Growth month",
}


class PlanningTaskStatus(_ParsableEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"

    @classmethod
    def _default(cls):
        return cls.TODO

    @classmethod
    def _aliases(cls):
        return {"in-progress": "in_progress", "completed": "done"}


class Priority(_ParsableEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def _default(cls):
        return cls.MEDIUM

    @property
    def rank(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


class FinanceStateKind(_ParsableEnum):
    CURRENT = "current"
    TARGET = "target"
    SCENARIO = "scenario"

    @classmethod
    def _default(cls):
        return cls.SCENARIO


class GoalStatus(_ParsableEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def _default(cls):
        return cls.ACTIVE


class GoalEventType(_ParsableEnum):
    CONTRIBUTION = "contribution"
    WITHDRAWAL = "withdrawal"
    ADJUSTMENT = "adjustment"
    MILESTONE = "milestone"

    @classmethod
    def _default(cls):
        return cls.CONTRIBUTION

    @classmethod
    def _aliases(cls):
        return {"debit": "withdrawal"}


class EnvelopeStatus(_ParsableEnum):
    DRAFT = "draft"
    FUNDED = "funded"
    AT_RISK = "at_risk"
    OVER = "over"

    @classmethod
    def _default(cls):
        return cls.DRAFT

    @classmethod
    def _aliases(cls):
        return {"atrisk": "at_risk"}


class ScenarioSource(str, Enum):
    """Where a forecast scenario came from."""
    CORE_LIVE = "core-live"
    PLANNING_VERSION = "planning_version"
    FINANCE_STATE = "finance_state"


class FragilityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Ownership is open text; these are the options offered to the UI.
OWNERSHIP_OPTIONS = ("personal", "shared", "business", "household")


def parse_ownership(value: Any, default: str = "shared") -> str:
    """Lower-cased ownership scope, or the default when blank."""
    candidate: Optional[str] = value.strip().lower() if isinstance(value, str) else None
    if not candidate:
        return default
    return candidate
