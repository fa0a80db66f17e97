"""
Data Models Package

Canonical entities produced by the normalizers and the derived
forecast shapes produced by the engine.
"""

from finplan.models.enums import (
    OWNERSHIP_OPTIONS,
    EnvelopeStatus,
    FinanceStateKind,
    FragilityLevel,
    GoalEventType,
    GoalStatus,
    PlanningTaskStatus,
    PlanningVersionStatus,
    Priority,
    ScenarioSource,
    ScenarioType,
    parse_ownership,
)
from finplan.models.entities import (
    EnvelopeBudget,
    FinanceState,
    Goal,
    GoalEvent,
    PlannerModel,
    PlanningTask,
    PlanningVersion,
    RecurringScenario,
    TaskCounts,
)
from finplan.models.forecast import (
    AccountOption,
    ActivePlanningVersionSummary,
    CoreBaseline,
    DueRow,
    EnvelopeCategoryRow,
    EnvelopeRollup,
    EnvelopeTotals,
    ForecastBaseline,
    ForecastScenario,
    FragilityResult,
    GoalForecast,
    PlanningWorkspace,
    SpendingLens,
    SpendingShares,
    TaskSummary,
    WorkspaceForecast,
    WorkspaceOptions,
)

__all__ = [
    # Enums
    "OWNERSHIP_OPTIONS",
    "EnvelopeStatus",
    "FinanceStateKind",
    "FragilityLevel",
    "GoalEventType",
    "GoalStatus",
    "PlanningTaskStatus",
    "PlanningVersionStatus",
    "Priority",
    "ScenarioSource",
    "ScenarioType",
    "parse_ownership",
    # Entities
    "EnvelopeBudget",
    "FinanceState",
    "Goal",
    "GoalEvent",
    "PlannerModel",
    "PlanningTask",
    "PlanningVersion",
    "RecurringScenario",
    "TaskCounts",
    # Forecast
    "AccountOption",
    "ActivePlanningVersionSummary",
    "CoreBaseline",
    "DueRow",
    "EnvelopeCategoryRow",
    "EnvelopeRollup",
    "EnvelopeTotals",
    "ForecastBaseline",
    "ForecastScenario",
    "FragilityResult",
    "GoalForecast",
    "PlanningWorkspace",
    "SpendingLens",
    "SpendingShares",
    "TaskSummary",
    "WorkspaceForecast",
    "WorkspaceOptions",
]
