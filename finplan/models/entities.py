"""
Canonical Planning Entities

These models are the output of the domain normalizers. They are
designed to:
1. Always be constructible from a normalized record (no required field
   is left without a default by the normalizers)
2. Serialize with camelCase keys for the presentation layer
3. Re-normalize to themselves when dumped and fed back in

Monetary values are floats; timestamps are milliseconds since epoch.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finplan.models.enums import (
    EnvelopeStatus,
    FinanceStateKind,
    GoalEventType,
    GoalStatus,
    PlanningTaskStatus,
    PlanningVersionStatus,
    Priority,
    ScenarioType,
)


class PlannerModel(BaseModel):
    """Base model: snake_case attributes, camelCase wire names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# PLANNING
# =============================================================================

class RecurringScenario(PlannerModel):
    """Recurrence settings embedded in a plan version's assumptions."""

    enabled: bool = False
    name: str = ""
    interval_months: int = Field(default=1, ge=1, le=12)
    start_cycle_key: str
    tags: list[str] = Field(default_factory=list, max_length=8)


class TaskCounts(PlannerModel):
    total: int = 0
    open: int = 0
    done: int = 0


class PlanningVersion(PlannerModel):
    """A saved monthly plan. Read-only to the engine."""

    id: str
    cycle_key: str
    name: str
    version_key: str = "v1"
    status: PlanningVersionStatus = PlanningVersionStatus.DRAFT
    scenario_type: ScenarioType = ScenarioType.BASE
    scenario_label: str = "Normal month"
    planned_income: float = 0.0
    planned_expenses: float = 0.0
    planned_savings: float = 0.0
    planned_net: float = 0.0
    horizon_months: int = Field(default=12, ge=1, le=120)
    linked_state_id: str = ""
    note: str = ""
    assumptions_json: str = "{}"
    recurring_scenario: RecurringScenario
    created_at: int = 0
    updated_at: int = 0

    # Filled in by the orchestrator from the task list
    task_counts: TaskCounts = Field(default_factory=TaskCounts)


class PlanningTask(PlannerModel):
    """An action item attached to a plan version."""

    id: str
    planning_version_id: str = ""
    title: str = "Planning task"
    status: PlanningTaskStatus = PlanningTaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    owner_scope: str = "shared"
    due_at: Optional[int] = None
    impact_monthly: float = 0.0
    note: str = ""
    linked_entity_type: str = ""
    linked_entity_id: str = ""
    created_at: int = 0
    updated_at: int = 0


# =============================================================================
# SCENARIO STATES
# =============================================================================

class FinanceState(PlannerModel):
    """A what-if snapshot of the household balance sheet and cashflow."""

    id: str
    name: str = "Scenario state"
    state_kind: FinanceStateKind = FinanceStateKind.SCENARIO
    horizon_months: int = Field(default=12, ge=1, le=240)
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    liquid_cash: float = 0.0
    assets: float = 0.0
    liabilities: float = 0.0
    starting_net_worth: float = 0.0
    expected_return_pct: float = 0.0
    inflation_pct: float = 0.0
    currency: str = "USD"
    note: str = ""
    created_at: int = 0
    updated_at: int = 0


# =============================================================================
# GOALS
# =============================================================================

class GoalEvent(PlannerModel):
    """
    A movement against a goal.

    Amounts are sign-normalized: withdrawals are negative,
    contributions positive.
    """

    id: str
    goal_id: str = ""
    event_type: GoalEventType = GoalEventType.CONTRIBUTION
    amount: float = 0.0
    note: str = ""
    occurred_at: Optional[int] = None
    created_at: int = 0
    updated_at: int = 0


class Goal(PlannerModel):
    """A savings target with derived progress fields."""

    id: str
    title: str = "Goal"
    category: str = "general"
    status: GoalStatus = GoalStatus.ACTIVE
    priority: Priority = Priority.MEDIUM
    ownership: str = "shared"
    target_amount: float = Field(default=0.0, ge=0)
    current_amount: float = Field(default=0.0, ge=0)
    monthly_contribution: float = Field(default=0.0, ge=0)
    due_at: Optional[int] = None
    due_label: str = "Planned"
    currency: str = "USD"
    note: str = ""
    progress_pct: float = Field(default=0.0, ge=0, le=1)
    remaining_amount: float = Field(default=0.0, ge=0)
    months_to_target: Optional[int] = None
    last_event_at: Optional[int] = None
    recent_events: list[GoalEvent] = Field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0


# =============================================================================
# ENVELOPES
# =============================================================================

class EnvelopeBudget(PlannerModel):
    """Planned spend for one category in one cycle."""

    id: str
    cycle_key: str
    category: str = "general"
    planned_amount: float = Field(default=0.0, ge=0)
    actual_amount: float = Field(default=0.0, ge=0)
    carryover_amount: float = 0.0
    remaining_amount: float = 0.0
    utilization_pct: float = 0.0
    ownership: str = "shared"
    status: EnvelopeStatus = EnvelopeStatus.DRAFT
    rollover: bool = False
    note: str = ""
    currency: str = "USD"
    created_at: int = 0
    updated_at: int = 0
