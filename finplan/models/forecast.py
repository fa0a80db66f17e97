"""
Derived Forecast Models

Nothing in this module is persisted. These are the shapes the engine
hands to the presentation layer: the live baseline, scenario
projections, risk and spending breakdowns, and the assembled workspace.
"""

from typing import Optional

from pydantic import Field

from finplan.models.entities import (
    EnvelopeBudget,
    FinanceState,
    Goal,
    GoalEvent,
    PlannerModel,
    PlanningTask,
    PlanningVersion,
    TaskCounts,
)
from finplan.models.enums import (
    EnvelopeStatus,
    FragilityLevel,
    GoalStatus,
    OWNERSHIP_OPTIONS,
    PlanningVersionStatus,
    Priority,
    ScenarioSource,
    ScenarioType,
)


# =============================================================================
# BASELINE & SCENARIOS
# =============================================================================

class CoreBaseline(PlannerModel):
    """Live monthly cashflow and balance sheet derived from schedules."""

    base_currency: str
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    monthly_bills: float = 0.0
    monthly_card_minimums: float = 0.0
    monthly_loan_minimums: float = 0.0
    monthly_net: float = 0.0
    liquid_cash: float = 0.0
    total_assets: float = 0.0
    liabilities: float = 0.0
    net_worth: float = 0.0


class ForecastBaseline(CoreBaseline):
    """Baseline plus the envelope totals of the selected cycle."""

    envelope_planned_for_selected_cycle: float = 0.0
    envelope_actual_for_selected_cycle: float = 0.0
    envelope_carryover_for_selected_cycle: float = 0.0


class ForecastScenario(PlannerModel):
    """A labeled projection over a horizon."""

    id: str
    label: str
    scenario_label: str
    source: ScenarioSource
    horizon_months: int = Field(ge=1)
    monthly_income: float
    monthly_expenses: float
    monthly_net: float
    projected_net_worth: float
    projected_liquid_cash: float = Field(ge=0)
    runway_months: Optional[float] = None
    expected_return_pct: Optional[float] = None
    inflation_pct: Optional[float] = None
    note: str = ""
    linked_id: Optional[str] = None
    recurring_summary: Optional[str] = None


# =============================================================================
# RISK & SPENDING
# =============================================================================

class DueRow(PlannerModel):
    """One obligation placed on its due day."""

    day: int = Field(ge=1, le=31)
    amount: float = Field(ge=0)
    source: str


class FragilityResult(PlannerModel):
    """Composite short-term cash shortfall risk (0-100)."""

    score: int = 0
    level: FragilityLevel = FragilityLevel.LOW
    due_cluster_score: int = 0
    low_buffer_score: int = 0
    low_buffer_days: float = 0.0
    due_day_clusters: list[DueRow] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)


class SpendingShares(PlannerModel):
    fixed: float = 0.0
    variable: float = 0.0
    controllable: float = 0.0


class SpendingLens(PlannerModel):
    """Monthly spend split into fixed, variable and controllable buckets."""

    fixed: float = 0.0
    variable: float = 0.0
    controllable: float = 0.0
    total: float = 0.0
    shares: SpendingShares = Field(default_factory=SpendingShares)


# =============================================================================
# GOALS, ENVELOPES, TASKS
# =============================================================================

class GoalForecast(PlannerModel):
    id: str
    title: str
    category: str
    status: GoalStatus
    priority: Priority
    target_amount: float
    current_amount: float
    monthly_contribution: float
    progress_pct: float
    remaining_amount: float
    months_to_target: Optional[int] = None
    due_at: Optional[int] = None
    projected_completion_at: Optional[int] = None
    on_track: bool = False
    recent_events: list[GoalEvent] = Field(default_factory=list)


class EnvelopeTotals(PlannerModel):
    planned: float = 0.0
    actual: float = 0.0
    carryover: float = 0.0
    remaining: float = 0.0
    utilization_pct: float = 0.0


class EnvelopeCategoryRow(PlannerModel):
    id: str
    category: str
    planned_amount: float
    actual_amount: float
    carryover_amount: float
    remaining_amount: float
    utilization_pct: float
    ownership: str
    status: EnvelopeStatus


class EnvelopeRollup(PlannerModel):
    selected_cycle_key: str
    totals: EnvelopeTotals = Field(default_factory=EnvelopeTotals)
    categories: list[EnvelopeCategoryRow] = Field(default_factory=list)


class TaskSummary(PlannerModel):
    total: int = 0
    done: int = 0
    blocked: int = 0
    in_progress: int = 0
    todo: int = 0


class ActivePlanningVersionSummary(PlannerModel):
    id: str
    name: str
    cycle_key: str
    status: PlanningVersionStatus
    scenario_type: ScenarioType
    task_counts: TaskCounts
    planned_income: float
    planned_expenses: float
    planned_savings: float
    planned_net: float
    horizon_months: int


# =============================================================================
# WORKSPACE
# =============================================================================

class WorkspaceForecast(PlannerModel):
    """The full forecast payload for one workspace view."""

    base_currency: str
    display_currency: str
    current_cycle_key: str
    selected_cycle_key: str
    baseline: ForecastBaseline
    scenarios: list[ForecastScenario] = Field(default_factory=list)
    active_planning_version_id: Optional[str] = None
    active_planning_version_summary: Optional[ActivePlanningVersionSummary] = None
    goals: list[GoalForecast] = Field(default_factory=list)
    envelopes: EnvelopeRollup
    tasks: TaskSummary = Field(default_factory=TaskSummary)
    cashflow_fragility: FragilityResult = Field(default_factory=FragilityResult)
    spending_lens: SpendingLens = Field(default_factory=SpendingLens)


class AccountOption(PlannerModel):
    id: str
    name: str
    type: str


class WorkspaceOptions(PlannerModel):
    cycle_keys: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    ownership_options: list[str] = Field(default_factory=lambda: list(OWNERSHIP_OPTIONS))
    account_options: list[AccountOption] = Field(default_factory=list)
    currency_options: list[str] = Field(default_factory=list)


class PlanningWorkspace(PlannerModel):
    """Everything the planning view needs in one payload."""

    viewer_authenticated: bool
    viewer_user_id: Optional[str] = None
    display_currency: str
    locale: str
    base_currency: str
    current_cycle_key: str
    selected_cycle_key: str
    options: WorkspaceOptions = Field(default_factory=WorkspaceOptions)
    forecast: WorkspaceForecast
    planning_versions: list[PlanningVersion] = Field(default_factory=list)
    planning_action_tasks: list[PlanningTask] = Field(default_factory=list)
    personal_finance_states: list[FinanceState] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    goal_events: list[GoalEvent] = Field(default_factory=list)
    envelope_budgets: list[EnvelopeBudget] = Field(default_factory=list)
