"""
Forecast Orchestrator for finplan

This module ties together all the components and defines the
end-to-end assembly of a planning workspace:
1. Normalize (raw rows → canonical entities)
2. Sort (deterministic presentation order per collection)
3. Compute (baseline → scenarios → goals → envelopes → risk → spending)
4. Assemble (one WorkspaceForecast inside one PlanningWorkspace)

DESIGN DECISION: Everything below PlanningWorkspaceFlow is synchronous
and pure. "Now" is always passed in; nothing reads the system clock.
The flow is the only place that touches a record source, and it does
so once per collection, concurrently.
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import structlog

from finplan.config import EngineSettings, get_settings
from finplan.forecasting import (
    build_core_baseline,
    classify_spending,
    forecast_goals,
    project_core_baseline,
    project_finance_state,
    project_planning_version,
    score_cashflow_fragility,
)
from finplan.models import (
    OWNERSHIP_OPTIONS,
    AccountOption,
    ActivePlanningVersionSummary,
    CoreBaseline,
    EnvelopeBudget,
    EnvelopeCategoryRow,
    EnvelopeRollup,
    EnvelopeTotals,
    FinanceState,
    ForecastBaseline,
    Goal,
    GoalEvent,
    GoalStatus,
    PlanningTask,
    PlanningTaskStatus,
    PlanningVersion,
    PlanningVersionStatus,
    PlanningWorkspace,
    TaskCounts,
    TaskSummary,
    WorkspaceForecast,
    WorkspaceOptions,
)
from finplan.normalization import (
    NormalizationContext,
    build_default_cycle_keys,
    cycle_key_from_ms,
    group_goal_events_by_goal_id,
    normalize_currency_code,
    normalize_cycle_key,
    normalize_envelope_budget,
    normalize_finance_state,
    normalize_goal,
    normalize_goal_event,
    normalize_planning_task,
    normalize_planning_version,
    optional_string,
    record_identity,
    sanitize_locale,
    sort_most_recent_first,
)
from finplan.services.storage import FinanceRecordSource, RecordCollection, StorageError
from finplan.telemetry import create_correlation_id, get_logger

logger = get_logger(__name__)


class ForecastInputError(TypeError):
    """A collection argument was not a list or tuple."""
    pass


TASK_STATUS_RANK = {
    PlanningTaskStatus.BLOCKED: 0,
    PlanningTaskStatus.IN_PROGRESS: 1,
    PlanningTaskStatus.TODO: 2,
    PlanningTaskStatus.DONE: 3,
}

GOAL_STATUS_RANK = {
    GoalStatus.ACTIVE: 0,
    GoalStatus.PAUSED: 1,
    GoalStatus.COMPLETED: 2,
    GoalStatus.CANCELLED: 3,
}


def _require_collection(name: str, value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        raise ForecastInputError(
            f"{name} must be a list or tuple of records, got {type(value).__name__}"
        )
    return list(value)


def _text_sort_key(value: str) -> tuple[str, str]:
    return (value.casefold(), value)


# =============================================================================
# SORTING POLICIES
# =============================================================================

def sort_planning_tasks(tasks: Sequence[PlanningTask]) -> list[PlanningTask]:
    """Status rank, priority rank, earliest due date (undated last), newest update."""
    return sorted(
        tasks,
        key=lambda task: (
            TASK_STATUS_RANK[task.status],
            task.priority.rank,
            task.due_at is None,
            task.due_at or 0,
            -task.updated_at,
        ),
    )


def sort_goals(goals: Sequence[Goal]) -> list[Goal]:
    """Status rank, priority rank, newest update."""
    return sorted(
        goals,
        key=lambda goal: (GOAL_STATUS_RANK[goal.status], goal.priority.rank, -goal.updated_at),
    )


def sort_envelopes(envelopes: Sequence[EnvelopeBudget]) -> list[EnvelopeBudget]:
    """Cycle key descending, then category ascending."""
    by_category = sorted(envelopes, key=lambda envelope: envelope.category)
    return sorted(by_category, key=lambda envelope: envelope.cycle_key, reverse=True)


# =============================================================================
# ROLLUPS
# =============================================================================

def count_tasks_by_version(tasks: Sequence[PlanningTask]) -> dict[str, TaskCounts]:
    """Total, open and done task counts per planning version id."""
    counts: dict[str, TaskCounts] = {}
    for task in tasks:
        if not task.planning_version_id:
            continue
        current = counts.setdefault(task.planning_version_id, TaskCounts())
        current.total += 1
        if task.status is PlanningTaskStatus.DONE:
            current.done += 1
        else:
            current.open += 1
    return counts


def select_active_planning_version(
    versions: Sequence[PlanningVersion],
    selected_cycle_key: str,
) -> Optional[PlanningVersion]:
    """
    Pick the plan the workspace is centred on.

    Precedence: an explicitly active plan, a plan for the selected
    cycle, the first plan in the given order.
    """
    for version in versions:
        if version.status is PlanningVersionStatus.ACTIVE:
            return version
    for version in versions:
        if version.cycle_key == selected_cycle_key:
            return version
    return versions[0] if versions else None


def summarize_tasks(tasks: Sequence[PlanningTask]) -> TaskSummary:
    summary = TaskSummary()
    for task in tasks:
        summary.total += 1
        if task.status is PlanningTaskStatus.DONE:
            summary.done += 1
        elif task.status is PlanningTaskStatus.BLOCKED:
            summary.blocked += 1
        elif task.status is PlanningTaskStatus.IN_PROGRESS:
            summary.in_progress += 1
        else:
            summary.todo += 1
    return summary


def build_envelope_rollup(
    envelopes: Sequence[EnvelopeBudget],
    selected_cycle_key: str,
) -> EnvelopeRollup:
    """Totals and per-category rows for the selected cycle's envelopes."""
    selected = [envelope for envelope in envelopes if envelope.cycle_key == selected_cycle_key]
    planned = sum(envelope.planned_amount for envelope in selected)
    actual = sum(envelope.actual_amount for envelope in selected)
    carryover = sum(envelope.carryover_amount for envelope in selected)
    available = planned + carryover

    return EnvelopeRollup(
        selected_cycle_key=selected_cycle_key,
        totals=EnvelopeTotals(
            planned=planned,
            actual=actual,
            carryover=carryover,
            remaining=available - actual,
            utilization_pct=actual / available if available > 0 else 0.0,
        ),
        categories=[
            EnvelopeCategoryRow(
                id=envelope.id,
                category=envelope.category,
                planned_amount=envelope.planned_amount,
                actual_amount=envelope.actual_amount,
                carryover_amount=envelope.carryover_amount,
                remaining_amount=envelope.remaining_amount,
                utilization_pct=envelope.utilization_pct,
                ownership=envelope.ownership,
                status=envelope.status,
            )
            for envelope in selected
        ],
    )


def resolve_selected_cycle_key(
    requested: Any,
    envelopes: Sequence[EnvelopeBudget],
    versions: Sequence[PlanningVersion],
    current_cycle_key: str,
) -> str:
    """Requested key, else the first envelope's, else the first plan's, else current."""
    selected = normalize_cycle_key(requested)
    if selected:
        return selected
    if envelopes:
        return envelopes[0].cycle_key
    if versions:
        return versions[0].cycle_key
    return current_cycle_key


# =============================================================================
# FORECAST
# =============================================================================

def build_workspace_forecast(
    *,
    core: CoreBaseline,
    display_currency: str,
    current_cycle_key: str,
    selected_cycle_key: str,
    incomes: Sequence[Mapping],
    bills: Sequence[Mapping],
    cards: Sequence[Mapping],
    loans: Sequence[Mapping],
    planning_versions: Sequence[PlanningVersion],
    planning_tasks: Sequence[PlanningTask],
    finance_states: Sequence[FinanceState],
    goals: Sequence[Goal],
    goal_events_by_goal_id: Mapping[str, list[GoalEvent]],
    envelopes: Sequence[EnvelopeBudget],
    now_ms: int,
    settings: Optional[EngineSettings] = None,
) -> WorkspaceForecast:
    """
    Assemble the forecast payload from a baseline and normalized entities.

    Scenario order: the live baseline, the active plan, up to
    `max_recurring_projections` other recurring plans, then every
    finance state.
    """
    settings = settings or get_settings().engine

    envelope_rollup = build_envelope_rollup(envelopes, selected_cycle_key)
    active_version = select_active_planning_version(planning_versions, selected_cycle_key)

    scenarios = [project_core_baseline(core, settings.core_horizon_months)]
    if active_version is not None:
        scenarios.append(project_planning_version(active_version, core))
    recurring_versions = [
        version
        for version in planning_versions
        if version.recurring_scenario.enabled
        and (active_version is None or version.id != active_version.id)
    ][: settings.max_recurring_projections]
    scenarios.extend(project_planning_version(version, core) for version in recurring_versions)
    scenarios.extend(project_finance_state(state, core) for state in finance_states)

    active_summary = None
    if active_version is not None:
        active_summary = ActivePlanningVersionSummary(
            id=active_version.id,
            name=active_version.name,
            cycle_key=active_version.cycle_key,
            status=active_version.status,
            scenario_type=active_version.scenario_type,
            task_counts=active_version.task_counts,
            planned_income=active_version.planned_income,
            planned_expenses=active_version.planned_expenses,
            planned_savings=active_version.planned_savings,
            planned_net=active_version.planned_net,
            horizon_months=active_version.horizon_months,
        )

    return WorkspaceForecast(
        base_currency=core.base_currency,
        display_currency=display_currency,
        current_cycle_key=current_cycle_key,
        selected_cycle_key=selected_cycle_key,
        baseline=ForecastBaseline(
            **core.model_dump(),
            envelope_planned_for_selected_cycle=envelope_rollup.totals.planned,
            envelope_actual_for_selected_cycle=envelope_rollup.totals.actual,
            envelope_carryover_for_selected_cycle=envelope_rollup.totals.carryover,
        ),
        scenarios=scenarios,
        active_planning_version_id=active_version.id if active_version else None,
        active_planning_version_summary=active_summary,
        goals=forecast_goals(
            goals,
            dict(goal_events_by_goal_id),
            now_ms,
            settings.recent_goal_event_limit,
        ),
        envelopes=envelope_rollup,
        tasks=summarize_tasks(planning_tasks),
        cashflow_fragility=score_cashflow_fragility(
            incomes,
            bills,
            cards,
            loans,
            liquid_cash=core.liquid_cash,
            monthly_expenses=core.monthly_expenses,
            display_limit=settings.due_row_display_limit,
        ),
        spending_lens=classify_spending(bills, cards, loans, envelopes, selected_cycle_key),
    )


# =============================================================================
# WORKSPACE
# =============================================================================

def build_empty_workspace(now_ms: int, settings: Optional[EngineSettings] = None) -> PlanningWorkspace:
    """Default payload for a viewer who is not signed in."""
    settings = settings or get_settings().engine
    current_cycle_key = cycle_key_from_ms(now_ms)
    currency = settings.default_currency

    return PlanningWorkspace(
        viewer_authenticated=False,
        viewer_user_id=None,
        display_currency=currency,
        locale=settings.default_locale,
        base_currency=currency,
        current_cycle_key=current_cycle_key,
        selected_cycle_key=current_cycle_key,
        options=WorkspaceOptions(
            cycle_keys=build_default_cycle_keys(
                now_ms, settings.cycle_window_before, settings.cycle_window_after
            ),
        ),
        forecast=WorkspaceForecast(
            base_currency=currency,
            display_currency=currency,
            current_cycle_key=current_cycle_key,
            selected_cycle_key=current_cycle_key,
            baseline=ForecastBaseline(base_currency=currency),
            envelopes=EnvelopeRollup(selected_cycle_key=current_cycle_key),
        ),
    )


def _account_options(
    accounts: Sequence[Mapping],
    cards: Sequence[Mapping],
    loans: Sequence[Mapping],
) -> list[AccountOption]:
    def option(row: Mapping, default_name: str, account_type: Any) -> AccountOption:
        name = row.get("name")
        return AccountOption(
            id=record_identity(row),
            name=default_name if name is None else str(name),
            type=str(account_type),
        )

    options = [
        option(row, "Account", "account" if row.get("type") is None else row.get("type"))
        for row in accounts
    ]
    options += [option(row, "Card", "card") for row in cards]
    options += [option(row, "Loan", "loan") for row in loans]
    return sorted(options, key=lambda entry: _text_sort_key(entry.name))


def build_planning_workspace(
    *,
    user_id: str,
    incomes: Sequence[Mapping],
    bills: Sequence[Mapping],
    cards: Sequence[Mapping],
    loans: Sequence[Mapping],
    accounts: Sequence[Mapping],
    month_snapshots: Sequence[Mapping],
    planning_versions: Sequence[Mapping],
    planning_tasks: Sequence[Mapping],
    finance_states: Sequence[Mapping],
    goals: Sequence[Mapping],
    goal_events: Sequence[Mapping],
    envelope_budgets: Sequence[Mapping],
    currency_catalog: Sequence[Mapping] = (),
    base_currency: str,
    display_currency: str,
    locale: str,
    now_ms: int,
    cycle_key: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> PlanningWorkspace:
    """
    Build the full workspace from raw per-user collections.

    Args:
        user_id: Viewer the collections belong to
        incomes ... envelope_budgets: Raw rows per collection
        currency_catalog: Rows with a `code` field
        base_currency: Caller-resolved base currency
        display_currency: Caller-resolved display currency
        locale: Caller-resolved locale
        now_ms: Current time in epoch milliseconds
        cycle_key: Explicitly requested cycle, if any
        settings: Engine settings (defaults to the cached settings)

    Returns:
        PlanningWorkspace with every collection normalized and sorted

    Raises:
        ForecastInputError: If a collection is not a list or tuple
    """
    settings = settings or get_settings().engine
    incomes = _require_collection("incomes", incomes)
    bills = _require_collection("bills", bills)
    cards = _require_collection("cards", cards)
    loans = _require_collection("loans", loans)
    accounts = _require_collection("accounts", accounts)
    month_snapshots = _require_collection("month_snapshots", month_snapshots)
    planning_versions = _require_collection("planning_versions", planning_versions)
    planning_tasks = _require_collection("planning_tasks", planning_tasks)
    finance_states = _require_collection("finance_states", finance_states)
    goals = _require_collection("goals", goals)
    goal_events = _require_collection("goal_events", goal_events)
    envelope_budgets = _require_collection("envelope_budgets", envelope_budgets)
    currency_catalog = _require_collection("currency_catalog", currency_catalog)

    base_currency = normalize_currency_code(base_currency, settings.default_currency)
    display_currency = normalize_currency_code(display_currency, base_currency)
    locale = sanitize_locale(locale, settings.default_locale)
    current_cycle_key = cycle_key_from_ms(now_ms)
    context = NormalizationContext(
        base_currency=base_currency,
        current_cycle_key=current_cycle_key,
        default_ownership=settings.default_ownership,
    )

    # Normalize and sort
    versions = [
        normalize_planning_version(row, context)
        for row in sort_most_recent_first(planning_versions)
    ]
    tasks = sort_planning_tasks([normalize_planning_task(row, context) for row in planning_tasks])
    states = [normalize_finance_state(row, context) for row in sort_most_recent_first(finance_states)]
    events = [
        normalize_goal_event(row, context)
        for row in sort_most_recent_first(goal_events)[: settings.goal_event_limit]
    ]
    events_by_goal_id = group_goal_events_by_goal_id(events)
    normalized_goals = sort_goals([
        normalize_goal(
            row,
            context,
            events_by_goal_id.get(record_identity(row), []),
            settings.recent_goal_event_limit,
        )
        for row in goals
    ])
    envelopes = sort_envelopes([normalize_envelope_budget(row, context) for row in envelope_budgets])

    counts = count_tasks_by_version(tasks)
    versions = [
        version.model_copy(update={"task_counts": counts.get(version.id, TaskCounts())})
        for version in versions
    ]

    selected_cycle_key = resolve_selected_cycle_key(
        cycle_key, envelopes, versions, current_cycle_key
    )

    # Options
    categories = {optional_string(row.get("category")) for row in bills}
    categories.update(envelope.category for envelope in envelopes)
    categories.update(goal.category for goal in normalized_goals)
    currencies = {
        normalize_currency_code(row.get("code"))
        for row in currency_catalog
        if optional_string(row.get("code"))
    }
    currencies.update((base_currency, display_currency))
    currencies.update(goal.currency for goal in normalized_goals)
    currencies.update(state.currency for state in states)
    currencies.update(envelope.currency for envelope in envelopes)
    cycle_keys = set(
        build_default_cycle_keys(now_ms, settings.cycle_window_before, settings.cycle_window_after)
    )
    cycle_keys.update(version.cycle_key for version in versions)
    cycle_keys.update(envelope.cycle_key for envelope in envelopes)

    core = build_core_baseline(
        incomes, bills, cards, loans, accounts, month_snapshots, base_currency
    )
    forecast = build_workspace_forecast(
        core=core,
        display_currency=display_currency,
        current_cycle_key=current_cycle_key,
        selected_cycle_key=selected_cycle_key,
        incomes=incomes,
        bills=bills,
        cards=cards,
        loans=loans,
        planning_versions=versions,
        planning_tasks=tasks,
        finance_states=states,
        goals=normalized_goals,
        goal_events_by_goal_id=events_by_goal_id,
        envelopes=envelopes,
        now_ms=now_ms,
        settings=settings,
    )

    return PlanningWorkspace(
        viewer_authenticated=True,
        viewer_user_id=user_id,
        display_currency=display_currency,
        locale=locale,
        base_currency=base_currency,
        current_cycle_key=current_cycle_key,
        selected_cycle_key=selected_cycle_key,
        options=WorkspaceOptions(
            cycle_keys=sorted((key for key in cycle_keys if key), reverse=True),
            categories=sorted((c for c in categories if c), key=_text_sort_key),
            ownership_options=list(OWNERSHIP_OPTIONS),
            account_options=_account_options(accounts, cards, loans),
            currency_options=sorted((c for c in currencies if c), key=_text_sort_key),
        ),
        forecast=forecast,
        planning_versions=versions,
        planning_action_tasks=tasks,
        personal_finance_states=states,
        goals=normalized_goals,
        goal_events=events,
        envelope_budgets=envelopes,
    )


class PlanningWorkspaceFlow:
    """
    Orchestrates one workspace read.

    Flow:
    1. No viewer → empty default workspace
    2. Fetch preferences, currency catalog and every collection concurrently
    3. Resolve base currency, display currency and locale
    4. Build the workspace
    """

    def __init__(
        self,
        record_source: FinanceRecordSource,
        settings: Optional[EngineSettings] = None,
    ):
        self._source = record_source
        self._settings = settings or get_settings().engine

    async def _fetch(self, user_id: str) -> tuple[Optional[dict], list[dict], dict]:
        collections = list(RecordCollection)
        try:
            preferences, catalog, *rows = await asyncio.gather(
                self._source.get_preferences(user_id),
                self._source.list_currency_catalog(),
                *(self._source.list_records(user_id, collection) for collection in collections),
            )
        except StorageError as e:
            logger.error(
                "record_source_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        return preferences, catalog, dict(zip(collections, rows))

    async def build(
        self,
        user_id: Optional[str],
        now_ms: int,
        display_currency: Optional[str] = None,
        locale: Optional[str] = None,
        cycle_key: Optional[str] = None,
    ) -> PlanningWorkspace:
        """
        Build the planning workspace for a viewer.

        Args:
            user_id: Signed-in viewer, or None
            now_ms: Current time in epoch milliseconds
            display_currency: Requested display currency
            locale: Requested locale
            cycle_key: Requested cycle (YYYY-MM)

        Returns:
            The assembled PlanningWorkspace

        Raises:
            StorageError: If the record source fails
        """
        if user_id is None:
            logger.info("workspace_unauthenticated")
            return build_empty_workspace(now_ms, self._settings)

        correlation_id = create_correlation_id()
        with structlog.contextvars.bound_contextvars(
            correlation_id=str(correlation_id),
            user_id=user_id,
        ):
            preferences, catalog, records = await self._fetch(user_id)
            preferences = preferences or {}

            base_currency = normalize_currency_code(
                optional_string(preferences.get("currency")),
                self._settings.default_currency,
            )
            resolved_display = normalize_currency_code(
                optional_string(display_currency)
                or optional_string(preferences.get("displayCurrency")),
                base_currency,
            )
            resolved_locale = sanitize_locale(
                optional_string(locale)
                or optional_string(preferences.get("locale"))
                or self._settings.default_locale,
                self._settings.default_locale,
            )

            workspace = build_planning_workspace(
                user_id=user_id,
                incomes=records[RecordCollection.INCOMES],
                bills=records[RecordCollection.BILLS],
                cards=records[RecordCollection.CARDS],
                loans=records[RecordCollection.LOANS],
                accounts=records[RecordCollection.ACCOUNTS],
                month_snapshots=records[RecordCollection.MONTH_CLOSE_SNAPSHOTS],
                planning_versions=records[RecordCollection.PLANNING_VERSIONS],
                planning_tasks=records[RecordCollection.PLANNING_TASKS],
                finance_states=records[RecordCollection.FINANCE_STATES],
                goals=records[RecordCollection.GOALS],
                goal_events=records[RecordCollection.GOAL_EVENTS],
                envelope_budgets=records[RecordCollection.ENVELOPE_BUDGETS],
                currency_catalog=catalog,
                base_currency=base_currency,
                display_currency=resolved_display,
                locale=resolved_locale,
                now_ms=now_ms,
                cycle_key=cycle_key,
                settings=self._settings,
            )

            logger.info(
                "workspace_forecast_built",
                selected_cycle_key=workspace.selected_cycle_key,
                planning_versions=len(workspace.planning_versions),
                goals=len(workspace.goals),
                envelopes=len(workspace.envelope_budgets),
                scenarios=len(workspace.forecast.scenarios),
                fragility_level=workspace.forecast.cashflow_fragility.level.value,
            )

        return workspace
