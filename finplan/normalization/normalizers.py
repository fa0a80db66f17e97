"""
Domain Normalizers

Each normalizer maps one raw storage record into a canonical entity.

Field precedence for every field:
1. The primary row
2. The JSON object in the row's `payloadJson` (legacy and later-phase fields)
3. A documented default

Normalizers are total. A malformed payload is treated as an empty
object, unknown enum values take their default, and integers are
truncated then clamped into range. Feeding a normalized entity's
camelCase dump back in yields the same entity.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from finplan.models.entities import (
    EnvelopeBudget,
    FinanceState,
    Goal,
    GoalEvent,
    PlanningTask,
    PlanningVersion,
    RecurringScenario,
)
from finplan.models.enums import (
    EnvelopeStatus,
    FinanceStateKind,
    GoalEventType,
    GoalStatus,
    PlanningTaskStatus,
    PlanningVersionStatus,
    Priority,
    ScenarioType,
    parse_ownership,
)
from finplan.normalization.scalars import (
    clamp_int,
    cycle_key_from_ms,
    is_record,
    normalize_currency_code,
    normalize_cycle_key,
    number_or,
    optional_string,
    parse_json_object,
    resolve,
    resolve_text,
    stringify_json_object,
    timestamp_ms,
    whole_months,
)
from finplan.telemetry import get_logger

logger = get_logger(__name__)

MAX_RECURRING_TAGS = 8


class NormalizationContext(BaseModel):
    """Caller-resolved values the normalizers fall back to."""

    model_config = ConfigDict(frozen=True)

    base_currency: str = "USD"
    current_cycle_key: str
    default_ownership: str = "shared"


# =============================================================================
# SHARED FIELD READERS
# =============================================================================

def _payload_of(row: Mapping, entity: str) -> dict:
    raw_payload = row.get("payloadJson")
    payload = parse_json_object(raw_payload)
    if payload is None:
        if raw_payload is not None:
            logger.debug(
                "payload_json_unparseable",
                entity=entity,
                record_id=record_identity(row),
            )
        return {}
    return payload


def record_identity(row: Mapping) -> str:
    """Storage id (`_id`), or the `id` of an already-normalized entity."""
    value = resolve(row, {}, "_id", "", aliases=("id",))
    return str(value)


def _created_at(row: Mapping) -> int:
    return timestamp_ms(number_or(resolve(row, {}, "createdAt", aliases=("_creationTime",))))


def _updated_at(row: Mapping) -> int:
    value = resolve(row, {}, "updatedAt", aliases=("createdAt", "_creationTime"))
    return timestamp_ms(number_or(value))


def _number(row: Mapping, payload: Mapping, key: str, default: float = 0.0, aliases=()) -> float:
    return number_or(resolve(row, payload, key, aliases=aliases), default)


def _positive_timestamp(value: float) -> Optional[int]:
    return timestamp_ms(value) if value > 0 else None


def _label(row: Mapping, payload: Mapping, key: str, default: str, aliases=()) -> str:
    return str(resolve(row, payload, key, default, aliases=aliases))


def _ownership(row: Mapping, payload: Mapping, key: str, context: NormalizationContext) -> str:
    return parse_ownership(resolve_text(row, payload, key), context.default_ownership)


def _currency(row: Mapping, payload: Mapping, context: NormalizationContext) -> str:
    return normalize_currency_code(resolve_text(row, payload, "currency"), context.base_currency)


# =============================================================================
# PLANNING
# =============================================================================

def normalize_recurring_scenario(
    value: Any,
    cycle_key: str,
    fallback_name: str,
) -> RecurringScenario:
    """Recurring settings from a plan's assumptions; disabled when absent."""
    if not is_record(value):
        return RecurringScenario(start_cycle_key=cycle_key)

    raw_tags = value.get("tags")
    tags = [
        tag
        for tag in (optional_string(entry) for entry in (raw_tags if isinstance(raw_tags, list) else []))
        if tag
    ][:MAX_RECURRING_TAGS]
    enabled = value.get("enabled")

    return RecurringScenario(
        enabled=bool(True if enabled is None else enabled),
        name=optional_string(value.get("name")) or fallback_name,
        interval_months=clamp_int(number_or(value.get("intervalMonths"), 1), 1, 12),
        start_cycle_key=normalize_cycle_key(value.get("startCycleKey")) or cycle_key,
        tags=tags,
    )


def normalize_planning_version(raw: Mapping, context: NormalizationContext) -> PlanningVersion:
    payload = _payload_of(raw, "planning_version")
    assumptions = (
        parse_json_object(raw.get("assumptionsJson"))
        or parse_json_object(payload.get("assumptionsJson"))
        or {}
    )
    cycle_key = (
        normalize_cycle_key(resolve_text(raw, payload, "cycleKey"))
        or context.current_cycle_key
    )
    name = _label(raw, payload, "name", f"{cycle_key} plan", aliases=("title",))

    planned_income = _number(raw, payload, "plannedIncome")
    planned_expenses = _number(raw, payload, "plannedExpenses")
    planned_savings = _number(raw, payload, "plannedSavings")
    planned_net = _number(
        raw,
        payload,
        "plannedNet",
        default=planned_savings or planned_income - planned_expenses,
    )
    scenario_type = ScenarioType.parse(resolve(raw, payload, "scenarioType"))

    return PlanningVersion(
        id=record_identity(raw),
        cycle_key=cycle_key,
        name=name,
        version_key=resolve_text(raw, payload, "versionKey", "v1"),
        status=PlanningVersionStatus.parse(resolve(raw, payload, "status")),
        scenario_type=scenario_type,
        scenario_label=scenario_type.ux_label,
        planned_income=planned_income,
        planned_expenses=planned_expenses,
        planned_savings=planned_savings,
        planned_net=planned_net,
        horizon_months=clamp_int(_number(raw, payload, "horizonMonths", 12), 1, 120),
        linked_state_id=resolve_text(raw, payload, "linkedStateId", ""),
        note=resolve_text(raw, payload, "note", ""),
        assumptions_json=stringify_json_object(assumptions),
        recurring_scenario=normalize_recurring_scenario(
            assumptions.get("recurringScenario"), cycle_key, name
        ),
        created_at=_created_at(raw),
        updated_at=_updated_at(raw),
    )


def normalize_planning_task(raw: Mapping, context: NormalizationContext) -> PlanningTask:
    payload = _payload_of(raw, "planning_task")
    return PlanningTask(
        id=record_identity(raw),
        planning_version_id=resolve_text(raw, payload, "planningVersionId", ""),
        title=_label(raw, payload, "title", "Planning task", aliases=("name",)),
        status=PlanningTaskStatus.parse(resolve(raw, payload, "status")),
        priority=Priority.parse(resolve(raw, payload, "priority")),
        owner_scope=_ownership(raw, payload, "ownerScope", context),
        due_at=_positive_timestamp(_number(raw, payload, "dueAt")),
        impact_monthly=_number(raw, payload, "impactMonthly"),
        note=resolve_text(raw, payload, "note", ""),
        linked_entity_type=resolve_text(raw, payload, "linkedEntityType", ""),
        linked_entity_id=resolve_text(raw, payload, "linkedEntityId", ""),
        created_at=_created_at(raw),
        updated_at=_updated_at(raw),
    )


# =============================================================================
# SCENARIO STATES
# =============================================================================

def normalize_finance_state(raw: Mapping, context: NormalizationContext) -> FinanceState:
    payload = _payload_of(raw, "finance_state")
    assets = _number(raw, payload, "assets")
    liabilities = _number(raw, payload, "liabilities")
    return FinanceState(
        id=record_identity(raw),
        name=_label(raw, payload, "name", "Scenario state", aliases=("title",)),
        state_kind=FinanceStateKind.parse(resolve(raw, payload, "stateKind")),
        horizon_months=clamp_int(_number(raw, payload, "horizonMonths", 12), 1, 240),
        monthly_income=_number(raw, payload, "monthlyIncome"),
        monthly_expenses=_number(raw, payload, "monthlyExpenses"),
        liquid_cash=_number(raw, payload, "liquidCash"),
        assets=assets,
        liabilities=liabilities,
        starting_net_worth=_number(raw, payload, "startingNetWorth", assets - liabilities),
        expected_return_pct=_number(raw, payload, "expectedReturnPct"),
        inflation_pct=_number(raw, payload, "inflationPct"),
        currency=_currency(raw, payload, context),
        note=resolve_text(raw, payload, "note", ""),
        created_at=_created_at(raw),
        updated_at=_updated_at(raw),
    )


# =============================================================================
# GOALS
# =============================================================================

def estimate_goal_due_label(due_at: Optional[int], months_to_target: Optional[int]) -> str:
    """YYYY-MM of the due date, else a coarse horizon from the estimate."""
    due_key = cycle_key_from_ms(due_at) if due_at else None
    if due_key:
        return due_key
    if months_to_target is None:
        return "Planned"
    if months_to_target <= 1:
        return "1 month"
    if months_to_target <= 3:
        return f"{months_to_target} months"
    return f"{math.ceil(months_to_target / 3)}Q horizon"


def normalize_goal_event(raw: Mapping, context: NormalizationContext) -> GoalEvent:
    payload = _payload_of(raw, "goal_event")
    occurred = resolve(raw, payload, "occurredAt")
    if occurred is None:
        occurred = resolve(raw, {}, "createdAt", aliases=("_creationTime",))

    event_type = GoalEventType.parse(resolve(raw, payload, "eventType"))
    amount = _number(raw, payload, "amount")
    if event_type is GoalEventType.WITHDRAWAL and amount > 0:
        amount = -amount
    elif event_type is GoalEventType.CONTRIBUTION and amount < 0:
        amount = abs(amount)

    return GoalEvent(
        id=record_identity(raw),
        goal_id=resolve_text(raw, payload, "goalId", ""),
        event_type=event_type,
        amount=amount,
        note=resolve_text(raw, payload, "note", ""),
        occurred_at=_positive_timestamp(number_or(occurred)),
        created_at=_created_at(raw),
        updated_at=_updated_at(raw),
    )


def group_goal_events_by_goal_id(events: Iterable[GoalEvent]) -> dict[str, list[GoalEvent]]:
    """Events per goal, newest occurrence first. Events without a goal are dropped."""
    by_goal_id: dict[str, list[GoalEvent]] = {}
    for event in events:
        if not event.goal_id:
            continue
        by_goal_id.setdefault(event.goal_id, []).append(event)
    for goal_id, rows in by_goal_id.items():
        by_goal_id[goal_id] = sorted(rows, key=lambda row: row.occurred_at or 0, reverse=True)
    return by_goal_id


def normalize_goal(
    raw: Mapping,
    context: NormalizationContext,
    recent_events: Iterable[GoalEvent] = (),
    recent_limit: int = 5,
) -> Goal:
    """
    Normalize a goal and derive its progress fields.

    Args:
        raw: Goal record
        context: Normalization fallbacks
        recent_events: This goal's events, newest first
        recent_limit: How many events to attach
    """
    payload = _payload_of(raw, "goal")
    events = list(recent_events)[:recent_limit]

    target_amount = max(0.0, _number(raw, payload, "targetAmount", aliases=("target",)))
    current_amount = max(0.0, _number(raw, payload, "currentAmount", aliases=("current",)))
    monthly_contribution = max(0.0, _number(raw, payload, "monthlyContribution"))
    due_at = _positive_timestamp(_number(raw, payload, "dueAt", aliases=("targetDateAt",)))
    remaining_amount = max(target_amount - current_amount, 0.0)
    months_to_target = whole_months(remaining_amount, monthly_contribution)

    last_event_at = _positive_timestamp(
        number_or(resolve(raw, {}, "lastGoalEventAt", aliases=("lastEventAt",)))
    )
    if last_event_at is None and events:
        last_event_at = events[0].occurred_at or events[0].created_at or None

    return Goal(
        id=record_identity(raw),
        title=_label(raw, payload, "title", "Goal", aliases=("name",)),
        category=resolve_text(raw, payload, "category", "general"),
        status=GoalStatus.parse(resolve(raw, payload, "status")),
        priority=Priority.parse(resolve(raw, payload, "priority")),
        ownership=_ownership(raw, payload, "ownership", context),
        target_amount=target_amount,
        current_amount=current_amount,
        monthly_contribution=monthly_contribution,
        due_at=due_at,
        due_label=(
            resolve_text(raw, {}, "dueLabel", aliases=("targetDateLabel",))
            or estimate_goal_due_label(due_at, months_to_target)
        ),
        currency=_currency(raw, payload, context),
        note=resolve_text(raw, payload, "note", ""),
        progress_pct=min(current_amount / target_amount, 1.0) if target_amount > 0 else 0.0,
        remaining_amount=remaining_amount,
        months_to_target=months_to_target,
        last_event_at=last_event_at,
        recent_events=events,
        created_at=_created_at(raw),
        updated_at=_updated_at(raw),
    )


# =============================================================================
# ENVELOPES
# =============================================================================

def normalize_envelope_budget(raw: Mapping, context: NormalizationContext) -> EnvelopeBudget:
    payload = _payload_of(raw, "envelope_budget")
    planned_amount = max(0.0, _number(raw, payload, "plannedAmount", aliases=("amount",)))
    actual_amount = max(0.0, _number(raw, payload, "actualAmount"))
    carryover_amount = _number(raw, payload, "carryoverAmount")
    total_available = planned_amount + carryover_amount

    return EnvelopeBudget(
        id=record_identity(raw),
        cycle_key=(
            normalize_cycle_key(resolve_text(raw, payload, "cycleKey"))
            or context.current_cycle_key
        ),
        category=resolve_text(raw, payload, "category", "general"),
        planned_amount=planned_amount,
        actual_amount=actual_amount,
        carryover_amount=carryover_amount,
        remaining_amount=total_available - actual_amount,
        utilization_pct=actual_amount / total_available if total_available > 0 else 0.0,
        ownership=_ownership(raw, payload, "ownership", context),
        status=EnvelopeStatus.parse(resolve(raw, payload, "status")),
        rollover=bool(resolve(raw, payload, "rollover", False)),
        note=resolve_text(raw, payload, "note", ""),
        currency=_currency(raw, payload, context),
        created_at=_created_at(raw),
        updated_at=_updated_at(raw),
    )
