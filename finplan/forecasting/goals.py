"""
Goal Forecaster

Estimates when each goal completes at its current monthly
contribution and whether that lands on or before its due date.
"""

from collections.abc import Sequence
from typing import Optional

from finplan.models.entities import Goal, GoalEvent
from finplan.models.forecast import GoalForecast
from finplan.normalization.scalars import month_offset_ms, whole_months


def months_to_target(remaining_amount: float, monthly_contribution: float) -> Optional[int]:
    """Whole months of contributions needed, or None when contributions never get there."""
    return whole_months(remaining_amount, monthly_contribution)


def forecast_goal(
    goal: Goal,
    now_ms: int,
    recent_events: Sequence[GoalEvent] = (),
    recent_limit: int = 5,
) -> GoalForecast:
    remaining = max(goal.target_amount - goal.current_amount, 0.0)
    months = months_to_target(remaining, goal.monthly_contribution)
    # None also when the completion lies past the last representable month
    projected_at = month_offset_ms(now_ms, months) if months is not None else None

    if projected_at is None:
        on_track = False
    elif goal.due_at is None:
        on_track = True
    else:
        on_track = projected_at <= goal.due_at

    return GoalForecast(
        id=goal.id,
        title=goal.title,
        category=goal.category,
        status=goal.status,
        priority=goal.priority,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        monthly_contribution=goal.monthly_contribution,
        progress_pct=goal.progress_pct,
        remaining_amount=remaining,
        months_to_target=months,
        due_at=goal.due_at,
        projected_completion_at=projected_at,
        on_track=on_track,
        recent_events=list(recent_events)[:recent_limit],
    )


def forecast_goals(
    goals: Sequence[Goal],
    events_by_goal_id: dict[str, list[GoalEvent]],
    now_ms: int,
    recent_limit: int = 5,
) -> list[GoalForecast]:
    """Forecast every goal, attaching its newest events."""
    return [
        forecast_goal(goal, now_ms, events_by_goal_id.get(goal.id, []), recent_limit)
        for goal in goals
    ]
