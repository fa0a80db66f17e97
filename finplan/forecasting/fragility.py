"""
Cashflow Fragility Scorer

Scores the risk of a short-term cash shortfall on a 0-100 scale:

    score = due_cluster_score * 0.45 + low_buffer_score * 0.55

- due_cluster_score: share of monthly obligations due on days 1-10,
  softened by 30% when some income lands in the same window
- low_buffer_score: step function of how many days liquid cash covers
  at the current daily outflow
"""

from collections.abc import Mapping, Sequence

from finplan.forecasting.cadence import minimum_payment, scheduled_monthly_amount
from finplan.models.enums import FragilityLevel
from finplan.models.forecast import DueRow, FragilityResult
from finplan.normalization.scalars import clamp_int, number_or, round_half_up

EARLY_WINDOW_LAST_DAY = 10
EARLY_PAYDAY_FACTOR = 0.7
CLUSTER_WEIGHT = 0.45
BUFFER_WEIGHT = 0.55
DAYS_PER_MONTH = 30

DEFAULT_DUE_DAY = {"bill": 1, "card": 20, "loan": 15}

# (days of cover below, score); anything beyond scores BUFFER_FLOOR_SCORE
BUFFER_STEPS = ((7, 95), (14, 70), (30, 45))
BUFFER_FLOOR_SCORE = 20

INSIGHT_CLUSTERED = (
    "Obligations are clustered early in the month; cash pressure spikes before mid-cycle."
)
INSIGHT_NO_PAYDAY = "No paycheck cadence found for fragility balancing."


def _due_day(row: Mapping, source: str) -> int:
    return clamp_int(number_or(row.get("dueDay"), DEFAULT_DUE_DAY[source]), 1, 31)


def build_due_rows(
    bills: Sequence[Mapping],
    cards: Sequence[Mapping],
    loans: Sequence[Mapping],
) -> list[DueRow]:
    """Place every obligation on its due day with its monthly amount."""
    rows = [
        DueRow(day=_due_day(row, "bill"), amount=scheduled_monthly_amount(row), source="bill")
        for row in bills
    ]
    rows += [
        DueRow(day=_due_day(row, "card"), amount=minimum_payment(row), source="card")
        for row in cards
    ]
    rows += [
        DueRow(day=_due_day(row, "loan"), amount=minimum_payment(row), source="loan")
        for row in loans
    ]
    return rows


def low_buffer_score(low_buffer_days: float, daily_outflow: float) -> int:
    if daily_outflow <= 0:
        return 0
    for limit, score in BUFFER_STEPS:
        if low_buffer_days < limit:
            return score
    return BUFFER_FLOOR_SCORE


def fragility_level(score: int) -> FragilityLevel:
    if score >= 75:
        return FragilityLevel.HIGH
    if score >= 45:
        return FragilityLevel.MEDIUM
    return FragilityLevel.LOW


def score_cashflow_fragility(
    incomes: Sequence[Mapping],
    bills: Sequence[Mapping],
    cards: Sequence[Mapping],
    loans: Sequence[Mapping],
    liquid_cash: float,
    monthly_expenses: float,
    display_limit: int = 12,
) -> FragilityResult:
    """
    Score cashflow fragility.

    Args:
        incomes: Raw income rows (only receivedDay is read)
        bills, cards, loans: Raw obligation rows
        liquid_cash: Baseline liquid cash
        monthly_expenses: Baseline monthly expenses
        display_limit: How many earliest-due rows to return

    Returns:
        FragilityResult with component scores and insight strings
    """
    due_rows = build_due_rows(bills, cards, loans)
    payday_rows = [clamp_int(number_or(row.get("receivedDay"), 1), 1, 31) for row in incomes]

    total_due = sum(row.amount for row in due_rows)
    early_exposure = sum(row.amount for row in due_rows if row.day <= EARLY_WINDOW_LAST_DAY)
    cluster_share = early_exposure / total_due if total_due > 0 else 0.0
    if any(day <= EARLY_WINDOW_LAST_DAY for day in payday_rows):
        cluster_share *= EARLY_PAYDAY_FACTOR
    due_cluster_score = min(100, round_half_up(cluster_share * 100))

    daily_outflow = monthly_expenses / DAYS_PER_MONTH if monthly_expenses > 0 else 0.0
    buffer_days = liquid_cash / daily_outflow if daily_outflow > 0 else 0.0
    buffer_score = low_buffer_score(buffer_days, daily_outflow)

    score = round_half_up(due_cluster_score * CLUSTER_WEIGHT + buffer_score * BUFFER_WEIGHT)

    insights = []
    if due_cluster_score >= 55:
        insights.append(INSIGHT_CLUSTERED)
    if 0 < buffer_days < 14:
        covered = max(1, round_half_up(buffer_days))
        insights.append(
            f"Liquid buffer covers about {covered} days at current obligation pace."
        )
    if not payday_rows:
        insights.append(INSIGHT_NO_PAYDAY)

    return FragilityResult(
        score=score,
        level=fragility_level(score),
        due_cluster_score=due_cluster_score,
        low_buffer_score=buffer_score,
        low_buffer_days=buffer_days,
        due_day_clusters=sorted(due_rows, key=lambda row: row.day)[:display_limit],
        insights=insights,
    )
