"""Forecast computation package."""

from finplan.forecasting.baseline import build_core_baseline, is_liquid_account
from finplan.forecasting.cadence import (
    minimum_payment,
    monthly_equivalent,
    scheduled_monthly_amount,
)
from finplan.forecasting.fragility import build_due_rows, score_cashflow_fragility
from finplan.forecasting.goals import forecast_goal, forecast_goals, months_to_target
from finplan.forecasting.scenarios import (
    describe_recurring_scenario,
    infer_scenario_label,
    project_core_baseline,
    project_finance_state,
    project_planning_version,
)
from finplan.forecasting.spending import classify_spending, is_fixed_bill

__all__ = [
    "build_core_baseline",
    "build_due_rows",
    "classify_spending",
    "describe_recurring_scenario",
    "forecast_goal",
    "forecast_goals",
    "infer_scenario_label",
    "is_fixed_bill",
    "is_liquid_account",
    "minimum_payment",
    "monthly_equivalent",
    "months_to_target",
    "project_core_baseline",
    "project_finance_state",
    "project_planning_version",
    "scheduled_monthly_amount",
    "score_cashflow_fragility",
]
