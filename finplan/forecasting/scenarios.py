"""
Scenario Projector

Projects net worth and liquid cash over a horizon from three sources:
the live baseline itself, a saved planning version, or a finance-state
snapshot. Planned values that are zero fall back to the baseline.
"""

import math
from typing import Optional

from finplan.models.entities import FinanceState, PlanningVersion, RecurringScenario
from finplan.models.enums import ScenarioSource
from finplan.models.forecast import CoreBaseline, ForecastScenario

CORE_SCENARIO_ID = "baseline-core"
CORE_SCENARIO_NOTE = "Derived from live incomes, bills, cards, and loans."
RECOVERY_NET_RATIO = 0.2


def _runway(liquid_cash: float, monthly_expenses: float) -> Optional[float]:
    return liquid_cash / monthly_expenses if monthly_expenses > 0 else None


def infer_scenario_label(monthly_net: float, monthly_expenses: float) -> str:
    """Month label for sources without an explicit scenario type."""
    if monthly_net < 0:
        return "Tight month"
    if monthly_expenses > 0 and monthly_net / monthly_expenses >= RECOVERY_NET_RATIO:
        return "Recovery month"
    return "Normal month"


def describe_recurring_scenario(recurring: RecurringScenario) -> Optional[str]:
    """One-line summary, e.g. 'Groceries reset · Quarterly · food, kids'."""
    if not recurring.enabled:
        return None
    if recurring.interval_months == 1:
        cadence = "Monthly"
    elif recurring.interval_months == 2:
        cadence = "Every 2 months"
    elif recurring.interval_months == 3:
        cadence = "Quarterly"
    else:
        cadence = f"Every {recurring.interval_months} months"
    tags = f" · {', '.join(recurring.tags)}" if recurring.tags else ""
    return f"{recurring.name} · {cadence}{tags}"


def project_core_baseline(core: CoreBaseline, horizon_months: int = 12) -> ForecastScenario:
    """The 'no plan selected' comparison point."""
    horizon = max(1, horizon_months)
    return ForecastScenario(
        id=CORE_SCENARIO_ID,
        label="Current baseline",
        scenario_label="Normal month",
        source=ScenarioSource.CORE_LIVE,
        horizon_months=horizon,
        monthly_income=core.monthly_income,
        monthly_expenses=core.monthly_expenses,
        monthly_net=core.monthly_net,
        projected_net_worth=core.net_worth + core.monthly_net * horizon,
        projected_liquid_cash=max(0.0, core.liquid_cash + core.monthly_net * horizon),
        runway_months=(
            max(0.0, core.liquid_cash / core.monthly_expenses)
            if core.monthly_expenses > 0
            else None
        ),
        note=CORE_SCENARIO_NOTE,
    )


def project_planning_version(version: PlanningVersion, core: CoreBaseline) -> ForecastScenario:
    """Project a saved plan on top of the live balance sheet."""
    monthly_income = version.planned_income or core.monthly_income
    monthly_expenses = version.planned_expenses or core.monthly_expenses
    if math.isfinite(version.planned_net) and version.planned_net != 0:
        monthly_net = version.planned_net
    else:
        monthly_net = monthly_income - monthly_expenses
    horizon = max(1, version.horizon_months or 12)
    projected_liquid_cash = max(0.0, core.liquid_cash + monthly_net * horizon)

    return ForecastScenario(
        id=f"plan-{version.id}",
        label=f"{version.name} ({version.cycle_key})",
        scenario_label=version.scenario_type.ux_label,
        source=ScenarioSource.PLANNING_VERSION,
        horizon_months=horizon,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_net=monthly_net,
        projected_net_worth=core.net_worth + monthly_net * horizon,
        projected_liquid_cash=projected_liquid_cash,
        runway_months=_runway(projected_liquid_cash, monthly_expenses),
        note=version.note or f"{version.task_counts.open} open planning tasks",
        linked_id=version.id,
        recurring_summary=describe_recurring_scenario(version.recurring_scenario),
    )


def project_finance_state(state: FinanceState, core: CoreBaseline) -> ForecastScenario:
    """
    Project a finance-state snapshot.

    Net worth grows by monthly net plus a real-return term on starting
    assets: assets * (return% - inflation%) / 100 * horizon / 12.
    """
    horizon = max(1, state.horizon_months or 12)
    monthly_income = state.monthly_income or core.monthly_income
    monthly_expenses = state.monthly_expenses or core.monthly_expenses
    monthly_net = monthly_income - monthly_expenses
    starting_assets = state.assets or core.total_assets
    starting_liabilities = state.liabilities or core.liabilities
    starting_net_worth = state.starting_net_worth or starting_assets - starting_liabilities
    annual_real_return = (state.expected_return_pct - state.inflation_pct) / 100
    growth = starting_assets * annual_real_return * (horizon / 12)
    projected_liquid_cash = max(0.0, state.liquid_cash + monthly_net * horizon)

    return ForecastScenario(
        id=f"state-{state.id}",
        label=state.name,
        scenario_label=infer_scenario_label(monthly_net, monthly_expenses),
        source=ScenarioSource.FINANCE_STATE,
        horizon_months=horizon,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_net=monthly_net,
        projected_net_worth=starting_net_worth + monthly_net * horizon + growth,
        projected_liquid_cash=projected_liquid_cash,
        runway_months=_runway(projected_liquid_cash, monthly_expenses),
        expected_return_pct=state.expected_return_pct,
        inflation_pct=state.inflation_pct,
        note=state.note,
        linked_id=state.id,
    )
