"""
Tests for the scenario projector
"""

import pytest

from finplan.forecasting import (
    build_core_baseline,
    describe_recurring_scenario,
    infer_scenario_label,
    project_core_baseline,
    project_finance_state,
    project_planning_version,
)
from finplan.models import (
    CoreBaseline,
    FinanceState,
    PlanningVersion,
    RecurringScenario,
    ScenarioSource,
    ScenarioType,
    TaskCounts,
)


@pytest.fixture
def core(household) -> CoreBaseline:
    return build_core_baseline(
        household["incomes"],
        household["bills"],
        household["cards"],
        household["loans"],
        household["accounts"],
        [],
        "USD",
    )


def _version(**overrides) -> PlanningVersion:
    fields = dict(
        id="v1",
        cycle_key="2026-04",
        name="April",
        recurring_scenario=RecurringScenario(start_cycle_key="2026-04"),
    )
    fields.update(overrides)
    return PlanningVersion(**fields)


class TestCoreScenario:
    """Tests for the live-baseline scenario."""

    def test_reference_projection(self, core):
        """Test twelve months of the reference household."""
        scenario = project_core_baseline(core)
        assert scenario.id == "baseline-core"
        assert scenario.label == "Current baseline"
        assert scenario.source is ScenarioSource.CORE_LIVE
        assert scenario.horizon_months == 12
        assert scenario.projected_liquid_cash == 36000
        assert scenario.projected_net_worth == 35500
        assert scenario.runway_months == pytest.approx(2.4)
        assert scenario.note == "Derived from live incomes, bills, cards, and loans."

    def test_no_expenses_means_no_runway(self):
        """Test the zero-expense guard."""
        scenario = project_core_baseline(CoreBaseline(base_currency="USD", liquid_cash=100))
        assert scenario.runway_months is None

    def test_liquid_cash_never_negative(self):
        """Test the floor on projected liquid cash."""
        core = CoreBaseline(
            base_currency="USD", liquid_cash=100, monthly_expenses=500, monthly_net=-500
        )
        scenario = project_core_baseline(core)
        assert scenario.projected_liquid_cash == 0
        assert scenario.projected_net_worth == -6000


class TestPlanningVersionProjection:
    """Tests for plan projections."""

    def test_planned_values(self, core):
        """Test a plan with its own income, expenses and net."""
        version = _version(
            planned_income=5000, planned_expenses=3000, planned_net=1500, horizon_months=6,
            scenario_type=ScenarioType.RECOVERY,
        )
        scenario = project_planning_version(version, core)
        assert scenario.id == "plan-v1"
        assert scenario.label == "April (2026-04)"
        assert scenario.scenario_label == "Recovery month"
        assert scenario.source is ScenarioSource.PLANNING_VERSION
        assert scenario.monthly_net == 1500
        assert scenario.projected_liquid_cash == 12000
        assert scenario.projected_net_worth == 11500
        assert scenario.runway_months == pytest.approx(4.0)
        assert scenario.linked_id == "v1"

    def test_zero_values_fall_back_to_baseline(self, core):
        """Test that an empty plan behaves like the baseline."""
        scenario = project_planning_version(_version(), core)
        assert scenario.monthly_income == 4000
        assert scenario.monthly_expenses == 1250
        assert scenario.monthly_net == 2750
        assert scenario.horizon_months == 12

    def test_note_falls_back_to_open_tasks(self, core):
        """Test the open-task note."""
        version = _version(task_counts=TaskCounts(total=3, open=2, done=1))
        assert project_planning_version(version, core).note == "2 open planning tasks"
        assert project_planning_version(_version(note="lean"), core).note == "lean"

    def test_recurring_summary(self, core):
        """Test that enabled recurrence is summarized."""
        recurring = RecurringScenario(
            enabled=True, name="Reset", interval_months=3, start_cycle_key="2026-04",
            tags=["food", "kids"],
        )
        scenario = project_planning_version(_version(recurring_scenario=recurring), core)
        assert scenario.recurring_summary == "Reset · Quarterly · food, kids"


class TestRecurringSummary:
    """Tests for the recurrence one-liner."""

    @pytest.mark.parametrize(
        "interval, cadence",
        [(1, "Monthly"), (2, "Every 2 months"), (3, "Quarterly"), (6, "Every 6 months")],
    )
    def test_cadence_wording(self, interval, cadence):
        """Test wording per interval."""
        recurring = RecurringScenario(
            enabled=True, name="Plan", interval_months=interval, start_cycle_key="2026-01"
        )
        assert describe_recurring_scenario(recurring) == f"Plan · {cadence}"

    def test_disabled_has_no_summary(self):
        """Test that disabled recurrence is not described."""
        assert describe_recurring_scenario(RecurringScenario(start_cycle_key="2026-01")) is None


class TestFinanceStateProjection:
    """Tests for finance-state projections."""

    def test_growth_and_fallbacks(self, core):
        """Test real-return growth with baseline fallbacks."""
        state = FinanceState(
            id="s1",
            name="Sabbatical",
            monthly_expenses=5000,
            liquid_cash=20000,
            assets=100000,
            expected_return_pct=7,
            inflation_pct=2,
        )
        scenario = project_finance_state(state, core)
        assert scenario.id == "state-s1"
        assert scenario.label == "Sabbatical"
        assert scenario.source is ScenarioSource.FINANCE_STATE
        assert scenario.monthly_income == 4000
        assert scenario.monthly_net == -1000
        assert scenario.scenario_label == "Tight month"
        # 100000 - 500 - 12000 + 100000 * 0.05
        assert scenario.projected_net_worth == pytest.approx(92500)
        assert scenario.projected_liquid_cash == 8000
        assert scenario.runway_months == pytest.approx(1.6)
        assert scenario.expected_return_pct == 7
        assert scenario.inflation_pct == 2

    def test_explicit_starting_net_worth(self, core):
        """Test that a stated starting net worth is used as-is."""
        state = FinanceState(
            id="s2", monthly_income=3000, monthly_expenses=2000, starting_net_worth=50000,
            horizon_months=24,
        )
        scenario = project_finance_state(state, core)
        # growth is zero without return or inflation
        assert scenario.projected_net_worth == 74000
        assert scenario.projected_liquid_cash == 24000


class TestScenarioLabels:
    """Tests for inferred month labels."""

    def test_labels(self):
        """Test each band."""
        assert infer_scenario_label(-1, 100) == "Tight month"
        assert infer_scenario_label(300, 1000) == "Recovery month"
        assert infer_scenario_label(100, 1000) == "Normal month"
        assert infer_scenario_label(100, 0) == "Normal month"
