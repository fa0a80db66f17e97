"""
Tests for the cashflow fragility scorer

Reference household: rent of 1200 due on the 1st, a card minimum of 50
due on the default 20th, salary received on the default 1st and 3000
of liquid cash.
"""

import pytest

from finplan.forecasting import build_due_rows, score_cashflow_fragility
from finplan.forecasting.fragility import (
    INSIGHT_CLUSTERED,
    INSIGHT_NO_PAYDAY,
    fragility_level,
    low_buffer_score,
)
from finplan.models import FragilityLevel


def _score(household, **overrides):
    args = dict(
        incomes=household["incomes"],
        bills=household["bills"],
        cards=household["cards"],
        loans=household["loans"],
        liquid_cash=3000,
        monthly_expenses=1250,
    )
    args.update(overrides)
    return score_cashflow_fragility(**args)


class TestReferenceHousehold:
    """Tests for the documented reference result."""

    def test_component_scores(self, household):
        """Test cluster, buffer and composite scores."""
        result = _score(household)
        assert result.due_cluster_score == 67
        assert result.low_buffer_score == 20
        assert result.low_buffer_days == pytest.approx(72)
        assert result.score == 41
        assert result.level is FragilityLevel.LOW

    def test_insights(self, household):
        """Test that only the clustering insight fires."""
        assert _score(household).insights == [INSIGHT_CLUSTERED]

    def test_due_rows_sorted_by_day(self, household):
        """Test the displayed due rows."""
        rows = _score(household).due_day_clusters
        assert [(row.day, row.amount, row.source) for row in rows] == [
            (1, 1200, "bill"),
            (20, 50, "card"),
        ]


class TestDueRows:
    """Tests for due-day placement."""

    def test_default_due_days(self):
        """Test bill, card and loan defaults."""
        rows = build_due_rows([{"amount": 10}], [{"minimumPayment": 5}], [{"minimumPayment": 7}])
        assert [(row.source, row.day) for row in rows] == [("bill", 1), ("card", 20), ("loan", 15)]

    def test_due_days_are_clamped(self):
        """Test out-of-range due days."""
        rows = build_due_rows([{"amount": 10, "dueDay": 45}, {"amount": 10, "dueDay": 0}], [], [])
        assert [row.day for row in rows] == [31, 1]

    def test_bill_amounts_are_monthly(self):
        """Test that bills are converted to their monthly equivalent."""
        rows = build_due_rows([{"amount": 1200, "cadence": "yearly", "dueDay": 3}], [], [])
        assert rows[0].amount == pytest.approx(100)

    def test_display_limit(self, household):
        """Test that only the earliest rows are returned."""
        bills = [{"amount": 10, "dueDay": day} for day in range(15, 0, -1)]
        result = _score(household, bills=bills, display_limit=12)
        assert len(result.due_day_clusters) == 12
        assert result.due_day_clusters[0].day == 1


class TestBufferScore:
    """Tests for the low-buffer step function."""

    @pytest.mark.parametrize(
        "liquid_cash, expected",
        [(0, 95), (500, 95), (1000, 70), (2000, 45), (4000, 20)],
    )
    def test_steps(self, household, liquid_cash, expected):
        """Test each step at 100 per day of outflow."""
        result = _score(household, liquid_cash=liquid_cash, monthly_expenses=3000)
        assert result.low_buffer_score == expected

    def test_no_outflow_scores_zero(self, household):
        """Test the zero-expense guard."""
        result = _score(household, monthly_expenses=0)
        assert result.low_buffer_score == 0
        assert result.low_buffer_days == 0

    def test_direct_step_function(self):
        """Test the step function in isolation."""
        assert low_buffer_score(6.9, 10) == 95
        assert low_buffer_score(7, 10) == 70
        assert low_buffer_score(30, 10) == 20
        assert low_buffer_score(5, 0) == 0

    def test_thin_buffer_insight(self, household):
        """Test the days-of-cover insight."""
        result = _score(household, liquid_cash=500, monthly_expenses=3000)
        assert "Liquid buffer covers about 5 days at current obligation pace." in result.insights

    def test_less_cash_never_lowers_the_score(self, household):
        """Test monotonicity in liquid cash."""
        scores = [
            _score(household, liquid_cash=cash, monthly_expenses=3000).low_buffer_score
            for cash in range(6000, -1, -250)
        ]
        assert scores == sorted(scores)


class TestClusterScore:
    """Tests for due-date clustering."""

    def test_no_paydays(self, household):
        """Test the missing-payday insight and no early-payday relief."""
        result = _score(household, incomes=[])
        assert result.due_cluster_score == 96
        assert INSIGHT_NO_PAYDAY in result.insights

    def test_late_payday_gives_no_relief(self, household):
        """Test that a payday after the 10th does not soften clustering."""
        result = _score(household, incomes=[{"amount": 4000, "receivedDay": 25}])
        assert result.due_cluster_score == 96

    def test_moving_obligations_earlier_never_lowers_the_score(self, household):
        """Test monotonicity when a bill moves from the 20th to the 5th."""
        late = [{"amount": 800, "dueDay": 20}, {"amount": 400, "dueDay": 25}]
        early = [{"amount": 800, "dueDay": 5}, {"amount": 400, "dueDay": 25}]
        late_score = _score(household, bills=late).due_cluster_score
        early_score = _score(household, bills=early).due_cluster_score
        assert early_score >= late_score

    def test_nothing_due(self, household):
        """Test the zero-obligation guard."""
        result = _score(household, bills=[], cards=[], monthly_expenses=0)
        assert result.due_cluster_score == 0
        assert result.score == 0


class TestLevels:
    """Tests for the level thresholds."""

    def test_thresholds(self):
        """Test the band edges."""
        assert fragility_level(75) is FragilityLevel.HIGH
        assert fragility_level(74) is FragilityLevel.MEDIUM
        assert fragility_level(45) is FragilityLevel.MEDIUM
        assert fragility_level(44) is FragilityLevel.LOW
