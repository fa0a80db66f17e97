"""Spending Lens Classifier: fixed / variable / controllable monthly spend."""

from collections.abc import Mapping, Sequence

from finplan.forecasting.cadence import minimum_payment, scheduled_monthly_amount
from finplan.models.entities import EnvelopeBudget
from finplan.models.forecast import SpendingLens, SpendingShares
from finplan.normalization.scalars import optional_string

FIXED_BILL_CATEGORIES = ("rent", "mortgage", "insurance", "tax", "council", "utilities")


def is_fixed_bill(row: Mapping) -> bool:
    """Category contains one of the fixed-cost markers (case-insensitive)."""
    category = (optional_string(row.get("category")) or "").lower()
    return any(marker in category for marker in FIXED_BILL_CATEGORIES)


def classify_spending(
    bills: Sequence[Mapping],
    cards: Sequence[Mapping],
    loans: Sequence[Mapping],
    envelopes: Sequence[EnvelopeBudget],
    selected_cycle_key: str,
) -> SpendingLens:
    fixed_bills = sum(scheduled_monthly_amount(row) for row in bills if is_fixed_bill(row))
    variable_bills = sum(scheduled_monthly_amount(row) for row in bills if not is_fixed_bill(row))
    minimums = sum(minimum_payment(row) for row in cards) + sum(minimum_payment(row) for row in loans)
    controllable = sum(
        max(0.0, envelope.planned_amount)
        for envelope in envelopes
        if envelope.cycle_key == selected_cycle_key
    )

    fixed = fixed_bills + minimums
    variable = variable_bills
    total = fixed + variable + controllable

    def share(part: float) -> float:
        return part / total if total > 0 else 0.0

    return SpendingLens(
        fixed=fixed,
        variable=variable,
        controllable=controllable,
        total=total,
        shares=SpendingShares(
            fixed=share(fixed),
            variable=share(variable),
            controllable=share(controllable),
        ),
    )
