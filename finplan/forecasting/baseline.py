"""
Baseline Aggregator

Combines the live recurring schedules and account balances into a
single CoreBaseline. The most recently updated month-close snapshot,
when present, replaces the computed net worth and liabilities; income,
expenses and assets always come from the live rows.
"""

import math
from collections.abc import Mapping, Sequence

from finplan.forecasting.cadence import minimum_payment, scheduled_monthly_amount
from finplan.models.forecast import CoreBaseline
from finplan.normalization.scalars import (
    number_or,
    optional_string,
    parse_json_object,
    sort_most_recent_first,
)

LIQUID_ACCOUNT_MARKERS = ("checking", "savings")
NON_ASSET_ACCOUNT_TYPES = ("debt", "credit")


def _account_type(row: Mapping) -> str:
    return (optional_string(row.get("type")) or "").lower()


def _balance(row: Mapping, field: str = "balance") -> float:
    return max(0.0, number_or(row.get(field)))


def is_liquid_account(row: Mapping) -> bool:
    """Explicitly liquid, or a checking/savings account by type."""
    account_type = _account_type(row)
    return row.get("liquid") is True or any(
        marker in account_type for marker in LIQUID_ACCOUNT_MARKERS
    )


def build_core_baseline(
    incomes: Sequence[Mapping],
    bills: Sequence[Mapping],
    cards: Sequence[Mapping],
    loans: Sequence[Mapping],
    accounts: Sequence[Mapping],
    month_snapshots: Sequence[Mapping],
    base_currency: str,
) -> CoreBaseline:
    """Aggregate raw schedule and balance rows into the live baseline."""
    monthly_income = sum(scheduled_monthly_amount(row) for row in incomes)
    monthly_bills = sum(scheduled_monthly_amount(row) for row in bills)
    monthly_card_minimums = sum(minimum_payment(row) for row in cards)
    monthly_loan_minimums = sum(minimum_payment(row) for row in loans)
    monthly_expenses = monthly_bills + monthly_card_minimums + monthly_loan_minimums

    liquid_cash = sum(_balance(row) for row in accounts if is_liquid_account(row))
    total_assets = sum(
        _balance(row)
        for row in accounts
        if _account_type(row) not in NON_ASSET_ACCOUNT_TYPES
    )
    liabilities = (
        sum(_balance(row, "usedLimit") for row in cards)
        + sum(_balance(row) for row in loans)
    )
    net_worth = total_assets - liabilities

    snapshots = sort_most_recent_first(month_snapshots)
    summary = parse_json_object(snapshots[0].get("summary")) if snapshots else None
    if summary is not None:
        snapshot_net_worth = number_or(summary.get("netWorth"), float("nan"))
        snapshot_liabilities = number_or(summary.get("totalLiabilities"), float("nan"))
        if math.isfinite(snapshot_net_worth):
            net_worth = snapshot_net_worth
        if math.isfinite(snapshot_liabilities):
            liabilities = snapshot_liabilities

    return CoreBaseline(
        base_currency=base_currency,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_bills=monthly_bills,
        monthly_card_minimums=monthly_card_minimums,
        monthly_loan_minimums=monthly_loan_minimums,
        monthly_net=monthly_income - monthly_expenses,
        liquid_cash=liquid_cash,
        total_assets=total_assets,
        liabilities=liabilities,
        net_worth=net_worth,
    )
