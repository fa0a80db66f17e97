"""
Shared fixtures for the finplan test suite.

Provides:
- A fixed "now" (2026-03-15T12:00:00Z) so cycle keys and goal
  projections are deterministic
- A normalization context for the current cycle
- The reference household: one salary, rent, one card, one checking account
"""

import pytest

from finplan.config import EngineSettings
from finplan.normalization import NormalizationContext

# 2026-03-15T12:00:00Z
NOW_MS = 1_773_576_000_000
CURRENT_CYCLE_KEY = "2026-03"
DAY_MS = 86_400_000


@pytest.fixture
def now_ms() -> int:
    return NOW_MS


@pytest.fixture
def engine_settings() -> EngineSettings:
    return EngineSettings(default_currency="USD", default_locale="en-US")


@pytest.fixture
def context() -> NormalizationContext:
    return NormalizationContext(base_currency="USD", current_cycle_key=CURRENT_CYCLE_KEY)


@pytest.fixture
def household() -> dict:
    """Raw rows for the reference household."""
    return {
        "incomes": [{"_id": "inc_1", "amount": 4000, "cadence": "monthly"}],
        "bills": [
            {"_id": "bill_1", "amount": 1200, "cadence": "monthly", "dueDay": 1, "category": "rent"}
        ],
        "cards": [{"_id": "card_1", "minimumPayment": 50, "usedLimit": 500}],
        "loans": [],
        "accounts": [{"_id": "acc_1", "balance": 3000, "type": "checking", "liquid": True}],
    }
