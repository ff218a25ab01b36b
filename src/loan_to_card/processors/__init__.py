from __future__ import annotations

from .amounts import (
    EarningsProjection,
    earnings_projection,
    expected_debt,
    fetch_max_spendable,
    max_spendable_amount,
    projected_earnings,
    strategy_implication,
)
from .strategies import load_strategy_listing, select_strategies

__all__ = [
    "EarningsProjection",
    "earnings_projection",
    "expected_debt",
    "fetch_max_spendable",
    "load_strategy_listing",
    "max_spendable_amount",
    "projected_earnings",
    "select_strategies",
    "strategy_implication",
]
