"""Confirmation summary shown before a plan is executed."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from ..domain import DepositAsset, Mode, RatedStrategy, TransactionPlan
from ..errors import InputValidationError
from ..processors.amounts import (
    EarningsProjection,
    earnings_projection,
    expected_debt,
    strategy_implication,
)
from ..registry import synth_for


@dataclass(frozen=True)
class ConfirmationSummary:
    type: str
    amount: Decimal
    token: str
    collateral: str
    apr: str
    earnings: EarningsProjection | None
    expected_debt: Decimal
    loan_asset: str
    holytag: str | None = None
    implication: str | None = None


def build_summary(plan: TransactionPlan, rated: RatedStrategy) -> ConfirmationSummary:
    """Describe what executing ``plan`` into ``rated`` will do.

    Earnings are left out when the strategy's rate is unavailable.
    """
    try:
        amount = Decimal(str(plan.deposit_amount).strip())
    except InvalidOperation:
        raise InputValidationError("Please enter a valid deposit amount.") from None
    synth = synth_for(plan.deposit_asset)
    apr = rated.apr
    return ConfirmationSummary(
        type="Top-up" if plan.mode is Mode.TOP_UP else "Borrow",
        amount=amount,
        token=DepositAsset.parse(plan.deposit_asset).value,
        collateral=rated.strategy.label,
        apr=rated.apr_display,
        earnings=earnings_projection(amount, apr) if apr is not None else None,
        expected_debt=expected_debt(amount),
        loan_asset=synth.value,
        holytag=plan.holytag if plan.mode is Mode.TOP_UP else None,
        implication=strategy_implication(apr) if apr is not None else None,
    )

