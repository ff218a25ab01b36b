from __future__ import annotations

from decimal import Decimal

import pytest
from fakes import USDC_VAULT, WETH_GATEWAY_VAULT
from rich.console import Console

from loan_to_card.domain import (
    Mode,
    PipelineStepResult,
    RatedStrategy,
    Strategy,
    StrategyListing,
    TransactionPlan,
)
from loan_to_card.errors import InputValidationError, PipelineFailure, TransactionFailure
from loan_to_card.pipeline.events import PipelineOutcome, PipelineState
from loan_to_card.report import (
    build_summary,
    render_failure,
    render_outcome,
    render_strategies,
    render_summary,
)

USDC_STRATEGY = Strategy(
    address=USDC_VAULT, label="Aave USDC", underlying_symbol="USDC", yield_symbol="aOptUSDC"
)
WETH_STRATEGY = Strategy(
    address=WETH_GATEWAY_VAULT,
    label="Aave WETH",
    underlying_symbol="WETH",
    yield_symbol="aOptWETH",
)


def _console() -> Console:
    return Console(record=True, width=160, color_system=None)


def test_top_up_summary():
    plan = TransactionPlan(Mode.TOP_UP, "usdc", "100", USDC_VAULT, holytag="alice")

    summary = build_summary(plan, RatedStrategy(USDC_STRATEGY, Decimal("8")))

    assert summary.type == "Top-up"
    assert summary.amount == Decimal("100")
    assert summary.token == "USDC"
    assert summary.collateral == "Aave USDC"
    assert summary.apr == "8"
    assert summary.expected_debt == Decimal("50")
    assert summary.loan_asset == "alUSD"
    assert summary.holytag == "alice"
    assert summary.earnings is not None
    assert summary.earnings.yearly > 0
    assert "balanced returns" in summary.implication


def test_borrow_summary_without_rate():
    plan = TransactionPlan(Mode.BORROW_ONLY, "ETH", "1", WETH_GATEWAY_VAULT, holytag="ignored")

    summary = build_summary(plan, RatedStrategy(WETH_STRATEGY, None))

    assert summary.type == "Borrow"
    assert summary.loan_asset == "alETH"
    assert summary.apr == "N/A"
    assert summary.earnings is None
    assert summary.implication is None
    assert summary.holytag is None


def test_summary_rejects_invalid_amount():
    plan = TransactionPlan(Mode.BORROW_ONLY, "USDC", "lots", USDC_VAULT)
    with pytest.raises(InputValidationError, match="valid deposit amount"):
        build_summary(plan, RatedStrategy(USDC_STRATEGY, Decimal("8")))


def test_render_summary_shows_projection():
    console = _console()
    plan = TransactionPlan(Mode.TOP_UP, "USDC", "100", USDC_VAULT, holytag="alice")

    render_summary(build_summary(plan, RatedStrategy(USDC_STRATEGY, Decimal("8"))), console)

    text = console.export_text()
    assert "Confirm Top-up" in text
    assert "100 USDC" in text
    assert "alUSD" in text
    assert "Yearly" in text
    assert "alice" in text


def test_render_strategies_states():
    console = _console()
    render_strategies(
        StrategyListing(strategies=[RatedStrategy(USDC_STRATEGY, None)]), console
    )
    render_strategies(StrategyListing(strategies=[]), console)
    render_strategies(StrategyListing(strategies=[], error="rate API down"), console)

    text = console.export_text()
    assert "Aave USDC" in text
    assert "N/A" in text
    assert "No strategies available." in text
    assert "Failed to load strategies: rate API down" in text


def test_render_outcome_shows_fiat_value():
    console = _console()
    outcome = PipelineOutcome(
        mode=Mode.TOP_UP,
        state=PipelineState.COMPLETED,
        steps={"mint": PipelineStepResult("0xabc", 50 * 10**18)},
        fiat_amount=Decimal("46.50"),
    )

    render_outcome(outcome, console)

    text = console.export_text()
    assert "0xabc" in text
    assert "EUR 46.50" in text


def test_render_clean_failure():
    console = _console()
    failure = PipelineFailure("Validating", InputValidationError("Please enter a Holytag."), {})

    render_failure(failure, console)

    text = console.export_text()
    assert "Please enter a Holytag." in text
    assert "No on-chain changes were made" in text


def test_render_partial_failure_lists_completed_steps():
    console = _console()
    failure = PipelineFailure(
        "Minting",
        TransactionFailure("Mint transaction failed", tx_hash="0x" + "ab" * 32),
        {"deposit": PipelineStepResult("0x" + "cd" * 32, 100_000_000)},
    )

    render_failure(failure, console)

    text = console.export_text()
    assert "Partially completed; failed at Minting" in text
    assert "deposit" in text
    assert "100,000,000" in text
    assert "No on-chain changes were made" not in text


def test_render_failure_with_unconfirmed_transaction():
    console = _console()
    failure = PipelineFailure(
        "AwaitingDepositReceipt",
        TransactionFailure("receipt timed out", tx_hash="0x" + "ef" * 32),
        {},
        {"deposit": "0x" + "ef" * 32},
    )

    render_failure(failure, console)

    text = console.export_text()
    assert "Partially completed; failed at AwaitingDepositReceipt" in text
    assert "unconfirmed" in text
    assert "No on-chain changes were made" not in text
