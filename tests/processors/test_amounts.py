from __future__ import annotations

from decimal import Decimal

import pytest
from fakes import OWNER, FakeChainClient

from loan_to_card.processors.amounts import (
    earnings_projection,
    expected_debt,
    fetch_max_spendable,
    max_spendable_amount,
    projected_earnings,
    strategy_implication,
)


def test_earnings_grow_with_time_and_rate():
    short = projected_earnings(1000, 8, 7)
    long = projected_earnings(1000, 8, 30)
    higher = projected_earnings(1000, 12, 30)

    assert Decimal(0) < short < long < higher


def test_no_earnings_for_empty_principal_or_zero_days():
    assert projected_earnings(0, 8, 365) == 0
    assert projected_earnings(-5, 8, 365) == 0
    assert projected_earnings(1000, 8, 0) == 0


def test_negative_days_rejected():
    with pytest.raises(ValueError, match="non-negative"):
        projected_earnings(1000, 8, -1)


def test_yearly_projection_beats_simple_interest():
    projection = earnings_projection(Decimal("1000"), Decimal("10"))

    assert projection.daily < projection.weekly < projection.monthly < projection.yearly
    assert projection.yearly > Decimal("100")
    assert projection.yearly < Decimal("106")


def test_expected_debt_is_half_the_principal():
    assert expected_debt("100") == Decimal("50")
    assert expected_debt(Decimal("0.000001")) == Decimal("0.0000005")


def test_native_balance_keeps_gas_reserve(chain_config):
    chain = chain_config.chain
    assert max_spendable_amount("1", chain, "ETH") == Decimal("0.999")
    assert max_spendable_amount("0.0005", chain, "ETH") == 0
    assert max_spendable_amount("1", chain, "WETH") == Decimal("1")
    assert max_spendable_amount("1", chain, "ETH", Decimal("0.1")) == Decimal("0.9")


@pytest.mark.parametrize(
    "apr,fragment",
    [
        (3, "low returns"),
        (5, "low returns"),
        (Decimal("5.01"), "balanced returns"),
        (10, "balanced returns"),
        (15, "high returns"),
        (16, "Invalid APR value."),
    ],
)
def test_strategy_implication_bands(apr, fragment):
    assert fragment in strategy_implication(apr)


@pytest.mark.asyncio
async def test_fetch_max_spendable_reads_native_balance(chain_config):
    client = FakeChainClient(native_balance=2 * 10**18)

    amount = await fetch_max_spendable(client, OWNER, chain_config, "ETH")

    assert amount == Decimal("1.999")
    assert client.journal == [("read", "balance")]


@pytest.mark.asyncio
async def test_fetch_max_spendable_reads_token_balance(chain_config):
    client = FakeChainClient(token_balance=12_500_000)

    amount = await fetch_max_spendable(client, OWNER, chain_config, "USDC")

    assert amount == Decimal("12.5")
    assert client.journal == [("read", "balanceOf")]
