"""Amount math: earnings projections, debt sizing and spendable balances."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..abi import load_erc20_abi
from ..chains import ChainConfig
from ..clients.chain import ChainClient
from ..constants import LOAN_TO_VALUE
from ..domain import Chain, DepositAsset
from ..registry import token_for

DEFAULT_GAS_RESERVE = Decimal("0.001")

PROJECTION_DAYS = {"daily": 1, "weekly": 7, "monthly": 30, "yearly": 365}


@dataclass(frozen=True)
class EarningsProjection:
    daily: Decimal
    weekly: Decimal
    monthly: Decimal
    yearly: Decimal


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def projected_earnings(
    principal: Decimal | int | float | str,
    annual_rate_percent: Decimal | int | float | str,
    days: int,
) -> Decimal:
    """Compound earnings on ``principal`` after ``days`` of daily compounding.

    ``principal * ((1 + rate / 36500) ** days - 1)``; zero for a non-positive
    principal.

    Raises:
        ValueError: If ``days`` is negative.
    """
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")
    principal = _to_decimal(principal)
    if principal <= 0 or days == 0:
        return Decimal(0)
    daily_rate = _to_decimal(annual_rate_percent) / Decimal(36500)
    return principal * ((1 + daily_rate) ** days - 1)


def earnings_projection(
    principal: Decimal | int | float | str,
    annual_rate_percent: Decimal | int | float | str,
) -> EarningsProjection:
    """Daily, weekly, monthly and yearly projections for one deposit."""
    return EarningsProjection(
        **{
            period: projected_earnings(principal, annual_rate_percent, days)
            for period, days in PROJECTION_DAYS.items()
        }
    )


def expected_debt(principal: Decimal | int | float | str) -> Decimal:
    """Debt minted against ``principal`` at the fixed loan-to-value."""
    return _to_decimal(principal) * LOAN_TO_VALUE


def max_spendable_amount(
    balance: Decimal | int | float | str,
    chain: Chain,
    asset: DepositAsset | str,
    gas_reserve: Decimal = DEFAULT_GAS_RESERVE,
) -> Decimal:
    """Largest depositable amount; native currency keeps ``gas_reserve`` back."""
    balance = _to_decimal(balance)
    if DepositAsset.parse(asset).value == chain.native_currency.symbol:
        balance -= gas_reserve
    return max(balance, Decimal(0))


def strategy_implication(apr: Decimal | int | float | str) -> str:
    """Risk narrative for a strategy's APR band."""
    apr = _to_decimal(apr)
    if apr <= 5:
        return "This strategy offers low returns with minimal risk. Suitable for conservative investors."
    if apr <= 10:
        return "This strategy provides balanced returns and moderate risk. Ideal for steady growth."
    if apr <= 15:
        return "This strategy offers high returns but comes with increased risk. Suitable for bold investors."
    return "Invalid APR value."


async def fetch_max_spendable(
    chain_client: ChainClient,
    account: str,
    config: ChainConfig,
    asset: DepositAsset | str,
    gas_reserve: Decimal = DEFAULT_GAS_RESERVE,
) -> Decimal:
    """Read ``account``'s balance of ``asset`` and apply :func:`max_spendable_amount`."""
    token = token_for(config, asset)
    if token.is_native:
        raw = await chain_client.get_balance(account)
    else:
        raw = await chain_client.read_contract(
            token.address, load_erc20_abi(), "balanceOf", [account]
        )
    balance = Decimal(int(raw)).scaleb(-token.decimals)
    return max_spendable_amount(balance, config.chain, asset, gas_reserve)
