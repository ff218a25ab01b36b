from __future__ import annotations

from decimal import Decimal, InvalidOperation

from web3 import Web3

from ..chains import get_chain_config
from ..constants import SYNTH_DECIMALS
from ..domain import DepositAsset, Mode, Strategy
from ..errors import ConfigurationError, InputValidationError, NotFoundError
from ..processors.amounts import expected_debt
from ..registry import (
    alchemist_for,
    strategy_for,
    synth_for,
    synth_token_for,
    token_for,
)
from ..units import parse_units, to_base_units
from .context import PipelineContext
from .events import PipelineState


def _parse_amount(raw: str) -> Decimal:
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        raise InputValidationError("Please enter a valid deposit amount.") from None
    if not amount.is_finite() or amount <= 0:
        raise InputValidationError("Please enter a valid deposit amount.")
    return amount


def _find_strategy(ctx: PipelineContext, asset: DepositAsset) -> Strategy:
    config = ctx.chain_config_required
    address = ctx.plan.strategy_address
    try:
        return strategy_for(config, asset, address)
    except NotFoundError:
        if asset is DepositAsset.ETH:
            for candidate in config.strategies():
                if candidate.address.lower() == address.lower():
                    raise ConfigurationError(
                        "Selected strategy does not support ETH deposits"
                    ) from None
        raise


async def validate_plan(ctx: PipelineContext) -> None:
    """Reject the plan before any network call is made.

    Raises:
        InputValidationError: If the wallet is disconnected or its address is
            malformed, or the amount, asset or strategy listing is not ready.
        ConfigurationError: If the chain, strategy or token is not configured.
    """
    ctx.advance(PipelineState.VALIDATING)
    plan = ctx.plan
    wallet = ctx.wallet

    if not wallet.account or wallet.chain is None or wallet.chain_client is None:
        raise InputValidationError("Please connect your wallet and select a chain.")
    try:
        account = Web3.to_checksum_address(wallet.account)
    except ValueError:
        raise InputValidationError(f"Invalid wallet address: {wallet.account}") from None
    if plan.mode is not ctx.mode:
        raise InputValidationError(
            f"A {plan.mode.value} plan cannot be run in {ctx.mode.value} mode."
        )

    amount = _parse_amount(plan.deposit_amount)
    asset = DepositAsset.parse(plan.deposit_asset)

    listing = wallet.strategies
    if listing is None:
        raise InputValidationError("Strategies are still loading.")
    if not listing.ready:
        raise InputValidationError(f"Strategies failed to load: {listing.error}")

    if ctx.mode is Mode.TOP_UP:
        if not (plan.holytag or "").strip():
            raise InputValidationError("Please enter a Holytag.")
        if ctx.provider is None:
            raise ConfigurationError("A top-up provider is required in top-up mode.")

    ctx.chain_config = get_chain_config(ctx.chain_configs, wallet.chain.id)
    strategy = _find_strategy(ctx, asset)
    token = token_for(ctx.chain_config, asset)

    try:
        deposit_units = parse_units(amount, token.decimals)
    except ValueError:
        raise InputValidationError(
            f"{asset.value} supports at most {token.decimals} decimal places."
        ) from None
    debt_units = to_base_units(expected_debt(amount), SYNTH_DECIMALS)
    if debt_units == 0:
        raise InputValidationError("Deposit amount is too small to borrow against.")

    ctx.account = account
    ctx.deposit_asset = asset
    ctx.amount = amount
    ctx.strategy = strategy
    ctx.token = token
    ctx.deposit_units = deposit_units
    ctx.debt_units = debt_units
    ctx.state.logger.debug(
        "Plan validated: %s %s into %s (%d base units, debt %d)",
        amount,
        asset.value,
        strategy.label,
        deposit_units,
        debt_units,
    )


async def resolve_alchemist(ctx: PipelineContext) -> None:
    ctx.advance(PipelineState.RESOLVING_ALCHEMIST)
    config = ctx.chain_config_required
    if ctx.deposit_asset is None:
        raise RuntimeError(
            "Deposit asset has not been set. Ensure validate_plan() is called first."
        )
    synth = synth_for(ctx.deposit_asset)
    ctx.alchemist = alchemist_for(config, synth)
    ctx.synth_token = synth_token_for(config, synth)
    ctx.synth = synth
    ctx.state.logger.info(
        "Using %s alchemist %s on %s", synth.value, ctx.alchemist.address, config.name
    )
