from __future__ import annotations

from ..abi import encode_call, load_alchemist_abi, load_weth_gateway_abi
from ..domain import PipelineStepResult
from ..errors import ConfigurationError
from .context import PipelineContext
from .events import PipelineState
from .settlement import SettledCheck, polling_enabled, settle
from .transactions import submit_and_confirm

MINIMUM_AMOUNT_OUT = 0


async def _position_shares(ctx: PipelineContext) -> int:
    shares, _ = await ctx.chain_client_required.read_contract(
        ctx.alchemist_required.address,
        load_alchemist_abi(),
        "positions",
        [ctx.account_required, ctx.strategy_required.address],
    )
    return int(shares)


async def _deposit_settled_check(ctx: PipelineContext) -> SettledCheck | None:
    if not polling_enabled(ctx):
        return None
    try:
        before = await _position_shares(ctx)
    except Exception as e:
        ctx.state.logger.warning(
            "Could not read alchemist position, falling back to a fixed delay: %s", e
        )
        return None

    async def _reflected() -> bool:
        return await _position_shares(ctx) > before

    return _reflected


async def deposit_collateral(ctx: PipelineContext) -> PipelineStepResult:
    """Deposit the full amount into the selected strategy and wait for it to settle.

    ETH goes through the strategy's WETH gateway with the amount as value;
    ERC20 tokens go straight to the alchemist.
    """
    ctx.advance(PipelineState.DEPOSITING)
    token = ctx.token_required
    strategy = ctx.strategy_required
    alchemist = ctx.alchemist_required.address
    owner = ctx.account_required
    amount = ctx.deposit_units_required

    if token.is_native:
        if strategy.weth_gateway is None:
            raise ConfigurationError("Selected strategy does not support ETH deposits")
        to = strategy.weth_gateway
        value = amount
        data = encode_call(
            load_weth_gateway_abi(),
            "depositUnderlying",
            [alchemist, strategy.address, amount, owner, MINIMUM_AMOUNT_OUT],
        )
    else:
        to = alchemist
        value = 0
        data = encode_call(
            load_alchemist_abi(),
            "depositUnderlying",
            [strategy.address, amount, owner, MINIMUM_AMOUNT_OUT],
        )

    check = await _deposit_settled_check(ctx)
    result = await submit_and_confirm(
        ctx,
        step="deposit",
        description="Deposit",
        to=to,
        data=data,
        value=value,
        awaiting=PipelineState.AWAITING_DEPOSIT_RECEIPT,
        confirmed_amount=amount,
    )
    await settle(ctx, "deposit", check, ctx.state.settings.deposit_settlement_delay)
    return result
