from __future__ import annotations

from ..abi import encode_call, load_alchemist_abi, load_erc20_abi
from ..domain import PipelineStepResult
from .context import PipelineContext
from .events import PipelineState
from .settlement import SettledCheck, polling_enabled, settle
from .transactions import submit_and_confirm


async def _synth_balance(ctx: PipelineContext) -> int:
    return int(
        await ctx.chain_client_required.read_contract(
            ctx.synth_token_required, load_erc20_abi(), "balanceOf", [ctx.account_required]
        )
    )


async def _mint_settled_check(ctx: PipelineContext, amount: int) -> SettledCheck | None:
    if not polling_enabled(ctx):
        return None
    try:
        before = await _synth_balance(ctx)
    except Exception as e:
        ctx.state.logger.warning(
            "Could not read synthetic balance, falling back to a fixed delay: %s", e
        )
        return None

    async def _reflected() -> bool:
        return await _synth_balance(ctx) >= before + amount

    return _reflected


async def mint_debt(ctx: PipelineContext) -> PipelineStepResult:
    """Mint the synthetic debt to the owner and wait for it to settle."""
    ctx.advance(PipelineState.MINTING)
    amount = ctx.debt_units_required
    check = await _mint_settled_check(ctx, amount)
    result = await submit_and_confirm(
        ctx,
        step="mint",
        description="Mint",
        to=ctx.alchemist_required.address,
        data=encode_call(load_alchemist_abi(), "mint", [amount, ctx.account_required]),
        awaiting=PipelineState.AWAITING_MINT_RECEIPT,
        confirmed_amount=amount,
    )
    await settle(ctx, "mint", check, ctx.state.settings.mint_settlement_delay)
    return result
