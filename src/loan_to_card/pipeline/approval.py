from __future__ import annotations

from ..abi import encode_call, load_erc20_abi
from ..domain import PipelineStepResult
from .context import PipelineContext
from .events import PipelineState
from .transactions import submit_and_confirm


async def ensure_allowance(ctx: PipelineContext) -> PipelineStepResult | None:
    """Approve the alchemist for the deposit amount unless it already is.

    Native deposits need no allowance and return immediately. Returns the
    approval's result, or None when no approval was submitted.
    """
    token = ctx.token_required
    if token.is_native:
        return None

    ctx.advance(PipelineState.CHECKING_ALLOWANCE)
    owner = ctx.account_required
    spender = ctx.alchemist_required.address
    required = ctx.deposit_units_required
    erc20 = load_erc20_abi()

    allowance = int(
        await ctx.chain_client_required.read_contract(
            token.address, erc20, "allowance", [owner, spender]
        )
    )
    if allowance >= required:
        ctx.state.logger.info(
            "Existing %s allowance %d covers %d; skipping approval",
            token.symbol,
            allowance,
            required,
        )
        return None

    ctx.advance(PipelineState.APPROVING)
    return await submit_and_confirm(
        ctx,
        step="approve",
        description="Approve",
        to=token.address,
        data=encode_call(erc20, "approve", [spender, required]),
        confirmed_amount=required,
    )
