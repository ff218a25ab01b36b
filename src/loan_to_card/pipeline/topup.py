from __future__ import annotations

from ..abi import load_erc20_abi
from ..clients.holyheld import TopUpCallbacks, TopUpContext
from ..domain import PipelineStepResult
from ..errors import ExternalServiceFailure, LoanToCardError
from ..registry import map_network_name
from ..units import format_units
from .context import PipelineContext
from .events import PipelineState


async def resolve_synth_decimals(ctx: PipelineContext) -> None:
    ctx.advance(PipelineState.RESOLVING_SYNTH_DECIMALS)
    decimals = int(
        await ctx.chain_client_required.read_contract(
            ctx.synth_token_required, load_erc20_abi(), "decimals"
        )
    )
    ctx.synth_decimals = decimals
    ctx.formatted_debt = format_units(ctx.debt_units_required, decimals)
    ctx.network = map_network_name(ctx.chain_config_required.name)


async def quote_fiat(ctx: PipelineContext) -> None:
    ctx.advance(PipelineState.CONVERTING_TO_FIAT_QUOTE)
    quote = await ctx.provider_required.quote_fiat_value(
        ctx.synth_token_required,
        ctx.synth_decimals,
        ctx.formatted_debt_required,
        ctx.network,
    )
    ctx.quote = quote
    ctx.state.logger.info(
        "%s %s quoted at EUR %s",
        ctx.formatted_debt,
        ctx.synth.value if ctx.synth else "synth",
        quote.fiat_amount,
    )


async def top_up(ctx: PipelineContext) -> PipelineStepResult:
    """Hand the quoted transfer to the provider.

    Provider progress hooks are forwarded as ToppingUp events. The transfer
    hash is held in ``ctx.pending`` as soon as the provider reports it, so a
    failure later in the provider flow still names the transfer.
    """
    ctx.advance(PipelineState.TOPPING_UP)
    quote = ctx.quote_required

    def _on_hash(tx_hash: str) -> None:
        ctx.pending["top_up"] = tx_hash
        ctx.advance(PipelineState.TOPPING_UP, detail="transaction hash generated", tx_hash=tx_hash)

    def _on_step(step: int) -> None:
        ctx.advance(PipelineState.TOPPING_UP, detail=f"provider step {step}")

    context = TopUpContext(
        chain_client=ctx.chain_client_required,
        owner=ctx.account_required,
        token_address=ctx.synth_token_required,
        network=ctx.network,
        amount=ctx.formatted_debt_required,
    )
    try:
        await ctx.provider_required.execute_top_up(
            context,
            quote.transfer_instructions,
            (ctx.plan.holytag or "").strip(),
            TopUpCallbacks(on_hash_generate=_on_hash, on_step_change=_on_step),
        )
    except LoanToCardError:
        raise
    except Exception as e:
        raise ExternalServiceFailure(str(e), service="top-up") from e

    result = PipelineStepResult(
        transaction_hash=ctx.pending.get("top_up", ""),
        confirmed_amount=quote.transfer_instructions.amount,
    )
    ctx.record_step("top_up", result)
    return result
