"""High-level pipeline orchestration."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from ..chains import ChainConfig, load_chain_configs
from ..domain import Mode, TransactionPlan
from ..errors import PipelineFailure
from ..state import AppState
from .approval import ensure_allowance
from .context import Collaborators, PipelineContext, WalletContext
from .deposit import deposit_collateral
from .events import PipelineEvent, PipelineOutcome, PipelineState
from .mint import mint_debt
from .preflight import check_server_availability, validate_recipient_tag
from .topup import quote_fiat, resolve_synth_decimals, top_up
from .validation import resolve_alchemist, validate_plan

Stage = Callable[[PipelineContext], Awaitable[object]]

TOP_UP_STAGES: tuple[Stage, ...] = (
    validate_plan,
    resolve_alchemist,
    check_server_availability,
    validate_recipient_tag,
    ensure_allowance,
    deposit_collateral,
    mint_debt,
    resolve_synth_decimals,
    quote_fiat,
    top_up,
)

BORROW_ONLY_STAGES: tuple[Stage, ...] = (
    validate_plan,
    resolve_alchemist,
    ensure_allowance,
    deposit_collateral,
    mint_debt,
)


async def _execute(ctx: PipelineContext, stages: tuple[Stage, ...]) -> PipelineOutcome:
    log = ctx.state.logger
    plan = ctx.plan
    log.info(
        "Starting %s run",
        ctx.mode.value,
        extra={
            "asset": plan.deposit_asset,
            "amount": plan.deposit_amount,
            "strategy": plan.strategy_address,
        },
    )

    try:
        for stage in stages:
            await stage(ctx)
    except Exception as exc:
        failure = PipelineFailure(ctx.current.value, exc, ctx.steps, ctx.pending)
        if failure.partial:
            log.error("Run failed after on-chain changes: %s", failure.recovery_hint())
        else:
            log.error("Run failed at %s: %s", ctx.current.value, exc)
        try:
            ctx.advance(PipelineState.FAILED, detail=str(exc))
        except Exception:
            log.exception("Event callback raised while reporting the failure")
        ctx.clear_amounts()
        raise failure from exc

    ctx.advance(PipelineState.COMPLETED)
    outcome = PipelineOutcome(
        mode=ctx.mode,
        state=ctx.current,
        steps=dict(ctx.steps),
        events=list(ctx.events),
        fiat_amount=ctx.quote.fiat_amount if ctx.quote else None,
    )
    ctx.clear_amounts()
    log.info("%s run completed", ctx.mode.value)
    return outcome


def _context(
    state: AppState,
    plan: TransactionPlan,
    mode: Mode,
    wallet: WalletContext,
    collaborators: Collaborators | None,
    chain_configs: dict[int, ChainConfig] | None,
    on_event: Callable[[PipelineEvent], None] | None,
) -> PipelineContext:
    if chain_configs is None:
        chain_configs = load_chain_configs(state.settings.chains_file)
    return PipelineContext(
        state=state,
        plan=plan,
        mode=mode,
        wallet=wallet,
        chain_configs=chain_configs,
        provider=collaborators.provider if collaborators else None,
        on_event=on_event,
    )


async def run_top_up(
    state: AppState,
    plan: TransactionPlan,
    wallet: WalletContext,
    collaborators: Collaborators,
    *,
    chain_configs: dict[int, ChainConfig] | None = None,
    on_event: Callable[[PipelineEvent], None] | None = None,
) -> PipelineOutcome:
    """Deposit, mint half the deposit as synthetic debt and top up a card with it.

    Raises:
        PipelineFailure: On any failure. ``completed_steps`` lists the
            transactions already confirmed on-chain.
    """
    ctx = _context(state, plan, Mode.TOP_UP, wallet, collaborators, chain_configs, on_event)
    return await _execute(ctx, TOP_UP_STAGES)


async def run_borrow_only(
    state: AppState,
    plan: TransactionPlan,
    wallet: WalletContext,
    collaborators: Collaborators | None = None,
    *,
    chain_configs: dict[int, ChainConfig] | None = None,
    on_event: Callable[[PipelineEvent], None] | None = None,
) -> PipelineOutcome:
    """Deposit and mint, leaving the synthetic debt in the wallet."""
    ctx = _context(state, plan, Mode.BORROW_ONLY, wallet, collaborators, chain_configs, on_event)
    return await _execute(ctx, BORROW_ONLY_STAGES)


async def run_plan(
    state: AppState,
    plan: TransactionPlan,
    wallet: WalletContext,
    collaborators: Collaborators,
    *,
    chain_configs: dict[int, ChainConfig] | None = None,
    on_event: Callable[[PipelineEvent], None] | None = None,
) -> PipelineOutcome:
    """Dispatch ``plan`` to the entry point for its mode."""
    runner = run_top_up if plan.mode is Mode.TOP_UP else run_borrow_only
    return await runner(
        state,
        plan,
        wallet,
        collaborators,
        chain_configs=chain_configs,
        on_event=on_event,
    )
