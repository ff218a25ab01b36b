from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import backoff

from ..settings import SettlementMode
from .context import PipelineContext

SettledCheck = Callable[[], Awaitable[bool]]


def polling_enabled(ctx: PipelineContext) -> bool:
    return ctx.state.settings.settlement_mode is SettlementMode.POLL


async def settle(
    ctx: PipelineContext,
    label: str,
    check: SettledCheck | None,
    fixed_delay: float,
) -> bool:
    """Wait for ``label``'s on-chain effect to become visible.

    Polls ``check`` until it returns True or ``settlement_timeout`` elapses.
    Without a check, or in fixed mode, sleeps ``fixed_delay`` instead.
    Returns False when polling gave up; the run continues either way.
    """
    settings = ctx.state.settings
    log = ctx.state.logger

    if check is None or not polling_enabled(ctx):
        if fixed_delay > 0:
            log.info("Waiting %.1fs for %s to settle", fixed_delay, label)
            await asyncio.sleep(fixed_delay)
        return True

    def _on_backoff(details):
        log.debug(
            "%s not settled yet (try %d, %.1fs elapsed)",
            label,
            details["tries"],
            details["elapsed"],
        )

    @backoff.on_predicate(
        backoff.constant,
        interval=settings.settlement_poll_interval,
        jitter=None,
        max_time=settings.settlement_timeout,
        on_backoff=_on_backoff,
    )
    async def _poll() -> bool:
        try:
            return await check()
        except Exception as e:
            log.warning("Settlement check for %s failed: %s", label, e)
            return False

    settled = await _poll()
    if settled:
        log.info("%s settled", label)
    else:
        log.warning(
            "%s not observed within %.1fs; continuing",
            label,
            settings.settlement_timeout,
        )
    return settled
