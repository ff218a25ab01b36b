from __future__ import annotations

from ..errors import PreconditionFailure
from .context import PipelineContext
from .events import PipelineState


async def check_server_availability(ctx: PipelineContext) -> None:
    ctx.advance(PipelineState.CHECKING_SERVER_AVAILABILITY)
    settings = await ctx.provider_required.get_server_settings()
    if not settings.topup_enabled:
        raise PreconditionFailure("Top-up is currently disabled.")


async def validate_recipient_tag(ctx: PipelineContext) -> None:
    ctx.advance(PipelineState.VALIDATING_RECIPIENT_TAG)
    holytag = (ctx.plan.holytag or "").strip()
    if not await ctx.provider_required.validate_holytag(holytag):
        raise PreconditionFailure("Invalid Holytag.")
    ctx.state.logger.debug("Holytag %s validated", holytag)
