"""Strategy selection: candidate vaults annotated with live yield rates."""

from __future__ import annotations

import asyncio
from decimal import Decimal

from ..chains import ChainConfig
from ..clients.rates import RateSource
from ..domain import DepositAsset, RatedStrategy, Strategy, StrategyListing
from ..errors import LoanToCardError
from ..logger import get_logger
from ..registry import strategies_for, token_for

logger = get_logger(__name__)


async def _rate_for(
    config: ChainConfig, strategy: Strategy, rate_source: RateSource
) -> Decimal | None:
    if not strategy.apr_source:
        return None
    underlying = token_for(config, strategy.underlying_symbol)
    return await rate_source.get_annual_rate(config.id, underlying.address)


async def select_strategies(
    config: ChainConfig,
    deposit_asset: DepositAsset | str,
    rate_source: RateSource,
) -> list[RatedStrategy]:
    """Annotate every candidate vault with its live APR.

    Lookups run concurrently. A failed lookup marks only that vault's rate as
    unavailable; the call returns once every lookup has settled.
    """
    candidates = strategies_for(config, deposit_asset)
    if not candidates:
        logger.info(
            "No strategies for %s on %s", DepositAsset.parse(deposit_asset).value, config.name
        )
        return []

    results = await asyncio.gather(
        *[_rate_for(config, strategy, rate_source) for strategy in candidates],
        return_exceptions=True,
    )

    rated: list[RatedStrategy] = []
    for strategy, result in zip(candidates, results):
        if isinstance(result, Exception):
            logger.warning(
                "APR unavailable for %s (%s): %s", strategy.label, strategy.address, result
            )
            rated.append(RatedStrategy(strategy=strategy, apr=None))
        elif isinstance(result, BaseException):
            raise result
        else:
            rated.append(RatedStrategy(strategy=strategy, apr=result))
    return rated


async def load_strategy_listing(
    config: ChainConfig,
    deposit_asset: DepositAsset | str,
    rate_source: RateSource,
) -> StrategyListing:
    """Load strategies, recording a failure instead of raising it.

    The pipeline refuses to start on a listing that carries an error.
    """
    try:
        strategies = await select_strategies(config, deposit_asset, rate_source)
    except LoanToCardError as e:
        logger.error("Failed to load strategies: %s", e)
        return StrategyListing(strategies=[], error=str(e))
    return StrategyListing(strategies=strategies)
