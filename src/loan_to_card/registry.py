"""Asset registry: deposit asset -> synthetic, strategies, alchemists and tokens."""

from __future__ import annotations

from .chains import ChainConfig
from .constants import PROVIDER_NETWORKS
from .domain import Alchemist, DepositAsset, Strategy, SynthAsset, TokenInfo
from .errors import ConfigurationError, NotFoundError

SYNTH_MAPPING: dict[DepositAsset, SynthAsset] = {
    DepositAsset.USDC: SynthAsset.ALUSD,
    DepositAsset.DAI: SynthAsset.ALUSD,
    DepositAsset.USDT: SynthAsset.ALUSD,
    DepositAsset.WETH: SynthAsset.ALETH,
    DepositAsset.ETH: SynthAsset.ALETH,
}


def synth_for(deposit_asset: DepositAsset | str) -> SynthAsset:
    """Return the synthetic debt asset minted against ``deposit_asset``.

    Raises:
        InputValidationError: If ``deposit_asset`` is not a known deposit asset.
        ConfigurationError: If a known asset has no synthetic mapping.
    """
    asset = DepositAsset.parse(deposit_asset)
    try:
        return SYNTH_MAPPING[asset]
    except KeyError as e:
        raise ConfigurationError(f"No synth mapping found for asset: {asset.value}") from e


def strategies_for(config: ChainConfig, deposit_asset: DepositAsset | str) -> list[Strategy]:
    """Vaults on ``config``'s chain that accept ``deposit_asset``.

    Native ETH matches only WETH vaults that expose a gateway. An empty list
    means no strategy is available; it is not an error.
    """
    asset = DepositAsset.parse(deposit_asset)
    if asset is DepositAsset.ETH:
        return [
            strategy
            for strategy in config.strategies()
            if strategy.underlying_symbol == DepositAsset.WETH.value
            and strategy.accepts_native
        ]
    return [
        strategy
        for strategy in config.strategies()
        if strategy.underlying_symbol == asset.value
    ]


def strategy_for(
    config: ChainConfig, deposit_asset: DepositAsset | str, strategy_address: str
) -> Strategy:
    """Find ``strategy_address`` among the strategies for ``deposit_asset``.

    Raises:
        NotFoundError: If the address is not a strategy for that asset.
    """
    wanted = strategy_address.lower()
    for strategy in strategies_for(config, deposit_asset):
        if strategy.address.lower() == wanted:
            return strategy
    raise NotFoundError(
        f"Strategy {strategy_address} is not available for "
        f"{DepositAsset.parse(deposit_asset).value} on {config.name}"
    )


def alchemist_for(config: ChainConfig, synth_type: SynthAsset) -> Alchemist:
    """Exact match on ``synth_type``; never falls back to another synth.

    Raises:
        NotFoundError: If the chain has no alchemist for ``synth_type``.
    """
    for alchemist in config.alchemists:
        if alchemist.synth_type is synth_type:
            return Alchemist(address=alchemist.address, synth_type=alchemist.synth_type)
    raise NotFoundError(
        f"No alchemist found for {synth_type.value} on {config.name}"
    )


def synth_token_for(config: ChainConfig, synth_type: SynthAsset) -> str:
    """Address of the ``synth_type`` token on ``config``'s chain."""
    try:
        return config.synth_tokens[synth_type]
    except KeyError as e:
        raise NotFoundError(
            f"Synthetic token address not found for {synth_type.value}"
        ) from e


def token_for(config: ChainConfig, deposit_asset: DepositAsset | str) -> TokenInfo:
    """Token metadata for ``deposit_asset``; ETH resolves to the native currency.

    Raises:
        NotFoundError: If the chain has no token entry for the asset.
    """
    asset = DepositAsset.parse(deposit_asset)
    if asset is DepositAsset.ETH:
        native = config.native_currency
        return TokenInfo(symbol=native.symbol, address=None, decimals=native.decimals)
    token = config.tokens.get(asset.value)
    if token is None:
        raise NotFoundError(f"Token configuration not found for asset: {asset.value}")
    return TokenInfo(symbol=asset.value, address=token.address, decimals=token.decimals)


def available_deposit_assets(config: ChainConfig) -> list[DepositAsset]:
    """Deposit assets with at least one vault, plus ETH if a WETH gateway exists."""
    assets: list[DepositAsset] = []
    for strategy in config.strategies():
        try:
            asset = DepositAsset(strategy.underlying_symbol)
        except ValueError:
            continue
        if asset not in assets:
            assets.append(asset)
    if strategies_for(config, DepositAsset.ETH):
        assets.append(DepositAsset.ETH)
    return assets


def map_network_name(chain_name: str) -> str:
    """Top-up provider network identifier for a chain display name."""
    key = chain_name.strip().lower()
    return PROVIDER_NETWORKS.get(key, key)
