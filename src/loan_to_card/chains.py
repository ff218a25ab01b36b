"""Validated static configuration: tokens, vaults and alchemists per chain.

The built-in tables live in :mod:`loan_to_card.constants`. A TOML file may add
chains or replace built-in ones wholesale::

    [[chains]]
    id = 10
    name = "OP Mainnet"
    native_currency = { name = "Ether", symbol = "ETH", decimals = 18 }

    [chains.tokens.USDC]
    address = "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85"
    decimals = 6

Every table is parsed into :class:`ChainConfig` up front, so an incomplete
entry fails at load time instead of at the first lookup.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from web3 import Web3

from .constants import CHAIN_TABLES, ZERO_ADDRESS
from .domain import Chain, DepositAsset, NativeCurrency, Strategy, SynthAsset
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _checksum(address: str) -> str:
    checksummed = Web3.to_checksum_address(address)
    if checksummed == ZERO_ADDRESS:
        raise ValueError("zero address is not a valid contract address")
    return checksummed


class NativeCurrencyConfig(BaseModel):
    name: str
    symbol: str
    decimals: int = 18

    model_config = ConfigDict(extra="forbid", frozen=True)


class TokenConfig(BaseModel):
    address: str
    decimals: int = Field(ge=0, le=36)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("address")
    @classmethod
    def checksum_address(cls, v: str) -> str:
        return _checksum(v)


class VaultConfig(BaseModel):
    label: str
    underlying_symbol: str
    yield_symbol: str
    apr_source: bool = True
    weth_gateway: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("underlying_symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        return v.upper()

    @field_validator("weth_gateway")
    @classmethod
    def checksum_gateway(cls, v: str | None) -> str | None:
        return None if v is None else _checksum(v)


class AlchemistConfig(BaseModel):
    address: str
    synth_type: SynthAsset

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("address")
    @classmethod
    def checksum_address(cls, v: str) -> str:
        return _checksum(v)


class ChainConfig(BaseModel):
    """Everything the pipeline needs to know about one chain."""

    id: int = Field(gt=0)
    name: str
    native_currency: NativeCurrencyConfig
    tokens: dict[str, TokenConfig]
    vaults: dict[str, VaultConfig] = Field(default_factory=dict)
    alchemists: list[AlchemistConfig] = Field(default_factory=list)
    synth_tokens: dict[SynthAsset, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("tokens")
    @classmethod
    def upper_token_symbols(cls, v: dict[str, TokenConfig]) -> dict[str, TokenConfig]:
        return {symbol.upper(): token for symbol, token in v.items()}

    @field_validator("vaults")
    @classmethod
    def checksum_vault_keys(cls, v: dict[str, VaultConfig]) -> dict[str, VaultConfig]:
        return {_checksum(address): vault for address, vault in v.items()}

    @field_validator("synth_tokens")
    @classmethod
    def checksum_synth_tokens(cls, v: dict[SynthAsset, str]) -> dict[SynthAsset, str]:
        return {synth: _checksum(address) for synth, address in v.items()}

    @model_validator(mode="after")
    def check_completeness(self) -> "ChainConfig":
        for address, vault in self.vaults.items():
            if vault.underlying_symbol not in self.tokens:
                raise ValueError(
                    f"vault {address} underlying {vault.underlying_symbol} "
                    "has no entry in the token table"
                )
            if vault.weth_gateway and vault.underlying_symbol != DepositAsset.WETH.value:
                raise ValueError(
                    f"vault {address} sets weth_gateway but its underlying is "
                    f"{vault.underlying_symbol}"
                )

        seen: set[SynthAsset] = set()
        for alchemist in self.alchemists:
            if alchemist.synth_type in seen:
                raise ValueError(f"duplicate alchemist for {alchemist.synth_type.value}")
            seen.add(alchemist.synth_type)
            if alchemist.synth_type not in self.synth_tokens:
                raise ValueError(
                    f"alchemist {alchemist.address} issues {alchemist.synth_type.value} "
                    "but no synth token address is configured"
                )
        return self

    @property
    def chain(self) -> Chain:
        return Chain(
            id=self.id,
            name=self.name,
            native_currency=NativeCurrency(
                name=self.native_currency.name,
                symbol=self.native_currency.symbol,
                decimals=self.native_currency.decimals,
            ),
        )

    def strategies(self) -> list[Strategy]:
        return [
            Strategy(
                address=address,
                label=vault.label,
                underlying_symbol=vault.underlying_symbol,
                yield_symbol=vault.yield_symbol,
                apr_source=vault.apr_source,
                weth_gateway=vault.weth_gateway,
            )
            for address, vault in self.vaults.items()
        ]


def _parse(raw: dict[str, Any]) -> ChainConfig:
    try:
        return ChainConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration for chain {raw.get('id', '?')}: {e}"
        ) from e


def load_chain_configs(path: Path | None = None) -> dict[int, ChainConfig]:
    """Load and validate the per-chain tables.

    Args:
        path: Optional TOML file whose ``[[chains]]`` entries add to or
            replace the built-in chains.

    Raises:
        ConfigurationError: If any table is incomplete or malformed.
    """
    configs = {chain_id: _parse(raw) for chain_id, raw in CHAIN_TABLES.items()}

    if path is None:
        return configs

    with Path(path).open("rb") as f:
        data = tomllib.load(f)
    entries = data.get("chains", [])
    if not isinstance(entries, list):
        raise ConfigurationError(f"{path}: 'chains' must be an array of tables")

    for raw in entries:
        config = _parse(raw)
        if config.id in configs:
            logger.info("Overriding built-in configuration for chain %d", config.id)
        configs[config.id] = config

    return configs


def get_chain_config(configs: dict[int, ChainConfig], chain_id: int) -> ChainConfig:
    """Return the configuration for ``chain_id``.

    Raises:
        ConfigurationError: If the chain is not configured.
    """
    try:
        return configs[chain_id]
    except KeyError as e:
        raise ConfigurationError(f"Unsupported chain ID: {chain_id}") from e
