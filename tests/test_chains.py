from __future__ import annotations

from textwrap import dedent

import pytest
from fakes import ALUSD_TOKEN, GATEWAY, USDC, USDC_VAULT, chain_table
from web3 import Web3

from loan_to_card.chains import ChainConfig, get_chain_config, load_chain_configs
from loan_to_card.constants import ZERO_ADDRESS
from loan_to_card.domain import SynthAsset
from loan_to_card.errors import ConfigurationError


def test_builtin_tables_are_valid():
    configs = load_chain_configs()

    assert set(configs) == {1, 10, 42161}
    for config in configs.values():
        for synth in (SynthAsset.ALUSD, SynthAsset.ALETH):
            assert synth in config.synth_tokens
        for strategy in config.strategies():
            if strategy.weth_gateway:
                assert strategy.underlying_symbol == "WETH"


def test_chain_projection(chain_config):
    chain = chain_config.chain
    assert chain.id == 10
    assert chain.name == "OP Mainnet"
    assert chain.native_currency.symbol == "ETH"
    assert chain.native_currency.decimals == 18


def test_addresses_are_checksummed_and_symbols_upper_cased():
    lower_vault = "0x" + "ab" * 20
    table = chain_table(
        tokens={"usdc": {"address": USDC, "decimals": 6}},
        vaults={lower_vault: {"label": "v", "underlying_symbol": "usdc", "yield_symbol": "y"}},
        alchemists=[],
        synth_tokens={},
    )

    config = ChainConfig.model_validate(table)

    assert "USDC" in config.tokens
    [strategy] = config.strategies()
    assert strategy.address == Web3.to_checksum_address(lower_vault)
    assert strategy.underlying_symbol == "USDC"


def test_missing_alchemist_is_not_a_load_error():
    config = ChainConfig.model_validate(chain_table(alchemists=[]))
    assert config.alchemists == []


@pytest.mark.parametrize(
    "overrides,message",
    [
        (
            {
                "vaults": {
                    USDC_VAULT: {"label": "x", "underlying_symbol": "USDT", "yield_symbol": "y"}
                }
            },
            "has no entry in the token table",
        ),
        (
            {
                "vaults": {
                    USDC_VAULT: {
                        "label": "x",
                        "underlying_symbol": "USDC",
                        "yield_symbol": "y",
                        "weth_gateway": GATEWAY,
                    }
                }
            },
            "sets weth_gateway",
        ),
        (
            {
                "alchemists": [
                    {"address": "0x" + "77" * 20, "synth_type": "alUSD"},
                    {"address": "0x" + "78" * 20, "synth_type": "alUSD"},
                ]
            },
            "duplicate alchemist",
        ),
        ({"synth_tokens": {"alETH": ALUSD_TOKEN}}, "no synth token address"),
        ({"tokens": {"USDC": {"address": ZERO_ADDRESS, "decimals": 6}}}, "zero address"),
        ({"unexpected": True}, "unexpected"),
    ],
)
def test_incomplete_tables_are_rejected(overrides, message):
    with pytest.raises(ValueError, match=message):
        ChainConfig.model_validate(chain_table(**overrides))


def test_toml_entries_add_and_replace_chains(tmp_path):
    path = tmp_path / "chains.toml"
    path.write_text(
        dedent(
            f"""
            [[chains]]
            id = 10
            name = "Optimism Test"
            native_currency = {{ name = "Ether", symbol = "ETH", decimals = 18 }}

            [chains.tokens.USDC]
            address = "{USDC}"
            decimals = 6

            [[chains]]
            id = 8453
            name = "Base"
            native_currency = {{ name = "Ether", symbol = "ETH", decimals = 18 }}
            tokens = {{}}
            """
        )
    )

    configs = load_chain_configs(path)

    assert configs[10].name == "Optimism Test"
    assert configs[10].vaults == {}
    assert configs[8453].name == "Base"
    assert 42161 in configs


def test_invalid_toml_entry_raises_configuration_error(tmp_path):
    path = tmp_path / "chains.toml"
    path.write_text('[[chains]]\nid = 5\nname = "Broken"\n')

    with pytest.raises(ConfigurationError, match="Invalid configuration for chain 5"):
        load_chain_configs(path)


def test_unsupported_chain_id(chain_config):
    assert get_chain_config({10: chain_config}, 10) is chain_config
    with pytest.raises(ConfigurationError, match="Unsupported chain ID: 137"):
        get_chain_config({10: chain_config}, 137)
