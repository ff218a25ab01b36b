"""Tests for settings precedence, validation and redaction."""

from __future__ import annotations

from decimal import Decimal
from textwrap import dedent

import pytest
from pydantic import ValidationError
from web3 import Web3

from loan_to_card.settings import LoanToCardSettings, Network, SettlementMode


def test_defaults():
    settings = LoanToCardSettings()

    assert settings.network is Network.OPTIMISM
    assert settings.chain_id == 10
    assert settings.rpc_url_required == "https://mainnet.optimism.io"
    assert settings.settlement_mode is SettlementMode.POLL
    assert settings.deposit_settlement_delay == 15
    assert settings.mint_settlement_delay == 10
    assert settings.native_gas_reserve == Decimal("0.001")


def test_toml_file_is_lowest_precedence(tmp_path, monkeypatch):
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        dedent(
            """
            [loan_to_card]
            network = "arbitrum"
            rpc_url = "https://file.example"
            settlement_mode = "fixed"
            log_level = "debug"
            """
        ).strip()
    )
    monkeypatch.setenv("LOAN_TO_CARD_CONFIG", str(config_path))
    monkeypatch.setenv("LOAN_TO_CARD_RPC_URL", "https://env.example")

    settings = LoanToCardSettings(settlement_mode=SettlementMode.POLL)

    assert settings.network is Network.ARBITRUM
    assert settings.chain_id == 42161
    assert settings.rpc_url == "https://env.example"
    assert settings.settlement_mode is SettlementMode.POLL
    assert settings.log_level == "DEBUG"


def test_local_config_file_is_discovered(tmp_path):
    (tmp_path / "loan-to-card.toml").write_text('network = "mainnet"\n')
    assert LoanToCardSettings().network is Network.MAINNET


@pytest.mark.parametrize("secret", ["private_key", "topup_api_key"])
def test_secrets_in_toml_are_rejected(tmp_path, monkeypatch, secret):
    config_path = tmp_path / "config.toml"
    config_path.write_text(f'{secret} = "0xdeadbeef"\n')
    monkeypatch.setenv("LOAN_TO_CARD_CONFIG", str(config_path))

    with pytest.raises(ValueError, match="Security violation"):
        LoanToCardSettings()


def test_secrets_are_redacted(monkeypatch):
    monkeypatch.setenv("LOAN_TO_CARD_PRIVATE_KEY", "0x" + "11" * 32)
    settings = LoanToCardSettings(topup_api_key="api-secret")

    dumped = settings.as_safe_dict()

    assert dumped["private_key"] == "***redacted***"
    assert dumped["topup_api_key"] == "***redacted***"
    assert settings.private_key.get_secret_value() == "0x" + "11" * 32
    assert "api-secret" not in str(dumped)


def test_poll_interval_must_fit_in_timeout():
    with pytest.raises(ValidationError, match="must not exceed settlement_timeout"):
        LoanToCardSettings(settlement_poll_interval=5, settlement_timeout=1)


def test_fixed_mode_ignores_poll_interval():
    settings = LoanToCardSettings(
        settlement_mode=SettlementMode.FIXED,
        settlement_poll_interval=5,
        settlement_timeout=1,
    )
    assert settings.settlement_mode is SettlementMode.FIXED


@pytest.mark.parametrize(
    "field,value",
    [
        ("deposit_settlement_delay", -1),
        ("settlement_poll_interval", 0),
        ("http_timeout", 0),
        ("read_retries", -1),
    ],
)
def test_invalid_numbers_are_rejected(field, value):
    with pytest.raises(ValidationError):
        LoanToCardSettings(**{field: value})


def test_account_address_is_checksummed():
    lower = "0x" + "ab" * 20
    settings = LoanToCardSettings(account_address=lower)
    assert settings.account_address == Web3.to_checksum_address(lower)


def test_malformed_account_address_is_rejected(monkeypatch):
    monkeypatch.setenv("LOAN_TO_CARD_ACCOUNT_ADDRESS", "0x1234")
    with pytest.raises(ValidationError):
        LoanToCardSettings()
