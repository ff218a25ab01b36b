from __future__ import annotations

import logging
import os

import pytest
from fakes import chain_table

from loan_to_card.chains import ChainConfig
from loan_to_card.settings import LoanToCardSettings, SettlementMode
from loan_to_card.state import AppState


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep local config files and LOAN_TO_CARD_* variables out of tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in list(os.environ):
        if key.startswith("LOAN_TO_CARD_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def chain_config() -> ChainConfig:
    return ChainConfig.model_validate(chain_table())


@pytest.fixture
def settings() -> LoanToCardSettings:
    return LoanToCardSettings(
        settlement_mode=SettlementMode.FIXED,
        deposit_settlement_delay=0,
        mint_settlement_delay=0,
    )


@pytest.fixture
def app_state(settings) -> AppState:
    return AppState(settings=settings, logger=logging.getLogger("test"))
