"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from web3 import Web3

from .constants import (
    DEFAULT_ARBITRUM_RPC_URL,
    DEFAULT_MAINNET_RPC_URL,
    DEFAULT_OPTIMISM_RPC_URL,
    DEFAULT_RATE_API_URL,
    DEFAULT_TOPUP_API_URL,
)
from .logger import resolve_level

load_dotenv()

SECRET_FIELDS = {"private_key", "topup_api_key"}


class Network(str, Enum):
    OPTIMISM = "optimism"
    ARBITRUM = "arbitrum"
    MAINNET = "mainnet"


NETWORK_CHAIN_IDS = {
    Network.MAINNET: 1,
    Network.OPTIMISM: 10,
    Network.ARBITRUM: 42161,
}

NETWORK_RPC_DEFAULTS = {
    Network.MAINNET: DEFAULT_MAINNET_RPC_URL,
    Network.OPTIMISM: DEFAULT_OPTIMISM_RPC_URL,
    Network.ARBITRUM: DEFAULT_ARBITRUM_RPC_URL,
}


class SettlementMode(str, Enum):
    POLL = "poll"
    FIXED = "fixed"


LOCAL_CONFIG = Path("loan-to-card.toml")
USER_CONFIG = Path("~/.config/loan-to-card/config.toml")
CONFIG_TABLE = "loan_to_card"


def find_config_file() -> Path | None:
    """``LOAN_TO_CARD_CONFIG`` if set, else the first existing default location."""
    explicit = os.environ.get("LOAN_TO_CARD_CONFIG")
    if explicit:
        return Path(explicit)
    for candidate in (LOCAL_CONFIG, USER_CONFIG.expanduser()):
        if candidate.exists():
            return candidate
    return None


class TomlConfigSource(PydanticBaseSettingsSource):
    """Reads settings from a TOML file, top-level or under ``[loan_to_card]``.

    Raises ValueError when the file sets a secret field.
    """

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
        super().__init__(settings_cls)
        self.path = path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        with self.path.open("rb") as f:
            data = tomllib.load(f)
        body = data.get(CONFIG_TABLE, data)
        if not isinstance(body, dict):
            return {}

        leaked = sorted(SECRET_FIELDS & body.keys())
        if leaked:
            raise ValueError(
                f"Security violation: '{leaked[0]}' found in TOML config file {self.path}. "
                "Provide secrets through LOAN_TO_CARD_* environment variables."
            )
        return body


class LoanToCardSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with LOAN_TO_CARD_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- chain / wallet ---
    network: Network = Network.OPTIMISM
    rpc_url: str | None = None
    account_address: str | None = None
    private_key: SecretStr | None = None
    chains_file: Path | None = None

    # --- external services ---
    topup_api_url: str = DEFAULT_TOPUP_API_URL
    topup_api_key: SecretStr | None = None
    rate_api_url: str = DEFAULT_RATE_API_URL
    http_timeout: float = Field(default=10.0, gt=0)

    # --- settlement ---
    settlement_mode: SettlementMode = SettlementMode.POLL
    deposit_settlement_delay: float = Field(default=15.0, ge=0)
    mint_settlement_delay: float = Field(default=10.0, ge=0)
    settlement_poll_interval: float = Field(default=1.0, gt=0)
    settlement_timeout: float = Field(default=30.0, ge=0)

    # --- transactions and reads ---
    receipt_timeout: float = Field(default=180.0, gt=0)
    read_retries: int = Field(default=3, ge=0)
    native_gas_reserve: Decimal = Field(default=Decimal("0.001"), ge=0)

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="LOAN_TO_CARD_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("private_key", "topup_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("account_address")
    @classmethod
    def checksum_account(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return Web3.to_checksum_address(v)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        resolve_level(v)
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_settlement_polling(self) -> "LoanToCardSettings":
        """Polling must fit at least once inside the settlement timeout."""
        if (
            self.settlement_mode is SettlementMode.POLL
            and self.settlement_poll_interval > self.settlement_timeout
        ):
            raise ValueError(
                f"settlement_poll_interval ({self.settlement_poll_interval}) "
                f"must not exceed settlement_timeout ({self.settlement_timeout})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Precedence: CLI > ENV > .env > TOML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSource(settings_cls, find_config_file()),
            file_secret_settings,
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data

    @property
    def chain_id(self) -> int:
        return NETWORK_CHAIN_IDS[self.network]

    @property
    def rpc_url_required(self) -> str:
        """Configured RPC endpoint, or the network default."""
        return self.rpc_url or NETWORK_RPC_DEFAULTS[self.network]
