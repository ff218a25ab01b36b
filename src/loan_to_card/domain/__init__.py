"""Domain models for the loan-to-card flow."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ..errors import InputValidationError


class DepositAsset(str, Enum):
    ETH = "ETH"
    WETH = "WETH"
    USDC = "USDC"
    DAI = "DAI"
    USDT = "USDT"

    @classmethod
    def parse(cls, value: str | DepositAsset) -> DepositAsset:
        """Return the member for ``value`` or reject it.

        Raises:
            InputValidationError: If ``value`` is empty or not a known asset.
        """
        if isinstance(value, cls):
            return value
        if not value:
            raise InputValidationError("Please select a deposit asset.")
        try:
            return cls(str(value).strip().upper())
        except ValueError as e:
            raise InputValidationError(f"Invalid deposit asset: {value}") from e


class SynthAsset(str, Enum):
    ALUSD = "alUSD"
    ALETH = "alETH"


class Mode(str, Enum):
    TOP_UP = "topup"
    BORROW_ONLY = "borrowOnly"


@dataclass(frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


@dataclass(frozen=True)
class Chain:
    id: int
    name: str
    native_currency: NativeCurrency


@dataclass(frozen=True)
class TokenInfo:
    """Token metadata needed for approvals and unit conversion.

    ``address`` is None for the chain's native currency.
    """

    symbol: str
    address: str | None
    decimals: int

    @property
    def is_native(self) -> bool:
        return self.address is None


@dataclass(frozen=True)
class Strategy:
    """A yield vault accepting ``underlying_symbol`` deposits."""

    address: str
    label: str
    underlying_symbol: str
    yield_symbol: str
    apr_source: bool = True
    weth_gateway: str | None = None

    @property
    def accepts_native(self) -> bool:
        return self.weth_gateway is not None


@dataclass(frozen=True)
class RatedStrategy:
    """A strategy annotated with its live annual rate (None when unavailable)."""

    strategy: Strategy
    apr: Decimal | None

    @property
    def rate_available(self) -> bool:
        return self.apr is not None

    @property
    def apr_display(self) -> str:
        return "N/A" if self.apr is None else f"{self.apr}"


@dataclass(frozen=True)
class StrategyListing:
    """Outcome of loading strategies for one (chain, deposit asset) pair.

    An empty ``strategies`` with no ``error`` means nothing is available.
    """

    strategies: list[RatedStrategy]
    error: str | None = None

    @property
    def ready(self) -> bool:
        return self.error is None

    def find(self, address: str) -> RatedStrategy | None:
        wanted = address.lower()
        for rated in self.strategies:
            if rated.strategy.address.lower() == wanted:
                return rated
        return None


@dataclass(frozen=True)
class Alchemist:
    address: str
    synth_type: SynthAsset


@dataclass(frozen=True)
class TransactionPlan:
    """The user's confirmed intent, consumed once by a pipeline run."""

    mode: Mode
    deposit_asset: str
    deposit_amount: str
    strategy_address: str
    holytag: str | None = None


@dataclass(frozen=True)
class PipelineStepResult:
    transaction_hash: str
    confirmed_amount: int | None = None


__all__ = [
    "Alchemist",
    "Chain",
    "DepositAsset",
    "Mode",
    "NativeCurrency",
    "PipelineStepResult",
    "RatedStrategy",
    "Strategy",
    "StrategyListing",
    "SynthAsset",
    "TokenInfo",
    "TransactionPlan",
]
