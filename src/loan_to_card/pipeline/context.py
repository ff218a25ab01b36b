from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal

from ..chains import ChainConfig
from ..clients.chain import ChainClient
from ..clients.holyheld import QuoteResult, TopUpProvider
from ..clients.rates import RateSource
from ..domain import (
    Alchemist,
    Chain,
    DepositAsset,
    Mode,
    PipelineStepResult,
    Strategy,
    StrategyListing,
    SynthAsset,
    TokenInfo,
    TransactionPlan,
)
from ..state import AppState
from .events import PipelineEvent, PipelineState


@dataclass
class WalletContext:
    """Connected wallet and chain, passed in explicitly for each run."""

    account: str | None
    chain: Chain | None
    chain_client: ChainClient | None
    strategies: StrategyListing | None = None


@dataclass
class Collaborators:
    """External services a run may call besides the chain client."""

    rates: RateSource | None = None
    provider: TopUpProvider | None = None


@dataclass
class PipelineContext:
    state: AppState
    plan: TransactionPlan
    mode: Mode
    wallet: WalletContext
    chain_configs: dict[int, ChainConfig]
    provider: TopUpProvider | None = None
    on_event: Callable[[PipelineEvent], None] | None = None

    current: PipelineState = PipelineState.VALIDATING
    events: list[PipelineEvent] = field(default_factory=list)
    steps: dict[str, PipelineStepResult] = field(default_factory=dict)
    # step name -> hash of a transaction broadcast but not yet confirmed
    pending: dict[str, str] = field(default_factory=dict)

    # set by validation
    account: str | None = None
    chain_config: ChainConfig | None = None
    deposit_asset: DepositAsset | None = None
    amount: Decimal | None = None
    token: TokenInfo | None = None
    strategy: Strategy | None = None
    deposit_units: int | None = None
    debt_units: int | None = None

    # set by alchemist resolution
    synth: SynthAsset | None = None
    alchemist: Alchemist | None = None
    synth_token: str | None = None

    # set by the top-up stages
    synth_decimals: int | None = None
    formatted_debt: str | None = None
    network: str | None = None
    quote: QuoteResult | None = None

    def advance(
        self,
        state: PipelineState,
        detail: str | None = None,
        tx_hash: str | None = None,
    ) -> None:
        """Enter ``state`` and publish an event for it."""
        if state is not self.current:
            self.state.logger.info("Pipeline state: %s -> %s", self.current.value, state.value)
        self.current = state
        event = PipelineEvent(state=state, detail=detail, tx_hash=tx_hash)
        self.events.append(event)
        if self.on_event is not None:
            self.on_event(event)

    def record_step(self, name: str, result: PipelineStepResult) -> None:
        self.pending.pop(name, None)
        self.steps[name] = result

    def clear_amounts(self) -> None:
        self.amount = None
        self.deposit_units = None
        self.debt_units = None
        self.formatted_debt = None
        self.quote = None

    @property
    def account_required(self) -> str:
        if self.account is None:
            raise RuntimeError(
                "Account has not been set. Ensure validate_plan() is called before accessing this property."
            )
        return self.account

    @property
    def chain_client_required(self) -> ChainClient:
        if self.wallet.chain_client is None:
            raise RuntimeError("Chain client is not connected.")
        return self.wallet.chain_client

    @property
    def provider_required(self) -> TopUpProvider:
        if self.provider is None:
            raise RuntimeError("Top-up provider has not been set.")
        return self.provider

    @property
    def chain_config_required(self) -> ChainConfig:
        if self.chain_config is None:
            raise RuntimeError(
                "Chain configuration has not been set. Ensure validate_plan() is called before accessing this property."
            )
        return self.chain_config

    @property
    def token_required(self) -> TokenInfo:
        if self.token is None:
            raise RuntimeError(
                "Deposit token has not been set. Ensure validate_plan() is called before accessing this property."
            )
        return self.token

    @property
    def strategy_required(self) -> Strategy:
        if self.strategy is None:
            raise RuntimeError(
                "Strategy has not been set. Ensure validate_plan() is called before accessing this property."
            )
        return self.strategy

    @property
    def deposit_units_required(self) -> int:
        if self.deposit_units is None:
            raise RuntimeError(
                "Deposit amount has not been set. Ensure validate_plan() is called before accessing this property."
            )
        return self.deposit_units

    @property
    def debt_units_required(self) -> int:
        if self.debt_units is None:
            raise RuntimeError(
                "Debt amount has not been set. Ensure validate_plan() is called before accessing this property."
            )
        return self.debt_units

    @property
    def alchemist_required(self) -> Alchemist:
        if self.alchemist is None:
            raise RuntimeError(
                "Alchemist has not been set. Ensure resolve_alchemist() is called before accessing this property."
            )
        return self.alchemist

    @property
    def synth_token_required(self) -> str:
        if self.synth_token is None:
            raise RuntimeError(
                "Synthetic token has not been set. Ensure resolve_alchemist() is called before accessing this property."
            )
        return self.synth_token

    @property
    def formatted_debt_required(self) -> str:
        if self.formatted_debt is None or self.synth_decimals is None:
            raise RuntimeError(
                "Synthetic decimals have not been resolved. Ensure resolve_synth_decimals() is called before accessing this property."
            )
        return self.formatted_debt

    @property
    def quote_required(self) -> QuoteResult:
        if self.quote is None:
            raise RuntimeError(
                "Fiat quote has not been set. Ensure quote_fiat() is called before accessing this property."
            )
        return self.quote
