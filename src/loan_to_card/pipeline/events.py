from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ..domain import Mode, PipelineStepResult


class PipelineState(str, Enum):
    VALIDATING = "Validating"
    RESOLVING_ALCHEMIST = "ResolvingAlchemist"
    CHECKING_SERVER_AVAILABILITY = "CheckingServerAvailability"
    VALIDATING_RECIPIENT_TAG = "ValidatingRecipientTag"
    CHECKING_ALLOWANCE = "CheckingAllowance"
    APPROVING = "Approving"
    DEPOSITING = "Depositing"
    AWAITING_DEPOSIT_RECEIPT = "AwaitingDepositReceipt"
    MINTING = "Minting"
    AWAITING_MINT_RECEIPT = "AwaitingMintReceipt"
    RESOLVING_SYNTH_DECIMALS = "ResolvingSynthDecimals"
    CONVERTING_TO_FIAT_QUOTE = "ConvertingToFiatQuote"
    TOPPING_UP = "ToppingUp"
    COMPLETED = "Completed"
    FAILED = "Failed"


@dataclass(frozen=True)
class PipelineEvent:
    state: PipelineState
    detail: str | None = None
    tx_hash: str | None = None


@dataclass(frozen=True)
class PipelineOutcome:
    """Result of a completed run."""

    mode: Mode
    state: PipelineState
    steps: dict[str, PipelineStepResult]
    events: list[PipelineEvent] = field(default_factory=list)
    fiat_amount: Decimal | None = None

    @property
    def states(self) -> list[PipelineState]:
        """Distinct states in the order they were entered."""
        seen: list[PipelineState] = []
        for event in self.events:
            if not seen or seen[-1] is not event.state:
                seen.append(event.state)
        return seen
