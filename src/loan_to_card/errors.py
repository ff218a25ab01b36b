"""Error taxonomy for the top-up and borrow pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .domain import PipelineStepResult


class LoanToCardError(Exception):
    """Base class for every error raised by this package."""


class InputValidationError(LoanToCardError):
    """Raised when a plan or its inputs are rejected before any network call."""


class ConfigurationError(LoanToCardError):
    """Raised when static chain configuration has no entry for a request."""


class NotFoundError(ConfigurationError):
    """Raised when a lookup (alchemist, strategy, token) has no match."""


class PreconditionFailure(LoanToCardError):
    """Raised when a server-side precondition blocks the run before funds move."""


class TransactionFailure(LoanToCardError):
    """Raised when a submission throws or its receipt reports non-success."""

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ExternalServiceFailure(LoanToCardError):
    """Raised when a rate, quote or top-up service call fails."""

    def __init__(self, message: str, service: str | None = None):
        super().__init__(message)
        self.service = service


class PipelineFailure(LoanToCardError):
    """A pipeline run halted at ``failed_step``.

    ``str()`` is the originating error's message, unchanged. Steps recorded in
    ``completed_steps`` were confirmed on-chain before the failure and are not
    rolled back. ``unconfirmed_steps`` maps steps whose transaction was
    broadcast without a known outcome to their hashes.
    """

    def __init__(
        self,
        failed_step: str,
        cause: BaseException,
        completed_steps: dict[str, PipelineStepResult],
        unconfirmed_steps: dict[str, str] | None = None,
    ):
        super().__init__(str(cause))
        self.failed_step = failed_step
        self.cause = cause
        self.completed_steps = dict(completed_steps)
        self.unconfirmed_steps = dict(unconfirmed_steps or {})

    @property
    def partial(self) -> bool:
        """True when something may have reached the chain before the failure."""
        return bool(self.completed_steps or self.unconfirmed_steps)

    def recovery_hint(self) -> str:
        if not self.partial:
            return f"Failed at {self.failed_step}; nothing was submitted on-chain."
        parts = []
        if self.completed_steps:
            committed = ", ".join(
                f"{name} ({result.transaction_hash})"
                for name, result in self.completed_steps.items()
            )
            parts.append(f"after committing: {committed}")
        if self.unconfirmed_steps:
            unconfirmed = ", ".join(
                f"{name} ({tx_hash})" for name, tx_hash in self.unconfirmed_steps.items()
            )
            parts.append(f"with unconfirmed transactions: {unconfirmed}")
        return (
            f"Failed at {self.failed_step} {'; '.join(parts)}. "
            "Check these transactions on-chain; they need manual follow-up."
        )
