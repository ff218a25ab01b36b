from __future__ import annotations

from ..domain import PipelineStepResult
from ..errors import LoanToCardError, TransactionFailure
from .context import PipelineContext
from .events import PipelineState


async def submit_and_confirm(
    ctx: PipelineContext,
    *,
    step: str,
    description: str,
    to: str,
    data: bytes,
    value: int = 0,
    awaiting: PipelineState | None = None,
    confirmed_amount: int | None = None,
) -> PipelineStepResult:
    """Submit a transaction and block until its receipt reports success.

    The hash is held in ``ctx.pending`` from broadcast until a receipt
    arrives; the step is recorded on ``ctx`` only once the receipt succeeds.
    A receipt wait that throws leaves the hash pending.

    Raises:
        TransactionFailure: If submission throws, the receipt cannot be
            fetched, or the receipt reports failure.
    """
    client = ctx.chain_client_required
    log = ctx.state.logger

    try:
        tx_hash = await client.submit_transaction(to, data, value)
    except LoanToCardError:
        raise
    except Exception as e:
        raise TransactionFailure(str(e)) from e
    ctx.pending[step] = tx_hash
    log.info("%s transaction submitted: %s", description, tx_hash)

    if awaiting is not None:
        ctx.advance(awaiting, tx_hash=tx_hash)
    else:
        ctx.advance(ctx.current, detail="transaction submitted", tx_hash=tx_hash)

    try:
        receipt = await client.wait_for_receipt(tx_hash)
    except LoanToCardError:
        raise
    except Exception as e:
        raise TransactionFailure(str(e), tx_hash=tx_hash) from e
    if not receipt.succeeded:
        ctx.pending.pop(step, None)
        raise TransactionFailure(f"{description} transaction failed", tx_hash=tx_hash)

    log.info("%s confirmed in block %s", description, receipt.block_number)
    result = PipelineStepResult(transaction_hash=tx_hash, confirmed_amount=confirmed_amount)
    ctx.record_step(step, result)
    return result
