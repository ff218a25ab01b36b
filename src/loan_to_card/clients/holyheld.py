"""Client for the Holyheld card top-up service.

The provider quotes a synthetic token amount in EUR, tells us where to send
the tokens, and credits the card named by a holytag once the transfer lands.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Any, Protocol

import backoff
import requests
from web3 import Web3

from ..abi import encode_call, load_erc20_abi
from ..errors import ExternalServiceFailure, TransactionFailure
from ..logger import get_logger
from .chain import ChainClient
from .rates import RETRYABLE_STATUS

logger = get_logger(__name__)


class TopUpStep(IntEnum):
    SENDING = 1
    CONFIRMING = 2
    REGISTERING = 3
    COMPLETED = 4


@dataclass(frozen=True)
class ServerSettings:
    topup_enabled: bool
    min_topup_eur: Decimal | None = None
    max_topup_eur: Decimal | None = None


@dataclass(frozen=True)
class TransferInstructions:
    """Where and how much to send for a top-up, as quoted by the provider."""

    receiver: str
    token_address: str
    amount: int
    reference: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class QuoteResult:
    fiat_amount: Decimal
    transfer_instructions: TransferInstructions


@dataclass(frozen=True)
class TopUpContext:
    chain_client: ChainClient
    owner: str
    token_address: str
    network: str
    amount: str


@dataclass
class TopUpCallbacks:
    on_hash_generate: Callable[[str], None] | None = None
    on_step_change: Callable[[int], None] | None = None


class TopUpProvider(Protocol):
    async def get_server_settings(self) -> ServerSettings: ...

    async def validate_holytag(self, holytag: str) -> bool: ...

    async def quote_fiat_value(
        self, token_address: str, decimals: int, amount: str, network: str
    ) -> QuoteResult: ...

    async def execute_top_up(
        self,
        context: TopUpContext,
        transfer_instructions: TransferInstructions,
        holytag: str,
        callbacks: TopUpCallbacks,
    ) -> None: ...


def _decimal_or_none(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


class HolyheldClient:
    """HTTP client for the Holyheld external top-up API."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout: float = 10.0,
        max_tries: int = 3,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_tries = max_tries
        self.session = requests.Session()
        if api_key:
            self.session.headers["X-Api-Key"] = api_key

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        retry: bool = True,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"

        async def _send() -> requests.Response:
            response = await asyncio.to_thread(
                self.session.request, method, url, json=json, timeout=self.timeout
            )
            response.raise_for_status()
            return response

        if retry:
            _send = backoff.on_exception(
                backoff.expo,
                requests.exceptions.RequestException,
                max_tries=self.max_tries,
                giveup=lambda e: (
                    isinstance(e, requests.exceptions.HTTPError)
                    and e.response is not None
                    and e.response.status_code not in RETRYABLE_STATUS
                ),
                jitter=backoff.full_jitter,
            )(_send)

        try:
            response = await _send()
        except requests.exceptions.RequestException as e:
            raise ExternalServiceFailure(
                f"Top-up service request {method} {path} failed: {e}",
                service="holyheld",
            ) from e

        body = response.json()
        if not isinstance(body, dict):
            raise ExternalServiceFailure(
                f"Unexpected response from top-up service for {path}",
                service="holyheld",
            )
        return body.get("payload", body)

    async def get_server_settings(self) -> ServerSettings:
        payload = await self._request("GET", "/v4/external/settings")
        external = payload.get("external", {})
        return ServerSettings(
            topup_enabled=bool(external.get("isTopupEnabled", False)),
            min_topup_eur=_decimal_or_none(external.get("minTopUpAmountInEUR")),
            max_topup_eur=_decimal_or_none(external.get("maxTopUpAmountInEUR")),
        )

    async def validate_holytag(self, holytag: str) -> bool:
        tag = holytag.strip().lstrip("$")
        if not tag:
            return False
        payload = await self._request("GET", f"/v4/holytag/{tag}")
        return bool(payload.get("found", False))

    async def quote_fiat_value(
        self, token_address: str, decimals: int, amount: str, network: str
    ) -> QuoteResult:
        payload = await self._request(
            "POST",
            "/v4/external/convert-to-eur",
            json={
                "token": token_address,
                "decimals": decimals,
                "amount": amount,
                "network": network,
            },
        )
        fiat_amount = _decimal_or_none(payload.get("EURAmount"))
        transfer = payload.get("transferData")
        if fiat_amount is None or not isinstance(transfer, dict):
            raise ExternalServiceFailure(
                f"Quote response for {amount} on {network} is incomplete",
                service="holyheld",
            )
        try:
            instructions = TransferInstructions(
                receiver=Web3.to_checksum_address(transfer["receiver"]),
                token_address=Web3.to_checksum_address(
                    transfer.get("token", token_address)
                ),
                amount=int(transfer["amount"]),
                reference=str(transfer.get("reference", "")),
                raw=transfer,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalServiceFailure(
                f"Malformed transfer data in quote: {e}", service="holyheld"
            ) from e
        return QuoteResult(fiat_amount=fiat_amount, transfer_instructions=instructions)

    async def execute_top_up(
        self,
        context: TopUpContext,
        transfer_instructions: TransferInstructions,
        holytag: str,
        callbacks: TopUpCallbacks,
    ) -> None:
        """Send the quoted tokens to the provider and register the top-up.

        Raises:
            TransactionFailure: If the transfer reverts.
            ExternalServiceFailure: If registering the top-up fails.
        """

        def _step(step: TopUpStep) -> None:
            logger.debug("Top-up step %d (%s)", step.value, step.name)
            if callbacks.on_step_change:
                callbacks.on_step_change(step.value)

        _step(TopUpStep.SENDING)
        calldata = encode_call(
            load_erc20_abi(),
            "transfer",
            [transfer_instructions.receiver, transfer_instructions.amount],
        )
        tx_hash = await context.chain_client.submit_transaction(
            transfer_instructions.token_address, calldata
        )
        if callbacks.on_hash_generate:
            callbacks.on_hash_generate(tx_hash)

        _step(TopUpStep.CONFIRMING)
        receipt = await context.chain_client.wait_for_receipt(tx_hash)
        if not receipt.succeeded:
            raise TransactionFailure("Top-up transfer transaction failed", tx_hash=tx_hash)

        _step(TopUpStep.REGISTERING)
        await self._request(
            "POST",
            "/v4/external/topup",
            json={
                "holytag": holytag,
                "txHash": tx_hash,
                "network": context.network,
                "token": context.token_address,
                "amount": context.amount,
                "sender": context.owner,
                "reference": transfer_instructions.reference,
            },
            retry=False,
        )
        _step(TopUpStep.COMPLETED)
