"""Chain client: contract reads, transaction submission and receipts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import backoff
import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import URI
from web3 import Web3

logger = logging.getLogger(__name__)

GAS_BUFFER_NUMERATOR = 125
GAS_BUFFER_DENOMINATOR = 100


class ReceiptStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    status: ReceiptStatus
    block_number: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ReceiptStatus.SUCCESS


class ChainClient(Protocol):
    """What the pipeline needs from a connected wallet and RPC endpoint."""

    async def read_contract(
        self,
        address: str,
        abi: list[dict],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any: ...

    async def get_balance(self, address: str) -> int: ...

    async def submit_transaction(self, to: str, data: bytes, value: int = 0) -> str: ...

    async def wait_for_receipt(self, tx_hash: str) -> Receipt: ...


class Web3ChainClient:
    """ChainClient backed by a web3 HTTP provider and a local signing key.

    web3 calls are blocking, so each one runs in a worker thread. Reads are
    retried on transport errors; submissions are never retried.
    """

    def __init__(
        self,
        rpc_url: str,
        private_key: str | None = None,
        *,
        receipt_timeout: float = 180.0,
        read_retries: int = 3,
    ):
        self.w3 = Web3(Web3.HTTPProvider(URI(rpc_url), request_kwargs={"timeout": 15}))
        self.account: LocalAccount | None = (
            Account.from_key(private_key) if private_key else None
        )
        self.receipt_timeout = receipt_timeout
        self.read_retries = read_retries

    @property
    def address(self) -> str | None:
        return self.account.address if self.account else None

    async def _read(self, fn: Any) -> Any:
        @backoff.on_exception(
            backoff.expo,
            (requests.exceptions.ConnectionError, requests.exceptions.Timeout),
            max_tries=self.read_retries + 1,
            jitter=backoff.full_jitter,
        )
        async def _call() -> Any:
            return await asyncio.to_thread(fn)

        return await _call()

    async def read_contract(
        self,
        address: str,
        abi: list[dict],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(address), abi=abi
        )
        call = contract.get_function_by_name(function_name)(*args)
        logger.debug("eth_call %s.%s%s", address, function_name, tuple(args))
        return await self._read(call.call)

    async def get_balance(self, address: str) -> int:
        checksum = Web3.to_checksum_address(address)
        return await self._read(lambda: self.w3.eth.get_balance(checksum))

    def _build_transaction(
        self, account: LocalAccount, to: str, data: bytes, value: int
    ) -> dict[str, Any]:
        tx: dict[str, Any] = {
            "from": account.address,
            "to": Web3.to_checksum_address(to),
            "data": data,
            "value": int(value),
            "nonce": self.w3.eth.get_transaction_count(account.address, "pending"),
            "chainId": self.w3.eth.chain_id,
        }
        estimate = self.w3.eth.estimate_gas(tx)
        tx["gas"] = estimate * GAS_BUFFER_NUMERATOR // GAS_BUFFER_DENOMINATOR

        latest = self.w3.eth.get_block("latest")
        base_fee = latest.get("baseFeePerGas")
        if base_fee is None:
            tx["gasPrice"] = self.w3.eth.gas_price
        else:
            priority = self.w3.eth.max_priority_fee
            tx["maxPriorityFeePerGas"] = priority
            tx["maxFeePerGas"] = base_fee * 2 + priority
        return tx

    def _sign_and_send(self, to: str, data: bytes, value: int) -> str:
        if self.account is None:
            raise ValueError("A private key is required to submit transactions")
        tx = self._build_transaction(self.account, to, data, value)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    async def submit_transaction(self, to: str, data: bytes, value: int = 0) -> str:
        tx_hash = await asyncio.to_thread(self._sign_and_send, to, data, value)
        logger.info("Submitted transaction %s to %s", tx_hash, to)
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> Receipt:
        raw = await asyncio.to_thread(
            self.w3.eth.wait_for_transaction_receipt,
            tx_hash,
            timeout=self.receipt_timeout,
        )
        status = ReceiptStatus.SUCCESS if raw["status"] == 1 else ReceiptStatus.FAILURE
        logger.debug("Receipt for %s: %s (block %s)", tx_hash, status.value, raw.get("blockNumber"))
        return Receipt(tx_hash=tx_hash, status=status, block_number=raw.get("blockNumber"))
