from __future__ import annotations

import json
from collections.abc import Sequence
from functools import cache
from pathlib import Path
from typing import Any

from web3 import Web3

ABIS_DIR = Path(__file__).parent / "abis"

ERC20_ABI_PATH = ABIS_DIR / "ERC20.json"
ALCHEMIST_ABI_PATH = ABIS_DIR / "AlchemistV2.json"
WETH_GATEWAY_ABI_PATH = ABIS_DIR / "WETHGateway.json"


@cache
def load_abi(path: Path) -> list[dict]:
    """The ``abi`` array of a Hardhat-style artifact, read once per path.

    Callers must not mutate the returned list.
    """
    with path.open() as f:
        return json.load(f)["abi"]


def load_erc20_abi() -> list[dict]:
    """Load the ERC20 ABI."""
    return load_abi(ERC20_ABI_PATH)


def load_alchemist_abi() -> list[dict]:
    """Load the AlchemistV2 ABI."""
    return load_abi(ALCHEMIST_ABI_PATH)


def load_weth_gateway_abi() -> list[dict]:
    """Load the WETHGateway ABI."""
    return load_abi(WETH_GATEWAY_ABI_PATH)


def encode_call(abi: list[dict], function_name: str, args: Sequence[Any]) -> bytes:
    """Encode calldata for ``function_name(*args)``.

    Address arguments must be checksummed.
    """
    contract = Web3().eth.contract(abi=abi)
    calldata_hex = contract.encode_abi(
        abi_element_identifier=function_name,
        args=list(args),
    )
    return bytes.fromhex(calldata_hex.removeprefix("0x"))


def function_selector(abi: list[dict], function_name: str) -> bytes:
    """4-byte selector of ``function_name`` as declared in ``abi``."""
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function_name:
            types = ",".join(arg["type"] for arg in entry.get("inputs", []))
            return bytes(Web3.keccak(text=f"{function_name}({types})")[:4])
    raise KeyError(f"Function {function_name} not found in ABI")
