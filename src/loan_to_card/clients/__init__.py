from __future__ import annotations

from .chain import ChainClient, Receipt, ReceiptStatus, Web3ChainClient
from .holyheld import (
    HolyheldClient,
    QuoteResult,
    ServerSettings,
    TopUpCallbacks,
    TopUpContext,
    TopUpProvider,
    TransferInstructions,
)
from .rates import HttpRateSource, RateSource

__all__ = [
    "ChainClient",
    "HolyheldClient",
    "HttpRateSource",
    "QuoteResult",
    "RateSource",
    "Receipt",
    "ReceiptStatus",
    "ServerSettings",
    "TopUpCallbacks",
    "TopUpContext",
    "TopUpProvider",
    "TransferInstructions",
    "Web3ChainClient",
]
