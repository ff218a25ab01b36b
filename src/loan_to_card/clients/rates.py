"""Annual yield rate source for vault strategies."""

from __future__ import annotations

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Protocol

import backoff
import requests

from ..errors import ExternalServiceFailure
from ..logger import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class RateSource(Protocol):
    async def get_annual_rate(self, chain_id: int, underlying_token: str) -> Decimal: ...


class HttpRateSource:
    """Fetches the current APR (in percent) for an underlying token."""

    def __init__(self, base_url: str, *, timeout: float = 10.0, max_tries: int = 3):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_tries = max_tries

    async def _get(self, url: str, params: dict[str, str]) -> requests.Response:
        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.max_tries,
            giveup=lambda e: (
                isinstance(e, requests.exceptions.HTTPError)
                and e.response is not None
                and e.response.status_code not in RETRYABLE_STATUS
            ),
            jitter=backoff.full_jitter,
        )
        async def _get_with_retry() -> requests.Response:
            response = await asyncio.to_thread(
                requests.get, url, params=params, timeout=self.timeout
            )
            response.raise_for_status()
            return response

        return await _get_with_retry()

    async def get_annual_rate(self, chain_id: int, underlying_token: str) -> Decimal:
        """Return the annual rate in percent.

        Raises:
            ExternalServiceFailure: If the request fails or the payload has no
                numeric ``apr``.
        """
        url = f"{self.base_url}/v1/apr"
        try:
            response = await self._get(
                url, {"chainId": str(chain_id), "underlyingToken": underlying_token}
            )
        except requests.exceptions.RequestException as e:
            raise ExternalServiceFailure(
                f"APR lookup failed for {underlying_token} on chain {chain_id}: {e}",
                service="rates",
            ) from e

        payload = response.json()
        raw = payload.get("apr") if isinstance(payload, dict) else None
        try:
            rate = Decimal(str(raw))
        except InvalidOperation as e:
            raise ExternalServiceFailure(
                f"APR payload for {underlying_token} is not numeric: {raw!r}",
                service="rates",
            ) from e
        if raw is None or not rate.is_finite():
            raise ExternalServiceFailure(
                f"APR payload for {underlying_token} is not numeric: {raw!r}",
                service="rates",
            )
        logger.debug("APR for %s on chain %d: %s%%", underlying_token, chain_id, rate)
        return rate
