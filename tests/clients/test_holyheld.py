from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests
from fakes import ALUSD_TOKEN, OWNER, TOPUP_RECEIVER, FakeChainClient

from loan_to_card.clients.holyheld import (
    HolyheldClient,
    TopUpCallbacks,
    TopUpContext,
    TransferInstructions,
)
from loan_to_card.errors import ExternalServiceFailure, TransactionFailure


def _response(body, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.json.return_value = body
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status} error", response=response
        )
    return response


def _client(*bodies, api_key: str | None = "key-1") -> HolyheldClient:
    client = HolyheldClient("https://api.example/", api_key, timeout=5, max_tries=2)
    client.session = MagicMock()
    client.session.request.side_effect = [
        body if isinstance(body, MagicMock) else _response(body) for body in bodies
    ]
    return client


def test_api_key_is_sent_as_header():
    client = HolyheldClient("https://api.example", "secret")
    assert client.session.headers["X-Api-Key"] == "secret"


@pytest.mark.asyncio
async def test_server_settings_are_parsed():
    client = _client(
        {
            "payload": {
                "external": {
                    "isTopupEnabled": True,
                    "minTopUpAmountInEUR": "5",
                    "maxTopUpAmountInEUR": 1000,
                }
            }
        }
    )

    settings = await client.get_server_settings()

    assert settings.topup_enabled is True
    assert settings.min_topup_eur == Decimal("5")
    assert settings.max_topup_eur == Decimal("1000")
    client.session.request.assert_called_once_with(
        "GET", "https://api.example/v4/external/settings", json=None, timeout=5
    )


@pytest.mark.asyncio
async def test_missing_flag_means_disabled():
    client = _client({"payload": {}})
    settings = await client.get_server_settings()
    assert settings.topup_enabled is False


@pytest.mark.asyncio
async def test_holytag_lookup():
    client = _client({"payload": {"found": True}}, {"payload": {"found": False}})

    assert await client.validate_holytag("$alice") is True
    assert await client.validate_holytag("bob") is False
    urls = [c.args[1] for c in client.session.request.call_args_list]
    assert urls == [
        "https://api.example/v4/holytag/alice",
        "https://api.example/v4/holytag/bob",
    ]


@pytest.mark.asyncio
async def test_blank_holytag_is_invalid_without_a_request():
    client = _client()
    assert await client.validate_holytag("  ") is False
    client.session.request.assert_not_called()


@pytest.mark.asyncio
async def test_quote_parses_transfer_instructions():
    client = _client(
        {
            "payload": {
                "EURAmount": "46.12",
                "transferData": {
                    "receiver": TOPUP_RECEIVER,
                    "token": ALUSD_TOKEN,
                    "amount": str(50 * 10**18),
                    "reference": "abc",
                },
            }
        }
    )

    quote = await client.quote_fiat_value(ALUSD_TOKEN, 18, "50", "optimism")

    assert quote.fiat_amount == Decimal("46.12")
    assert quote.transfer_instructions.receiver == TOPUP_RECEIVER
    assert quote.transfer_instructions.amount == 50 * 10**18
    assert quote.transfer_instructions.reference == "abc"
    _, kwargs = client.session.request.call_args
    assert kwargs["json"] == {
        "token": ALUSD_TOKEN,
        "decimals": 18,
        "amount": "50",
        "network": "optimism",
    }


@pytest.mark.asyncio
async def test_incomplete_quote_fails():
    client = _client({"payload": {"EURAmount": "1"}})
    with pytest.raises(ExternalServiceFailure, match="incomplete"):
        await client.quote_fiat_value(ALUSD_TOKEN, 18, "50", "optimism")


@pytest.mark.asyncio
async def test_client_error_is_not_retried():
    client = _client(_response({}, status=400))
    with pytest.raises(ExternalServiceFailure) as excinfo:
        await client.get_server_settings()
    assert excinfo.value.service == "holyheld"
    assert client.session.request.call_count == 1


def _instructions() -> TransferInstructions:
    return TransferInstructions(
        receiver=TOPUP_RECEIVER, token_address=ALUSD_TOKEN, amount=5 * 10**18, reference="r1"
    )


@pytest.mark.asyncio
async def test_execute_top_up_transfers_then_registers():
    client = _client({"payload": {"ok": True}})
    chain = FakeChainClient()
    hashes: list[str] = []
    steps: list[int] = []
    context = TopUpContext(
        chain_client=chain, owner=OWNER, token_address=ALUSD_TOKEN, network="optimism", amount="5"
    )

    await client.execute_top_up(
        context,
        _instructions(),
        "alice",
        TopUpCallbacks(on_hash_generate=hashes.append, on_step_change=steps.append),
    )

    assert chain.submitted() == ["transfer"]
    assert chain.submissions[0].to == ALUSD_TOKEN
    assert hashes == [chain.submissions[0].tx_hash]
    assert steps == [1, 2, 3, 4]
    method, url = client.session.request.call_args.args
    assert (method, url) == ("POST", "https://api.example/v4/external/topup")
    body = client.session.request.call_args.kwargs["json"]
    assert body["holytag"] == "alice"
    assert body["txHash"] == hashes[0]
    assert body["reference"] == "r1"


@pytest.mark.asyncio
async def test_failed_transfer_is_not_registered():
    client = _client()
    chain = FakeChainClient(failing_receipts={"transfer"})
    context = TopUpContext(
        chain_client=chain, owner=OWNER, token_address=ALUSD_TOKEN, network="optimism", amount="5"
    )

    with pytest.raises(TransactionFailure, match="Top-up transfer transaction failed"):
        await client.execute_top_up(context, _instructions(), "alice", TopUpCallbacks())
    client.session.request.assert_not_called()


@pytest.mark.asyncio
async def test_registration_is_not_retried():
    client = _client(_response({}, status=503))
    context = TopUpContext(
        chain_client=FakeChainClient(),
        owner=OWNER,
        token_address=ALUSD_TOKEN,
        network="optimism",
        amount="5",
    )

    with pytest.raises(ExternalServiceFailure):
        await client.execute_top_up(context, _instructions(), "alice", TopUpCallbacks())
    assert client.session.request.call_count == 1
