"""
Tests for the Kana aggregation API client, using httpx.MockTransport.
"""

import json

import httpx
import pytest

from swapflow.core.bridge.constants import BridgeId
from swapflow.core.recovery.errors import ProviderError, RateLimitError
from swapflow.providers.kana import KanaProvider


BASE_URL = "https://ag.example"


def make_provider(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return KanaProvider(base_url=BASE_URL, api_key="test-key", client=client, **kwargs)


@pytest.mark.asyncio
async def test_swap_quote_params_and_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["api_key"] = request.headers.get("X-API-KEY")
        return httpx.Response(200, json={"data": [{"amountOut": "99"}, {"amountOut": "98"}]})

    async with make_provider(handler) as kana:
        quote = await kana.best_swap_quote(
            network="solana",
            input_token="So11111111111111111111111111111111111111112",
            output_token="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
            amount_in=1000,
            slippage=0.5,
            sender="Sender111",
            swap_mode="exactOut",
        )

    assert quote == {"amountOut": "99"}
    assert seen["path"] == "/v1/swapQuote"
    assert seen["api_key"] == "test-key"
    assert seen["params"]["chain"] == "1"
    assert seen["params"]["amountIn"] == "1000"
    assert seen["params"]["sender"] == "Sender111"
    assert seen["params"]["swapMode"] == "exactOut"


@pytest.mark.asyncio
async def test_empty_quote_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": []})

    async with make_provider(handler) as kana:
        with pytest.raises(ProviderError):
            await kana.best_swap_quote(
                network="aptos",
                input_token="0x1::aptos_coin::AptosCoin",
                output_token="0xusdt",
                amount_in=1,
                slippage=0.5,
            )


@pytest.mark.asyncio
async def test_rate_limit_waits_and_retries_same_request():
    bodies = []
    responses = [
        httpx.Response(429, headers={"Retry-After": "0"}, json={"message": "Too Many Requests"}),
        httpx.Response(429, headers={"Retry-After": "0"}),
        httpx.Response(200, json={"data": {"claimIx": "base64tx"}}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return responses.pop(0)

    async with make_provider(handler) as kana:
        data = await kana.claim({"id": "q"}, "Target111", "0xmsg", "0xsig")

    assert data == {"claimIx": "base64tx"}
    assert len(bodies) == 3
    assert bodies[0] == bodies[2] == {
        "quote": {"id": "q"},
        "targetAddress": "Target111",
        "messageBytes": "0xmsg",
        "attestationSignature": "0xsig",
    }


@pytest.mark.asyncio
async def test_rate_limit_gives_up_after_max_retries():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(429, headers={"Retry-After": "0"})

    async with make_provider(handler, max_rate_limit_retries=2) as kana:
        with pytest.raises(RateLimitError):
            await kana.swap_instruction({"id": "q"}, "Sender111")

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_http_error_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "Invalid token"})

    async with make_provider(handler) as kana:
        with pytest.raises(ProviderError) as exc_info:
            await kana.cross_chain_transfer({"id": "q"}, "src", "dst")

    assert exc_info.value.status_code == 400
    assert exc_info.value.body == {"message": "Invalid token"}


@pytest.mark.asyncio
async def test_missing_envelope_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"result": "nope"})

    async with make_provider(handler) as kana:
        with pytest.raises(ProviderError):
            await kana.swap_instruction({"id": "q"}, "Sender111")


@pytest.mark.asyncio
async def test_cross_chain_quote_takes_first_route():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(200, json={"data": [{"route": 1}, {"route": 2}]})

    async with make_provider(handler) as kana:
        quote = await kana.cross_chain_quote(
            source_network="polygon",
            target_network="aptos",
            source_token="0xusdc",
            target_token="0xusdc-aptos",
            amount_in="5000000",
            source_slippage=0.5,
        )

    assert quote == {"route": 1}
    assert seen["sourceChain"] == "3"
    assert seen["targetChain"] == "2"
    assert seen["targetSlippage"] == "0.5"


@pytest.mark.asyncio
async def test_redeem_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": [{"redeemIx": "base64tx"}]})

    async with make_provider(handler) as kana:
        data = await kana.redeem(
            source_network="aptos",
            target_network="solana",
            target_address="Target111",
            message_bytes="0xmsg",
            attestation_signature="0xsig",
        )

    assert data == [{"redeemIx": "base64tx"}]
    assert seen["path"] == "/v1/redeem"
    assert seen["body"] == {
        "sourceChainID": 2,
        "targetChainID": 1,
        "bridgeID": int(BridgeId.CCTP),
        "targetAddress": "Target111",
        "messageBytes": "0xmsg",
        "attestationSignature": "0xsig",
    }


@pytest.mark.asyncio
async def test_ready_requires_api_key():
    kana = KanaProvider(base_url=BASE_URL, api_key="")

    assert await kana.ready() is False
    assert (await kana.health_check())["status"] == "disabled"
