"""Async client for the Kana aggregation API (swaps, cross-chain transfers, CCTP claims)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from ..config import settings
from ..core.chain_types import NetworkId, normalize_network
from ..core.bridge.constants import BridgeId
from ..core.recovery.errors import ProviderError, RateLimitError
from .base import Provider

logger = logging.getLogger(__name__)

NetworkLike = Union[NetworkId, int, str]


class KanaProvider(Provider):
    """
    Thin wrapper around https://ag.kanalabs.io endpoints.

    Every response is enveloped as ``{"data": ...}``; the helpers below return
    the unwrapped ``data`` member. HTTP 429 is absorbed by waiting for the
    ``Retry-After`` header and sending the same request again.
    """

    name = "kana"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[float] = None,
        max_rate_limit_retries: Optional[int] = None,
        default_retry_after: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.kana_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.kana_api_key
        self.timeout_s = timeout_s or settings.kana_timeout_seconds
        self.max_rate_limit_retries = (
            settings.rate_limit_max_retries if max_rate_limit_retries is None else max_rate_limit_retries
        )
        self.default_retry_after = (
            settings.rate_limit_retry_after_seconds if default_retry_after is None else default_retry_after
        )
        self._client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": "Missing KANA_API_KEY"}
        return {"status": "configured", "base_url": self.base_url}

    def _headers(self) -> Dict[str, str]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
        }
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_s)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _retry_after(self, response: httpx.Response) -> float:
        raw = response.headers.get("retry-after")
        if raw is None:
            return self.default_retry_after
        try:
            return max(0.0, float(raw))
        except ValueError:
            return self.default_retry_after

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        client = await self._get_client()
        rate_limited = 0

        while True:
            response = await client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(),
            )

            if response.status_code == 429:
                wait = self._retry_after(response)
                if rate_limited >= self.max_rate_limit_retries:
                    raise RateLimitError(
                        f"Kana rate limit persisted after {rate_limited} retries on {path}",
                        retry_after=wait,
                        provider=self.name,
                    )
                rate_limited += 1
                logger.info("kana_rate_limited path=%s retry_after=%.1fs attempt=%d", path, wait, rate_limited)
                await asyncio.sleep(wait)
                continue

            if response.status_code >= 400:
                try:
                    body: Any = response.json()
                except ValueError:
                    body = response.text
                raise ProviderError(
                    f"Kana {method} {path} failed with HTTP {response.status_code}",
                    provider=self.name,
                    status_code=response.status_code,
                    body=body,
                )

            try:
                payload = response.json()
            except ValueError as exc:
                raise ProviderError(
                    f"Kana {method} {path} returned a non-JSON body",
                    provider=self.name,
                    status_code=response.status_code,
                    body=response.text,
                ) from exc

            if not isinstance(payload, dict) or "data" not in payload:
                raise ProviderError(
                    f"Kana {method} {path} response has no data envelope",
                    provider=self.name,
                    status_code=response.status_code,
                    body=payload,
                )
            return payload["data"]

    # ------------------------------------------------------------------
    # Same-chain swaps
    # ------------------------------------------------------------------

    async def swap_quote(
        self,
        *,
        network: NetworkLike,
        input_token: str,
        output_token: str,
        amount_in: Union[int, str],
        slippage: float,
        sender: Optional[str] = None,
        swap_mode: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Return all routes the aggregator found, best first."""

        params: Dict[str, Any] = {
            "inputToken": input_token,
            "outputToken": output_token,
            "chain": int(normalize_network(network)),
            "amountIn": str(amount_in),
            "slippage": slippage,
        }
        if sender:
            params["sender"] = sender
        if swap_mode:
            params["swapMode"] = swap_mode

        data = await self._request("GET", "/v1/swapQuote", params=params)
        if not isinstance(data, list):
            data = [data] if data else []
        return data

    async def best_swap_quote(self, **kwargs: Any) -> Dict[str, Any]:
        quotes = await self.swap_quote(**kwargs)
        if not quotes:
            raise ProviderError("No swap quote returned", provider=self.name, body=quotes)
        return quotes[0]

    async def swap_instruction(
        self,
        quote: Dict[str, Any],
        address: str,
        recipient: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"quote": quote, "address": address}
        if recipient:
            body["recipient"] = recipient
        return await self._request("POST", "/v1/swapInstruction", json=body)

    # ------------------------------------------------------------------
    # Cross-chain (CCTP)
    # ------------------------------------------------------------------

    async def cross_chain_quote(
        self,
        *,
        source_network: NetworkLike,
        target_network: NetworkLike,
        source_token: str,
        target_token: str,
        amount_in: Union[int, str],
        source_slippage: float,
        target_slippage: Optional[float] = None,
    ) -> Dict[str, Any]:
        params = {
            "sourceToken": source_token,
            "targetToken": target_token,
            "sourceChain": int(normalize_network(source_network)),
            "targetChain": int(normalize_network(target_network)),
            "amountIn": str(amount_in),
            "sourceSlippage": source_slippage,
            "targetSlippage": source_slippage if target_slippage is None else target_slippage,
        }
        data = await self._request("GET", "/v1/crossChainQuote", params=params)
        if isinstance(data, list):
            if not data:
                raise ProviderError("No cross-chain quote returned", provider=self.name, body=data)
            return data[0]
        return data

    async def cross_chain_transfer(
        self,
        quote: Dict[str, Any],
        source_address: str,
        target_address: str,
    ) -> Dict[str, Any]:
        body = {
            "quote": quote,
            "sourceAddress": source_address,
            "targetAddress": target_address,
        }
        return await self._request("POST", "/v1/crossChainTransfer", json=body)

    async def claim(
        self,
        quote: Dict[str, Any],
        target_address: str,
        message_bytes: str,
        attestation_signature: str,
    ) -> Dict[str, Any]:
        body = {
            "quote": quote,
            "targetAddress": target_address,
            "messageBytes": message_bytes,
            "attestationSignature": attestation_signature,
        }
        return await self._request("POST", "/v1/claim", json=body)

    async def redeem(
        self,
        *,
        source_network: NetworkLike,
        target_network: NetworkLike,
        target_address: str,
        message_bytes: str,
        attestation_signature: str,
        bridge_id: int = BridgeId.CCTP,
    ) -> Dict[str, Any]:
        """Build the mint instruction for a burn that has already been attested."""

        body = {
            "sourceChainID": int(normalize_network(source_network)),
            "targetChainID": int(normalize_network(target_network)),
            "bridgeID": int(bridge_id),
            "targetAddress": target_address,
            "messageBytes": message_bytes,
            "attestationSignature": attestation_signature,
        }
        return await self._request("POST", "/v1/redeem", json=body)


__all__ = ["KanaProvider"]
