"""Async client for Circle's CCTP attestation service (Iris)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.bridge.constants import PENDING_ATTESTATION
from ..core.recovery.errors import ProviderError
from .base import AttestationProvider

logger = logging.getLogger(__name__)


def _messages_of(data: Any) -> Optional[List[Dict[str, Any]]]:
    """The ``messages`` list of a response body, or None if the body is malformed."""
    if not isinstance(data, dict):
        return None
    messages = data.get("messages") or []
    if not isinstance(messages, list) or not all(isinstance(item, dict) for item in messages):
        return None
    return messages


class CircleAttestationProvider(AttestationProvider):
    """
    Looks up the attested CCTP message for a burn transaction.

    v1: ``GET /messages/{domain}/{txHash}``
    v2: ``GET /v2/messages/{domain}?transactionHash={txHash}``
    """

    name = "circle"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        version: Optional[str] = None,
        timeout_s: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.circle_attestation_url).rstrip("/")
        self.version = (version or settings.cctp_version).lower()
        if self.version not in ("v1", "v2"):
            raise ValueError(f"Unknown CCTP attestation API version: {self.version}")
        self.timeout_s = timeout_s
        self._client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "configured", "base_url": self.base_url, "version": self.version}

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_s)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _request_args(self, domain: int, tx_hash: str):
        if self.version == "v2":
            return f"/v2/messages/{domain}", {"transactionHash": tx_hash}
        return f"/messages/{domain}/{tx_hash}", None

    async def get_message(self, domain: int, tx_hash: str) -> Optional[Dict[str, Any]]:
        """
        Return the first message for ``tx_hash`` once it is attested.

        Returns None while Circle has not indexed the burn (HTTP 404), has no
        messages for it yet, or still reports the attestation as PENDING.
        """
        client = await self._get_client()
        path, params = self._request_args(domain, tx_hash)
        response = await client.get(path, params=params)

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise ProviderError(
                f"Circle attestation lookup failed with HTTP {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                "Circle attestation response is not JSON",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            ) from exc

        messages = _messages_of(data)
        if messages is None:
            raise ProviderError(
                "Unexpected Circle attestation response shape",
                provider=self.name,
                status_code=response.status_code,
                body=data,
            )
        if not messages:
            return None
        message = messages[0]
        attestation = message.get("attestation")
        if not attestation or attestation == PENDING_ATTESTATION or not message.get("message"):
            return None
        return message


__all__ = ["CircleAttestationProvider"]
