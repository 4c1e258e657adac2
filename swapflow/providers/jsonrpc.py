"""Minimal async JSON-RPC 2.0 client shared by the Solana and EVM providers."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import Provider

logger = logging.getLogger(__name__)


class RpcError(Exception):
    """Error object returned by a JSON-RPC node, or transport failure after retries."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class JsonRpcProvider(Provider):
    """
    JSON-RPC over HTTP with a lazily created ``httpx.AsyncClient``.

    Transport failures are retried ``max_retries`` times with linear backoff;
    errors returned by the node itself are raised immediately.
    """

    name = "jsonrpc"

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_s: float = 30.0,
        max_retries: int = 3,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout_s = timeout_s
        self.max_retries = max(1, max_retries)
        self._client = client
        self._ids = itertools.count(1)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": "RPC URL not configured"}
        return {"status": "configured", "rpc_url": self.rpc_url}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make an RPC call and return its ``result`` member."""
        client = await self._get_client()

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        for attempt in range(self.max_retries):
            try:
                response = await client.post(
                    self.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                data = response.json()

                if data.get("error"):
                    error = data["error"]
                    if isinstance(error, dict):
                        raise RpcError(
                            f"RPC error: {error.get('message', error)}",
                            code=error.get("code"),
                            data=error.get("data"),
                        )
                    raise RpcError(f"RPC error: {error}")

                return data.get("result")

            except RpcError:
                raise
            except httpx.HTTPStatusError as e:
                if attempt == self.max_retries - 1:
                    raise RpcError(
                        f"HTTP error: {e.response.status_code}",
                        code=e.response.status_code,
                    ) from e
                await asyncio.sleep(0.5 * (attempt + 1))
            except (httpx.RequestError, ValueError) as e:
                if attempt == self.max_retries - 1:
                    raise RpcError(f"Connection error: {e}") from e
                await asyncio.sleep(0.5 * (attempt + 1))

        raise RpcError("Max retries exceeded")
