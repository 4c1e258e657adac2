"""
Solana JSON-RPC client.

Covers the handful of calls needed to broadcast a signed transaction and
follow it to confirmation.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

from .jsonrpc import JsonRpcProvider


class SolanaRpcClient(JsonRpcProvider):
    """
    Solana RPC access.

    Usage:
        async with SolanaRpcClient("https://api.mainnet-beta.solana.com") as rpc:
            signature = await rpc.send_transaction(raw_bytes)
            statuses = await rpc.get_signature_statuses([signature])
    """

    name = "solana-rpc"

    def __init__(self, rpc_url: str, *, commitment: str = "confirmed", **kwargs: Any):
        super().__init__(rpc_url, **kwargs)
        self.commitment = commitment

    async def send_transaction(
        self,
        raw_transaction: bytes,
        skip_preflight: bool = True,
        max_retries: Optional[int] = 0,
    ) -> str:
        """
        Send a signed, serialized transaction.

        Args:
            raw_transaction: Wire-format transaction bytes
            skip_preflight: Skip node-side simulation
            max_retries: Node-side rebroadcast count; 0 leaves retrying to the caller

        Returns:
            Transaction signature (base58)
        """
        options: Dict[str, Any] = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": self.commitment,
        }
        if max_retries is not None:
            options["maxRetries"] = max_retries

        encoded = base64.b64encode(raw_transaction).decode("ascii")
        return await self._rpc_call("sendTransaction", [encoded, options])

    async def get_signature_statuses(
        self,
        signatures: List[str],
        search_transaction_history: bool = False,
    ) -> List[Optional[Dict[str, Any]]]:
        """Return one status dict (or None when unknown) per signature."""
        result = await self._rpc_call(
            "getSignatureStatuses",
            [signatures, {"searchTransactionHistory": search_transaction_history}],
        )
        return (result or {}).get("value") or [None] * len(signatures)

    async def is_blockhash_valid(self, blockhash: str, commitment: str = "processed") -> bool:
        result = await self._rpc_call(
            "isBlockhashValid",
            [blockhash, {"commitment": commitment}],
        )
        return bool((result or {}).get("value"))

    async def get_latest_blockhash(self) -> Dict[str, Any]:
        """
        Get a recent blockhash.

        Returns:
            Dict with blockhash and lastValidBlockHeight
        """
        result = await self._rpc_call(
            "getLatestBlockhash",
            [{"commitment": self.commitment}],
        )
        value = (result or {}).get("value", {})
        return {
            "blockhash": value.get("blockhash"),
            "lastValidBlockHeight": value.get("lastValidBlockHeight"),
        }

    async def get_block_height(self) -> int:
        return int(await self._rpc_call("getBlockHeight", [{"commitment": self.commitment}]))
