"""EVM backend: eth_sendRawTransaction and receipt polling."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ....providers.evm_rpc import EvmRpcClient, to_int
from ....providers.jsonrpc import RpcError
from ..backend import ChainBackend
from ..models import ConfirmationStatus, SignedTransaction, StatusReport

logger = logging.getLogger(__name__)

SLIPPAGE_REVERT_MARKERS = (
    "slippage",
    "insufficient output",
    "insufficient_output",
    "too little received",
    "return amount is not enough",
)


def is_slippage_revert(reason: Any) -> bool:
    text = str(reason or "").lower()
    return any(marker in text for marker in SLIPPAGE_REVERT_MARKERS)


class EvmBackend(ChainBackend):
    """
    Legacy and EIP-1559 transactions alike: the hash is known before sending,
    so re-broadcasts of a mined transaction ("already known", "nonce too low")
    are harmless. There is no freshness anchor; the attempt budget bounds the
    wait.
    """

    def __init__(self, rpc: EvmRpcClient, name: str = "evm"):
        self.rpc = rpc
        self.name = name

    async def broadcast(self, tx: SignedTransaction) -> str:
        return await self.rpc.send_raw_transaction(tx.raw)

    async def get_status(self, identifier: str) -> StatusReport:
        receipt = await self.rpc.get_transaction_receipt(identifier)
        if not receipt:
            return StatusReport(status=ConfirmationStatus.PENDING)

        block = receipt.get("blockNumber")
        slot = int(block, 16) if isinstance(block, str) else block
        if _status_ok(receipt.get("status")):
            return StatusReport(status=ConfirmationStatus.CONFIRMED, slot=slot)

        reason = await self._revert_reason(identifier, receipt)
        return StatusReport(
            status=ConfirmationStatus.FAILED,
            error=reason,
            slippage_exceeded=is_slippage_revert(reason),
            slot=slot,
        )

    async def _revert_reason(self, identifier: str, receipt: Dict[str, Any]) -> str:
        """Replay the call against the state before its block to recover the revert message."""
        try:
            original: Optional[Dict[str, Any]] = await self.rpc.get_transaction_by_hash(identifier)
            if not original:
                return "execution reverted"
            call = {
                "from": original.get("from"),
                "to": original.get("to"),
                "data": original.get("input"),
                "value": original.get("value", "0x0"),
            }
            block = receipt.get("blockNumber")
            await self.rpc.call(call, hex(max(to_int(block) - 1, 0)) if block is not None else "latest")
        except RpcError as exc:
            return str(exc)
        return "execution reverted"


def _status_ok(status: Any) -> bool:
    if isinstance(status, str):
        return int(status, 16) == 1
    return status == 1
