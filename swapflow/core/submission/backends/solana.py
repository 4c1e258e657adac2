"""Solana backend: sendTransaction, getSignatureStatuses, blockhash validity."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ....providers.solana_rpc import SolanaRpcClient
from ..backend import ChainBackend
from ..models import ConfirmationStatus, FreshnessAnchor, SignedTransaction, StatusReport

logger = logging.getLogger(__name__)

# Aggregator router "slippage tolerance exceeded" custom program error (0x1771).
SLIPPAGE_ERROR_CODE = 6001


def is_slippage_error(err: Any) -> bool:
    """Whether a transaction ``err`` carries the router's slippage code."""
    if err is None:
        return False
    if isinstance(err, dict):
        instruction_error = err.get("InstructionError")
        if isinstance(instruction_error, (list, tuple)) and len(instruction_error) == 2:
            detail = instruction_error[1]
            if isinstance(detail, dict) and detail.get("Custom") == SLIPPAGE_ERROR_CODE:
                return True
        return any(is_slippage_error(value) for value in err.values() if isinstance(value, (dict, list)))
    if isinstance(err, (list, tuple)):
        return any(is_slippage_error(item) for item in err)
    text = str(err).lower()
    return "0x1771" in text or "slippage" in text


class SolanaBackend(ChainBackend):
    """
    Broadcast with preflight skipped and node-side retries disabled; the
    submitter does its own re-broadcasting.

    ``commitment`` is the level treated as landed: "confirmed" accepts both
    confirmed and finalized statuses, "finalized" waits for finalization.
    """

    name = "solana"

    def __init__(self, rpc: SolanaRpcClient, commitment: str = "confirmed"):
        self.rpc = rpc
        self.commitment = commitment

    async def broadcast(self, tx: SignedTransaction) -> str:
        return await self.rpc.send_transaction(tx.raw, skip_preflight=True, max_retries=0)

    async def get_status(self, identifier: str) -> StatusReport:
        statuses = await self.rpc.get_signature_statuses([identifier])
        status: Optional[dict] = statuses[0] if statuses else None
        if not status:
            return StatusReport(status=ConfirmationStatus.PENDING)

        slot = status.get("slot")
        err = status.get("err")
        if err:
            return StatusReport(
                status=ConfirmationStatus.FAILED,
                error=err,
                slippage_exceeded=is_slippage_error(err),
                slot=slot,
            )

        level = status.get("confirmationStatus")
        if level == "finalized":
            return StatusReport(status=ConfirmationStatus.FINALIZED, slot=slot)
        if level == "confirmed" and self.commitment != "finalized":
            return StatusReport(status=ConfirmationStatus.CONFIRMED, slot=slot)
        # Included but below the commitment treated as landed
        return StatusReport(status=ConfirmationStatus.PROCESSED, slot=slot)

    async def is_anchor_valid(self, anchor: FreshnessAnchor) -> bool:
        if anchor.last_valid_block_height is not None:
            height = await self.rpc.get_block_height()
            return height <= anchor.last_valid_block_height
        if anchor.blockhash:
            return await self.rpc.is_blockhash_valid(anchor.blockhash)
        return True
