"""Aptos backend: submit BCS-signed transactions, follow them by hash."""

from __future__ import annotations

import logging
from typing import Any

from aptos_sdk.async_client import ApiError, RestClient

from ...recovery.errors import ProviderError
from ..backend import ChainBackend
from ..models import ConfirmationStatus, FreshnessAnchor, SignedTransaction, StatusReport

logger = logging.getLogger(__name__)

SLIPPAGE_VM_STATUS_MARKERS = (
    "slippage",
    "insufficient_output",
    "output_less_than_min",
    "min_amount_out",
)


def is_slippage_vm_status(vm_status: Any) -> bool:
    text = str(vm_status or "").lower()
    return any(marker in text for marker in SLIPPAGE_VM_STATUS_MARKERS)


class AptosBackend(ChainBackend):
    """
    ``SignedTransaction.native`` holds the SDK ``SignedTransaction``. Aptos
    finality is immediate, so a successful committed transaction is reported
    as finalized; one still in the mempool is processed, not unknown.
    """

    name = "aptos"

    def __init__(self, client: RestClient):
        self.client = client

    async def broadcast(self, tx: SignedTransaction) -> str:
        return await self.client.submit_bcs_transaction(tx.native) or tx.identifier

    async def get_status(self, identifier: str) -> StatusReport:
        try:
            txn = await self.client.transaction_by_hash(identifier)
        except ApiError as exc:
            if exc.status_code == 404:
                return StatusReport(status=ConfirmationStatus.PENDING)
            raise

        if not isinstance(txn, dict):
            raise ProviderError("Unexpected Aptos transaction response shape", provider=self.name, body=txn)
        if txn.get("type") == "pending_transaction":
            return StatusReport(status=ConfirmationStatus.PROCESSED)

        version = txn.get("version")
        slot = int(version) if version is not None else None
        if txn.get("success"):
            return StatusReport(status=ConfirmationStatus.FINALIZED, slot=slot)

        vm_status = txn.get("vm_status")
        return StatusReport(
            status=ConfirmationStatus.FAILED,
            error=vm_status,
            slippage_exceeded=is_slippage_vm_status(vm_status),
            slot=slot,
        )

    async def is_anchor_valid(self, anchor: FreshnessAnchor) -> bool:
        if anchor.expires_at is None:
            return True
        # Expiry is enforced against ledger time, not the local clock.
        info = await self.client.info()
        ledger_seconds = int(info["ledger_timestamp"]) // 1_000_000
        return ledger_seconds < anchor.expires_at
