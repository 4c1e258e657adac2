"""
Solana Instruction Executor.

Signs the base64 versioned transactions built by the aggregator and drives
them to confirmation. The recent blockhash inside the message is never
replaced: once it expires the caller has to fetch a new transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ...providers.solana_rpc import SolanaRpcClient
from ..chain_types import NetworkId
from ..submission.backends.solana import SolanaBackend
from ..submission.models import SubmissionPolicy
from ..submission.submitter import TransactionSubmitter
from ..wallet.signers import SolanaSigner
from .executor import InstructionExecutor
from .models import ExecutionResult
from .payloads import extract_solana_transaction

logger = logging.getLogger(__name__)


class SolanaExecutor(InstructionExecutor):
    """
    Executor for Solana transactions.

    Usage:
        executor = SolanaExecutor(
            SolanaSigner.from_base58(secret),
            SolanaRpcClient("https://api.mainnet-beta.solana.com"),
        )
        result = await executor.execute(instruction_response, "swap")
    """

    network = NetworkId.SOLANA

    def __init__(
        self,
        signer: SolanaSigner,
        rpc: SolanaRpcClient,
        policy: Optional[SubmissionPolicy] = None,
        *,
        commitment: str = "confirmed",
        submitter: Optional[TransactionSubmitter] = None,
    ):
        self.signer = signer
        self.rpc = rpc
        self.submitter = submitter or TransactionSubmitter(SolanaBackend(rpc, commitment), policy)

    @property
    def address(self) -> str:
        return self.signer.address

    async def execute(self, payload: Any, description: str = "transaction") -> ExecutionResult:
        tx_base64 = extract_solana_transaction(payload)
        signed = self.signer.sign_transaction(tx_base64, description)
        logger.debug("Signed %s %s (blockhash %s)", description, signed.identifier, signed.anchor.blockhash)

        confirmation = await self.submitter.submit(signed)
        return ExecutionResult(
            network=self.network,
            tx_hash=confirmation.identifier,
            confirmation=confirmation,
        )

    async def close(self) -> None:
        await self.rpc.close()
