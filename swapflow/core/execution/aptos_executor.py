"""
Aptos Instruction Executor.

Encodes the aggregator's entry function payload to BCS against the on-chain
module ABI, then has the SDK client fill in sequence number, gas and expiry
and sign it with the local account.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from aptos_sdk.async_client import RestClient

from ..chain_types import NetworkId
from ..submission.backends.aptos import AptosBackend
from ..submission.models import FreshnessAnchor, SignedTransaction, SubmissionPolicy
from ..submission.submitter import TransactionSubmitter
from ..wallet.signers import AptosSigner
from .aptos_abi import build_entry_function, entry_function_params, parse_address, split_function_id
from .executor import InstructionExecutor
from .models import ExecutionResult
from .payloads import extract_aptos_payload

logger = logging.getLogger(__name__)


class AptosExecutor(InstructionExecutor):
    """Executor for Aptos entry function payloads."""

    network = NetworkId.APTOS

    def __init__(
        self,
        signer: AptosSigner,
        client: RestClient,
        policy: Optional[SubmissionPolicy] = None,
        *,
        submitter: Optional[TransactionSubmitter] = None,
    ):
        self.signer = signer
        self.client = client
        self.submitter = submitter or TransactionSubmitter(AptosBackend(client), policy)
        self._params: Dict[Tuple[str, str, str], List[str]] = {}

    @property
    def address(self) -> str:
        return self.signer.address

    async def function_params(self, function_id: str) -> List[str]:
        """Parameter types of an entry function, cached per function id."""
        key = split_function_id(function_id)
        if key not in self._params:
            address, module, function = key
            module_abi = await self.client.account_module(parse_address(address), module)
            self._params[key] = entry_function_params(module_abi, function)
        return self._params[key]

    async def sign(self, payload: Dict[str, Any], description: str = "transaction") -> SignedTransaction:
        params = await self.function_params(payload["function"])
        signed = await self.client.create_bcs_signed_transaction(
            self.signer.account,
            build_entry_function(payload, params),
        )

        return SignedTransaction(
            raw=signed.bytes(),
            anchor=FreshnessAnchor(expires_at=int(signed.transaction.expiration_timestamps_secs)),
            description=description,
            native=signed,
        )

    async def execute(self, payload: Any, description: str = "transaction") -> ExecutionResult:
        entry_function = extract_aptos_payload(payload)
        signed = await self.sign(entry_function, description)
        logger.debug("Signed %s calling %s", description, entry_function["function"])

        confirmation = await self.submitter.submit(signed)
        return ExecutionResult(
            network=self.network,
            tx_hash=confirmation.identifier,
            confirmation=confirmation,
        )

    async def close(self) -> None:
        await self.client.close()
