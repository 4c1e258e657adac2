"""
EVM Instruction Executor.

Runs the optional token approval first, then the swap or transfer call.
Each call is priced with a legacy gas price and confirmed before the next one
is sent.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eth_utils import to_checksum_address

from ...providers.evm_rpc import EvmRpcClient, to_int
from ...providers.jsonrpc import RpcError
from ..chain_types import NetworkId, evm_chain_id
from ..recovery.errors import ProviderError
from ..submission.backends.evm import EvmBackend
from ..submission.models import ConfirmationResult, SubmissionPolicy
from ..submission.submitter import TransactionSubmitter
from ..wallet.signers import EvmSigner
from .executor import InstructionExecutor
from .models import ExecutionResult, GasEstimate
from .payloads import extract_evm_instruction

logger = logging.getLogger(__name__)


class EvmExecutor(InstructionExecutor):
    """
    Executor for EVM instructions.

    Handles:
    - ``approveIX`` before the main call when present
    - ``swapIX`` / ``transferIX`` envelopes and bare ``{to, data, value}`` calls
    - Gas estimation with headroom, falling back to a fixed limit
    """

    def __init__(
        self,
        signer: EvmSigner,
        rpc: EvmRpcClient,
        network: NetworkId,
        policy: Optional[SubmissionPolicy] = None,
        *,
        gas_limit_multiplier: float = 1.1,
        fallback_gas_limit: int = 150000,
        submitter: Optional[TransactionSubmitter] = None,
    ):
        self.signer = signer
        self.rpc = rpc
        self.network = network
        self.gas_limit_multiplier = gas_limit_multiplier
        self.fallback_gas_limit = fallback_gas_limit
        self.submitter = submitter or TransactionSubmitter(
            EvmBackend(rpc, name=network.name.lower()),
            policy,
        )

    @property
    def address(self) -> str:
        return self.signer.address

    async def execute(self, payload: Any, description: str = "transaction") -> ExecutionResult:
        instruction = extract_evm_instruction(payload)

        approval_hash = None
        if instruction.get("approveIX"):
            approval = await self._send(instruction["approveIX"], f"{description} approval")
            approval_hash = approval.identifier

        call = instruction.get("swapIX") or instruction.get("transferIX")
        if call is None and "to" in instruction and "data" in instruction:
            call = instruction
        if call is None:
            raise ProviderError(
                f"EVM instruction has no call to execute (keys found: {', '.join(sorted(instruction))})",
                provider="kana",
                body=instruction,
            )

        confirmation = await self._send(call, description)
        return ExecutionResult(
            network=self.network,
            tx_hash=confirmation.identifier,
            confirmation=confirmation,
            approval_tx_hash=approval_hash,
        )

    async def _send(self, call: Dict[str, Any], description: str) -> ConfirmationResult:
        tx = await self.build_transaction(call)
        signed = self.signer.sign_transaction(tx, description)
        logger.debug(
            "Signed %s %s nonce=%s gas=%s",
            description,
            signed.identifier,
            tx["nonce"],
            tx["gas"],
        )
        return await self.submitter.submit(signed)

    async def build_transaction(self, call: Dict[str, Any]) -> Dict[str, Any]:
        to = to_checksum_address(call["to"])
        data = call.get("data") or "0x"
        value = to_int(call.get("value") or 0)
        chain_id = call.get("chainId")
        chain_id = to_int(chain_id) if chain_id is not None else (evm_chain_id(self.network) or await self.rpc.chain_id())

        gas = await self.estimate_gas(
            {"from": self.address, "to": to, "data": data, "value": hex(value)},
            call.get("gasPrice"),
        )
        nonce = await self.rpc.get_transaction_count(self.address, "pending")

        return {
            "to": to,
            "data": data,
            "value": value,
            "chainId": chain_id,
            "nonce": nonce,
            "gas": gas.gas_limit,
            "gasPrice": gas.gas_price_wei,
        }

    async def estimate_gas(self, call: Dict[str, Any], gas_price: Any = None) -> GasEstimate:
        price = to_int(gas_price) if gas_price else await self.rpc.gas_price()
        try:
            estimate = await self.rpc.estimate_gas(call)
        except RpcError as e:
            logger.warning("Gas estimation failed, using %d: %s", self.fallback_gas_limit, e)
            return GasEstimate(gas_limit=self.fallback_gas_limit, gas_price_wei=price, estimated=False)
        return GasEstimate(gas_limit=int(estimate * self.gas_limit_multiplier), gas_price_wei=price)

    async def close(self) -> None:
        await self.rpc.close()
