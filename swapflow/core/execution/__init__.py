"""
Transaction Execution Layer

Turns aggregator instructions into confirmed transactions:
- InstructionExecutor: per-chain sign + submit + confirm
- build_executor: executor for a network from configuration
- payloads: find the transaction inside an aggregator response

Usage:
    from swapflow.core.execution import build_executor

    async with build_executor("polygon") as executor:
        result = await executor.execute(instruction, "swap")
        print(result.tx_hash)
"""

from .aptos_executor import AptosExecutor
from .evm_executor import EvmExecutor
from .executor import InstructionExecutor
from .factory import build_executor
from .models import ExecutionResult, GasEstimate
from .solana_executor import SolanaExecutor

__all__ = [
    "AptosExecutor",
    "EvmExecutor",
    "ExecutionResult",
    "GasEstimate",
    "InstructionExecutor",
    "SolanaExecutor",
    "build_executor",
]
