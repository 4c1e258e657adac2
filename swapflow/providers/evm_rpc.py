"""EVM JSON-RPC client."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .jsonrpc import JsonRpcProvider


def to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    return int(value, 16) if str(value).startswith("0x") else int(value)


class EvmRpcClient(JsonRpcProvider):
    """Calls needed to nonce, price, send and follow an EVM transaction."""

    name = "evm-rpc"

    async def chain_id(self) -> int:
        return to_int(await self._rpc_call("eth_chainId", []))

    async def gas_price(self) -> int:
        return to_int(await self._rpc_call("eth_gasPrice", []))

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return to_int(await self._rpc_call("eth_getTransactionCount", [address, block]))

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return to_int(await self._rpc_call("eth_estimateGas", [tx]))

    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        return await self._rpc_call("eth_sendRawTransaction", ["0x" + raw_transaction.hex()])

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self._rpc_call("eth_getTransactionReceipt", [tx_hash])

    async def get_transaction_by_hash(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self._rpc_call("eth_getTransactionByHash", [tx_hash])

    async def call(self, tx: Dict[str, Any], block: str = "latest") -> str:
        return await self._rpc_call("eth_call", [tx, block])


__all__ = ["EvmRpcClient", "to_int"]
