"""
Locate the executable transaction inside an aggregator response.

The aggregator names the transaction differently per endpoint and chain
(``swapTransaction`` for Solana swaps, ``claimPayload`` for Aptos claims,
``approveIX``/``transferIX`` for EVM transfers, ...). Sometimes the
instruction is the response itself.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

from ..chain_types import ChainType
from ..recovery.errors import ProviderError

PAYLOAD_KEYS: Sequence[str] = (
    "swapTransaction",
    "transferTx",
    "swapPayload",
    "instruction",
    "bridgePayload",
    "claimIx",
    "claimPayload",
    "redeemIx",
    "transaction",
    "tx",
    "payload",
)

EVM_INSTRUCTION_KEYS: Sequence[str] = ("approveIX", "swapIX", "transferIX")


def unwrap_data_block(data: Any) -> Any:
    """Take the first element when the response is a list."""
    if isinstance(data, list):
        if not data:
            raise ProviderError("Aggregator returned an empty data block", provider="kana", body=data)
        return data[0]
    return data


def _keys_of(data: Any) -> str:
    if isinstance(data, dict):
        return ", ".join(sorted(data)) or "<none>"
    return type(data).__name__


def _find(data: Dict[str, Any], keys: Iterable[str]) -> Optional[Any]:
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def extract_solana_transaction(data: Any, preferred: Sequence[str] = ()) -> str:
    """Return the base64 serialized transaction."""
    data = unwrap_data_block(data)
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        value = _find(data, [*preferred, *PAYLOAD_KEYS])
        if isinstance(value, str):
            return value
        if isinstance(value, dict):
            return extract_solana_transaction(value)
    raise ProviderError(
        f"No Solana transaction in aggregator response (keys found: {_keys_of(data)})",
        provider="kana",
        body=data,
    )


def _is_aptos_entry_function(data: Any) -> bool:
    return isinstance(data, dict) and "function" in data and "arguments" in data


def extract_aptos_payload(data: Any, preferred: Sequence[str] = ()) -> Dict[str, Any]:
    """Return an entry function payload ``{function, type_arguments, arguments}``."""
    data = unwrap_data_block(data)
    if _is_aptos_entry_function(data):
        return data
    if isinstance(data, dict):
        value = _find(data, [*preferred, *PAYLOAD_KEYS])
        if value is not None and value is not data:
            return extract_aptos_payload(value)
    raise ProviderError(
        f"No Aptos entry function in aggregator response (keys found: {_keys_of(data)})",
        provider="kana",
        body=data,
    )


def _is_evm_call(data: Any) -> bool:
    return isinstance(data, dict) and "to" in data and "data" in data


def extract_evm_instruction(data: Any, preferred: Sequence[str] = ()) -> Dict[str, Any]:
    """
    Return an EVM instruction: either an envelope holding ``approveIX`` and
    ``swapIX``/``transferIX``, or a bare ``{to, data, value}`` call.
    """
    data = unwrap_data_block(data)
    if isinstance(data, dict):
        if any(data.get(key) for key in EVM_INSTRUCTION_KEYS) or _is_evm_call(data):
            return data
        value = _find(data, [*preferred, *PAYLOAD_KEYS])
        if value is not None and value is not data:
            return extract_evm_instruction(value)
    raise ProviderError(
        f"No EVM transaction in aggregator response (keys found: {_keys_of(data)})",
        provider="kana",
        body=data,
    )


def extract_for_chain(data: Any, chain_type: ChainType, preferred: Sequence[str] = ()) -> Any:
    if chain_type == ChainType.SOLANA:
        return extract_solana_transaction(data, preferred)
    if chain_type == ChainType.APTOS:
        return extract_aptos_payload(data, preferred)
    if chain_type == ChainType.EVM:
        return extract_evm_instruction(data, preferred)
    raise ProviderError(f"No payload extractor for {chain_type.value}", provider="kana")


__all__ = [
    "EVM_INSTRUCTION_KEYS",
    "PAYLOAD_KEYS",
    "extract_aptos_payload",
    "extract_evm_instruction",
    "extract_for_chain",
    "extract_solana_transaction",
    "unwrap_data_block",
]
