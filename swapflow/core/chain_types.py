"""
Chain identification types and utilities.

The aggregator numbers chains with its own small integer ids (``NetworkId``),
unrelated to EVM chain ids or CCTP domains. Everything in swapflow speaks
``NetworkId``; the metadata table below carries the other identifiers.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union


class NetworkId(IntEnum):
    """Chain ids as understood by the Kana aggregation API."""

    SOLANA = 1
    APTOS = 2
    POLYGON = 3
    BSC = 4
    SUI = 5
    ETHEREUM = 6
    BASE = 7
    ZKSYNC = 9
    AVALANCHE = 10
    ARBITRUM = 11


class ChainType(str, Enum):
    """Execution environment family of a chain."""

    SOLANA = "solana"
    APTOS = "aptos"
    EVM = "evm"
    SUI = "sui"


EVM_NATIVE_PLACEHOLDER = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"

CHAIN_METADATA: Dict[NetworkId, Dict[str, Any]] = {
    NetworkId.SOLANA: {
        "name": "Solana",
        "aliases": ["solana", "sol"],
        "chain_type": ChainType.SOLANA,
        "native_token": "So11111111111111111111111111111111111111112",
        "explorer_tx_url": "https://solscan.io/tx/{}",
        "rpc_setting": "solana_rpc_url",
    },
    NetworkId.APTOS: {
        "name": "Aptos",
        "aliases": ["aptos", "apt"],
        "chain_type": ChainType.APTOS,
        "native_token": "0x1::aptos_coin::AptosCoin",
        "explorer_tx_url": "https://explorer.aptoslabs.com/txn/{}?network=mainnet",
        "rpc_setting": "aptos_node_url",
    },
    NetworkId.POLYGON: {
        "name": "Polygon",
        "aliases": ["polygon", "matic", "pol"],
        "chain_type": ChainType.EVM,
        "evm_chain_id": 137,
        "native_token": EVM_NATIVE_PLACEHOLDER,
        "explorer_tx_url": "https://polygonscan.com/tx/{}",
        "rpc_setting": "polygon_rpc_url",
    },
    NetworkId.BSC: {
        "name": "BNB Smart Chain",
        "aliases": ["bsc", "bnb", "binance"],
        "chain_type": ChainType.EVM,
        "evm_chain_id": 56,
        "native_token": EVM_NATIVE_PLACEHOLDER,
        "explorer_tx_url": "https://bscscan.com/tx/{}",
        "rpc_setting": "bsc_rpc_url",
    },
    NetworkId.SUI: {
        "name": "Sui",
        "aliases": ["sui"],
        "chain_type": ChainType.SUI,
        "native_token": "0x2::sui::SUI",
        "explorer_tx_url": "https://suiscan.xyz/mainnet/tx/{}",
    },
    NetworkId.ETHEREUM: {
        "name": "Ethereum",
        "aliases": ["ethereum", "eth", "mainnet"],
        "chain_type": ChainType.EVM,
        "evm_chain_id": 1,
        "native_token": EVM_NATIVE_PLACEHOLDER,
        "explorer_tx_url": "https://etherscan.io/tx/{}",
        "rpc_setting": "ethereum_rpc_url",
    },
    NetworkId.BASE: {
        "name": "Base",
        "aliases": ["base"],
        "chain_type": ChainType.EVM,
        "evm_chain_id": 8453,
        "native_token": EVM_NATIVE_PLACEHOLDER,
        "explorer_tx_url": "https://basescan.org/tx/{}",
        "rpc_setting": "base_rpc_url",
    },
    NetworkId.ZKSYNC: {
        "name": "zkSync Era",
        "aliases": ["zksync", "zksync era", "zk"],
        "chain_type": ChainType.EVM,
        "evm_chain_id": 324,
        "native_token": EVM_NATIVE_PLACEHOLDER,
        "explorer_tx_url": "https://explorer.zksync.io/tx/{}",
        "rpc_setting": "zksync_rpc_url",
    },
    NetworkId.AVALANCHE: {
        "name": "Avalanche",
        "aliases": ["avalanche", "avax"],
        "chain_type": ChainType.EVM,
        "evm_chain_id": 43114,
        "native_token": EVM_NATIVE_PLACEHOLDER,
        "explorer_tx_url": "https://snowtrace.io/tx/{}",
        "rpc_setting": "avalanche_rpc_url",
    },
    NetworkId.ARBITRUM: {
        "name": "Arbitrum",
        "aliases": ["arbitrum", "arb", "arbitrum one"],
        "chain_type": ChainType.EVM,
        "evm_chain_id": 42161,
        "native_token": EVM_NATIVE_PLACEHOLDER,
        "explorer_tx_url": "https://arbiscan.io/tx/{}",
        "rpc_setting": "arbitrum_rpc_url",
    },
}

CHAIN_ALIAS_TO_ID: Dict[str, NetworkId] = {
    alias: network_id
    for network_id, details in CHAIN_METADATA.items()
    for alias in details.get("aliases", [])
}


def normalize_network(network: Union[NetworkId, int, str, None]) -> NetworkId:
    """
    Convert user input to a canonical NetworkId.

    Accepts a NetworkId, its integer value, a chain name or alias
    ("sol", "avax", "arbitrum"), or a numeric string.

    Raises:
        ValueError: If the identifier is not recognized.

    Examples:
        >>> normalize_network("avax")
        <NetworkId.AVALANCHE: 10>
        >>> normalize_network(2)
        <NetworkId.APTOS: 2>
    """
    if network is None:
        raise ValueError("A network is required")

    if isinstance(network, NetworkId):
        return network

    if isinstance(network, int):
        try:
            return NetworkId(network)
        except ValueError:
            raise ValueError(f"Unknown network id: {network!r}") from None

    key = network.lower().strip()
    if key in CHAIN_ALIAS_TO_ID:
        return CHAIN_ALIAS_TO_ID[key]

    if key.isdigit():
        return normalize_network(int(key))

    raise ValueError(f"Unknown chain identifier: {network!r}")


def chain_type_of(network: Union[NetworkId, int, str]) -> ChainType:
    return CHAIN_METADATA[normalize_network(network)]["chain_type"]


def chain_name(network: Union[NetworkId, int, str]) -> str:
    return CHAIN_METADATA[normalize_network(network)]["name"]


def evm_chain_id(network: Union[NetworkId, int, str]) -> Optional[int]:
    return CHAIN_METADATA[normalize_network(network)].get("evm_chain_id")


def explorer_url(network: Union[NetworkId, int, str], tx_hash: str) -> str:
    template = CHAIN_METADATA[normalize_network(network)].get("explorer_tx_url")
    return template.format(tx_hash) if template else tx_hash


__all__ = [
    "NetworkId",
    "ChainType",
    "CHAIN_METADATA",
    "CHAIN_ALIAS_TO_ID",
    "EVM_NATIVE_PLACEHOLDER",
    "normalize_network",
    "chain_type_of",
    "chain_name",
    "evm_chain_id",
    "explorer_url",
]
