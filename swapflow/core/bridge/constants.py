"""Constants for CCTP bridging."""

from enum import IntEnum
from typing import Dict, Union

from ..chain_types import NetworkId, chain_name, normalize_network
from ..recovery.errors import UnsupportedChainError


class BridgeId(IntEnum):
    """Bridge identifiers accepted by the aggregator's redeem endpoint."""

    NATIVE = 0
    WORMHOLE = 1
    LAYERZERO = 2
    CCTP = 3
    CCTP_V2 = 4


# Circle CCTP domain per chain. This is the only copy of the mapping; every
# chain the bridge flows accept must appear here.
# https://developers.circle.com/cctp/supported-domains
CCTP_DOMAINS: Dict[NetworkId, int] = {
    NetworkId.ETHEREUM: 0,
    NetworkId.AVALANCHE: 1,
    NetworkId.ARBITRUM: 3,
    NetworkId.SOLANA: 5,
    NetworkId.BASE: 6,
    NetworkId.POLYGON: 7,
    NetworkId.SUI: 8,
    NetworkId.APTOS: 9,
}

PENDING_ATTESTATION = "PENDING"


def cctp_domain_for(network: Union[NetworkId, int, str]) -> int:
    """Return the CCTP domain of a chain, or raise UnsupportedChainError."""
    network_id = normalize_network(network)
    try:
        return CCTP_DOMAINS[network_id]
    except KeyError:
        raise UnsupportedChainError(
            f"{chain_name(network_id)} has no CCTP domain",
            chain=network_id.name.lower(),
        ) from None


def is_cctp_supported(network: Union[NetworkId, int, str]) -> bool:
    return normalize_network(network) in CCTP_DOMAINS
