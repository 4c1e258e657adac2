"""
Tests for chain identification and the CCTP domain table.
"""

import pytest

from swapflow.core.bridge.constants import CCTP_DOMAINS, cctp_domain_for, is_cctp_supported
from swapflow.core.chain_types import (
    ChainType,
    NetworkId,
    chain_name,
    chain_type_of,
    evm_chain_id,
    explorer_url,
    normalize_network,
)
from swapflow.core.recovery.errors import UnsupportedChainError


class TestNormalizeNetwork:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("solana", NetworkId.SOLANA),
            ("SOL", NetworkId.SOLANA),
            ("avax", NetworkId.AVALANCHE),
            ("matic", NetworkId.POLYGON),
            (2, NetworkId.APTOS),
            ("11", NetworkId.ARBITRUM),
            (NetworkId.BASE, NetworkId.BASE),
        ],
    )
    def test_accepts_names_aliases_and_ids(self, value, expected):
        assert normalize_network(value) == expected

    @pytest.mark.parametrize("value", ["dogechain", 8, None, "  "])
    def test_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            normalize_network(value)

    def test_chain_metadata(self):
        assert chain_type_of("aptos") == ChainType.APTOS
        assert chain_type_of("base") == ChainType.EVM
        assert chain_type_of("sui") == ChainType.SUI
        assert evm_chain_id("polygon") == 137
        assert evm_chain_id("solana") is None
        assert chain_name(NetworkId.ZKSYNC) == "zkSync Era"
        assert explorer_url("solana", "5sig") == "https://solscan.io/tx/5sig"


class TestCctpDomains:

    def test_domain_table(self):
        assert CCTP_DOMAINS == {
            NetworkId.ETHEREUM: 0,
            NetworkId.AVALANCHE: 1,
            NetworkId.ARBITRUM: 3,
            NetworkId.SOLANA: 5,
            NetworkId.BASE: 6,
            NetworkId.POLYGON: 7,
            NetworkId.SUI: 8,
            NetworkId.APTOS: 9,
        }

    def test_lookup_by_alias(self):
        assert cctp_domain_for("arb") == 3
        assert cctp_domain_for(NetworkId.SUI) == 8

    @pytest.mark.parametrize("network", ["bsc", "zksync"])
    def test_chains_without_domain(self, network):
        assert is_cctp_supported(network) is False
        with pytest.raises(UnsupportedChainError):
            cctp_domain_for(network)
