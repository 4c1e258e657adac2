"""Build the executor for a network from configuration."""

from __future__ import annotations

from typing import Optional, Union

from aptos_sdk.async_client import ClientConfig, RestClient

from ...config import Settings, settings as default_settings
from ...providers.evm_rpc import EvmRpcClient
from ...providers.solana_rpc import SolanaRpcClient
from ..chain_types import ChainType, NetworkId, chain_name, chain_type_of, normalize_network
from ..recovery.errors import UnsupportedChainError
from ..wallet.signers import AptosSigner, EvmSigner, SolanaSigner
from .aptos_executor import AptosExecutor
from .evm_executor import EvmExecutor
from .executor import InstructionExecutor
from .solana_executor import SolanaExecutor


def _require(value: str, setting: str, network: NetworkId) -> str:
    if not value:
        raise ValueError(f"{setting.upper()} must be set to execute on {chain_name(network)}")
    return value


def _aptos_client_config(config: Settings) -> ClientConfig:
    client_config = ClientConfig()
    client_config.max_gas_amount = config.aptos_max_gas_amount
    client_config.gas_unit_price = config.aptos_gas_unit_price
    client_config.expiration_ttl = config.aptos_expiration_seconds
    return client_config


def build_executor(
    network: Union[NetworkId, int, str],
    config: Optional[Settings] = None,
) -> InstructionExecutor:
    """
    Create a signer, RPC client and executor for ``network``.

    Raises:
        UnsupportedChainError: No execution support for the chain (Sui).
        ValueError: Key or RPC endpoint for the chain is not configured.
    """
    config = config or default_settings
    network_id = normalize_network(network)
    chain_type = chain_type_of(network_id)
    policy = config.submission_policy()

    if chain_type == ChainType.SOLANA:
        key = _require(config.solana_private_key, "solana_private_key", network_id)
        url = _require(config.rpc_url_for(network_id) or "", "solana_rpc_url", network_id)
        return SolanaExecutor(
            SolanaSigner.from_base58(key),
            SolanaRpcClient(url, commitment=config.solana_commitment),
            policy,
            commitment=config.solana_commitment,
        )

    if chain_type == ChainType.APTOS:
        key = _require(config.aptos_private_key, "aptos_private_key", network_id)
        url = _require(config.rpc_url_for(network_id) or "", "aptos_node_url", network_id)
        return AptosExecutor(
            AptosSigner.from_hex(key),
            RestClient(url, client_config=_aptos_client_config(config)),
            policy,
        )

    if chain_type == ChainType.EVM:
        key = _require(config.evm_private_key, "evm_private_key", network_id)
        url = _require(config.rpc_url_for(network_id) or "", f"{network_id.name.lower()}_rpc_url", network_id)
        return EvmExecutor(
            EvmSigner(key),
            EvmRpcClient(url),
            network_id,
            policy,
            gas_limit_multiplier=config.evm_gas_limit_multiplier,
            fallback_gas_limit=config.evm_fallback_gas_limit,
        )

    raise UnsupportedChainError(
        f"Transaction execution on {chain_name(network_id)} is not supported",
        chain=network_id.name.lower(),
    )
