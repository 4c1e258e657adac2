"""
Tests for building executors from settings.
"""

import pytest
from aptos_sdk.account import Account as AptosAccount
from solders.keypair import Keypair

from swapflow.config import Settings
from swapflow.core.chain_types import NetworkId
from swapflow.core.execution import AptosExecutor, EvmExecutor, SolanaExecutor, build_executor
from swapflow.core.recovery.errors import UnsupportedChainError


EVM_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_solana_executor():
    keypair = Keypair()

    executor = build_executor("solana", make_settings(solana_private_key=str(keypair)))

    assert isinstance(executor, SolanaExecutor)
    assert executor.address == str(keypair.pubkey())


def test_aptos_executor():
    account = AptosAccount.generate()
    config = make_settings(
        aptos_private_key=account.private_key.hex(),
        aptos_gas_unit_price=150,
        aptos_expiration_seconds=45,
    )

    executor = build_executor(NetworkId.APTOS, config)

    assert isinstance(executor, AptosExecutor)
    assert executor.address == str(account.address())
    assert executor.client.client_config.gas_unit_price == 150
    assert executor.client.client_config.expiration_ttl == 45


def test_evm_executor_needs_rpc_url():
    config = make_settings(evm_private_key=EVM_KEY)

    with pytest.raises(ValueError) as exc_info:
        build_executor("arbitrum", config)

    assert "ARBITRUM_RPC_URL" in str(exc_info.value)


def test_evm_executor():
    config = make_settings(evm_private_key=EVM_KEY, polygon_rpc_url="https://polygon.example")

    executor = build_executor("matic", config)

    assert isinstance(executor, EvmExecutor)
    assert executor.network == NetworkId.POLYGON
    assert executor.address == "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


def test_missing_key():
    with pytest.raises(ValueError) as exc_info:
        build_executor("solana", make_settings())

    assert "SOLANA_PRIVATE_KEY" in str(exc_info.value)


def test_sui_is_unsupported():
    with pytest.raises(UnsupportedChainError):
        build_executor("sui", make_settings())
