from .aptos import AptosBackend
from .evm import EvmBackend
from .solana import SolanaBackend

__all__ = ["AptosBackend", "EvmBackend", "SolanaBackend"]
