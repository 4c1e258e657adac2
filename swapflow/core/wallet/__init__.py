"""
Local signers.

Usage:
    from swapflow.core.wallet import SolanaSigner

    signer = SolanaSigner.from_base58(settings.solana_private_key)
    signed = signer.sign_transaction(instruction["swapTransaction"])
"""

from .signers import AptosSigner, EvmSigner, SolanaSigner

__all__ = ["AptosSigner", "EvmSigner", "SolanaSigner"]
