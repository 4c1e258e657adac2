"""
Local key signers for Solana, Aptos and EVM.

Each signer turns the unsigned transaction shape the aggregator returns for
its chain into a ``SignedTransaction`` the submitter can broadcast. Signers
hold key material, so they are built explicitly and passed in; nothing here
reads configuration.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, Optional

from aptos_sdk.account import Account as AptosAccount
from eth_account import Account
from eth_utils import to_checksum_address, to_hex
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.transaction import VersionedTransaction

from ..submission.models import FreshnessAnchor, SignedTransaction

AIP80_ED25519_PREFIX = "ed25519-priv-"


class SolanaSigner:
    """Signs aggregator-built versioned transactions with a local keypair."""

    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    @classmethod
    def from_base58(cls, secret: str) -> "SolanaSigner":
        return cls(Keypair.from_base58_string(secret.strip()))

    @property
    def address(self) -> str:
        return str(self.keypair.pubkey())

    def sign_transaction(self, tx_base64: str, description: str = "transaction") -> SignedTransaction:
        """
        Add our signature to a base64 ``VersionedTransaction``.

        The message, including its recent blockhash, is left untouched; that
        blockhash becomes the freshness anchor of the submission.
        """
        tx = VersionedTransaction.from_bytes(base64.b64decode(tx_base64))
        message = tx.message

        signer_keys = list(message.account_keys)[: message.header.num_required_signatures]
        pubkey = self.keypair.pubkey()
        if pubkey not in signer_keys:
            raise ValueError(f"{pubkey} is not a required signer of this transaction")

        signatures = list(tx.signatures)
        signatures[signer_keys.index(pubkey)] = self.keypair.sign_message(to_bytes_versioned(message))
        signed = VersionedTransaction.populate(message, signatures)

        return SignedTransaction(
            raw=bytes(signed),
            identifier=str(signed.signatures[0]),
            anchor=FreshnessAnchor(blockhash=str(message.recent_blockhash)),
            description=description,
        )


class AptosSigner:
    """
    Ed25519 Aptos account.

    Transactions are built and signed through the SDK's ``RestClient``
    (``create_bcs_signed_transaction``), which takes the wrapped ``account``.
    """

    def __init__(self, account: AptosAccount):
        self.account = account

    @classmethod
    def from_hex(cls, private_key: str) -> "AptosSigner":
        """Accept ``0x``-prefixed, bare or AIP-80 (``ed25519-priv-0x...``) keys."""
        key = private_key.strip()
        if key.startswith(AIP80_ED25519_PREFIX):
            key = key[len(AIP80_ED25519_PREFIX):]
        return cls(AptosAccount.load_key(key))

    @property
    def public_key_hex(self) -> str:
        return str(self.account.public_key())

    @property
    def address(self) -> str:
        return str(self.account.address())


class EvmSigner:
    """Local private-key signer for EVM transactions."""

    def __init__(self, private_key: str):
        self.account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return to_checksum_address(self.account.address)

    def sign_transaction(
        self,
        tx: Dict[str, Any],
        description: str = "transaction",
        anchor: Optional[FreshnessAnchor] = None,
    ) -> SignedTransaction:
        signed = self.account.sign_transaction(tx)
        return SignedTransaction(
            raw=bytes(signed.raw_transaction),
            identifier=to_hex(signed.hash),
            anchor=anchor,
            description=description,
        )


__all__ = ["AptosSigner", "EvmSigner", "SolanaSigner"]
