"""CCTP bridge metadata."""

from .constants import (
    BridgeId,
    CCTP_DOMAINS,
    PENDING_ATTESTATION,
    cctp_domain_for,
    is_cctp_supported,
)

__all__ = [
    "BridgeId",
    "CCTP_DOMAINS",
    "PENDING_ATTESTATION",
    "cctp_domain_for",
    "is_cctp_supported",
]
