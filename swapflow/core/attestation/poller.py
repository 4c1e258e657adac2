"""
Attestation Poller.

Waits for Circle to attest a CCTP burn. Lookups that find nothing yet, and
lookups that fail in transit, both count as one pending poll.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

import httpx

from ...providers.base import AttestationProvider
from ..bridge.constants import cctp_domain_for
from ..chain_types import NetworkId, chain_name, normalize_network
from ..recovery.errors import AttestationTimeoutError, ProviderError
from .models import AttestationRecord

logger = logging.getLogger(__name__)


class AttestationPoller:
    """
    Fixed-interval poll of the attestation service.

    Usage:
        poller = AttestationPoller(CircleAttestationProvider())
        record = await poller.await_attestation("polygon", burn_tx_hash)
    """

    def __init__(
        self,
        provider: AttestationProvider,
        *,
        poll_interval_seconds: float = 3.0,
        max_polls: int = 300,
    ):
        if max_polls < 1:
            raise ValueError("max_polls must be at least 1")
        self.provider = provider
        self.poll_interval_seconds = poll_interval_seconds
        self.max_polls = max_polls

    async def await_attestation(
        self,
        source_chain: Union[NetworkId, int, str],
        burn_tx_hash: str,
    ) -> AttestationRecord:
        """
        Poll until the burn in ``burn_tx_hash`` is attested.

        Raises:
            UnsupportedChainError: ``source_chain`` has no CCTP domain.
            AttestationTimeoutError: Still pending after ``max_polls`` lookups.
        """
        network = normalize_network(source_chain)
        domain = cctp_domain_for(network)

        for poll in range(1, self.max_polls + 1):
            message = await self._lookup(domain, burn_tx_hash)
            if message is not None:
                logger.info(
                    "Attestation ready for %s burn %s after %d lookups",
                    chain_name(network),
                    burn_tx_hash,
                    poll,
                )
                return AttestationRecord(
                    message_bytes=message["message"],
                    attestation_signature=message["attestation"],
                    raw=message,
                )

            if poll < self.max_polls:
                logger.debug("Attestation for %s pending (%d/%d)", burn_tx_hash, poll, self.max_polls)
                await asyncio.sleep(self.poll_interval_seconds)

        raise AttestationTimeoutError(
            f"Attestation for {burn_tx_hash} not ready after {self.max_polls} lookups",
            tx_hash=burn_tx_hash,
            chain=network.name.lower(),
            polls=self.max_polls,
        )

    async def _lookup(self, domain: int, burn_tx_hash: str) -> Optional[dict]:
        try:
            return await self.provider.get_message(domain, burn_tx_hash)
        except (httpx.HTTPError, ProviderError) as exc:
            logger.warning("Attestation lookup for %s failed: %s", burn_tx_hash, exc)
            return None
