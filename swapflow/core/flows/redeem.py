"""Resume a bridge after its burn landed: attestation, then mint on the target chain."""

from __future__ import annotations

import logging
from typing import Any, Union

from ..attestation.poller import AttestationPoller
from ..bridge.constants import BridgeId, cctp_domain_for
from ..chain_types import NetworkId, chain_name, normalize_network
from .base import BaseFlow
from .models import FlowResult

logger = logging.getLogger(__name__)


class RedeemFlow(BaseFlow):
    name = "redeem"

    def __init__(self, kana, poller: AttestationPoller, **kwargs: Any) -> None:
        super().__init__(kana, **kwargs)
        self.poller = poller

    async def run(
        self,
        source_network: Union[NetworkId, int, str],
        target_network: Union[NetworkId, int, str],
        burn_tx_hash: str,
    ) -> FlowResult:
        source = normalize_network(source_network)
        target = normalize_network(target_network)
        cctp_domain_for(source)
        cctp_domain_for(target)
        result = FlowResult(flow=self.name)

        async with self.leg(result, "attestation"):
            attestation = await self.poller.await_attestation(source, burn_tx_hash)

        async with self.leg(result, "redeem"):
            target_address = self.executor(target).address
            tx_hash = await self.execute_fresh(
                target,
                lambda: self.kana.redeem(
                    source_network=source,
                    target_network=target,
                    target_address=target_address,
                    message_bytes=attestation.message_bytes,
                    attestation_signature=attestation.attestation_signature,
                    bridge_id=BridgeId.CCTP,
                ),
                "redeem",
            )
            result.record("redeem", target, tx_hash)

        logger.info("Redeemed %s burn %s on %s: %s", chain_name(source), burn_tx_hash, chain_name(target), tx_hash)
        return result
