"""
Cross-chain swap over CCTP.

Legs, in order (each waits for the previous one to confirm):
    source_swap   Solana only, when the quote carries a ``sourceSwapRoute``
    burn          swap-and-burn / transfer on the source chain
    attestation   Circle attests the burn
    mint          claim instruction executed on the target chain
    target_swap   when the quote carries a ``targetSwapRoute``
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from ..bridge.constants import cctp_domain_for
from ..attestation.poller import AttestationPoller
from ..chain_types import NetworkId, chain_name, normalize_network
from .base import BaseFlow
from .models import FlowResult

logger = logging.getLogger(__name__)


class CrossChainFlow(BaseFlow):
    """Swap a token on one chain for a token on another, bridging USDC via CCTP."""

    name = "cross_chain"

    def __init__(self, kana, poller: AttestationPoller, **kwargs: Any) -> None:
        super().__init__(kana, **kwargs)
        self.poller = poller

    async def run(
        self,
        source_network: Union[NetworkId, int, str],
        target_network: Union[NetworkId, int, str],
        source_token: str,
        target_token: str,
        amount_in: Union[int, str],
        slippage: Optional[float] = None,
    ) -> FlowResult:
        source = normalize_network(source_network)
        target = normalize_network(target_network)
        cctp_domain_for(source)
        cctp_domain_for(target)
        slippage = self.config.default_slippage if slippage is None else slippage
        result = FlowResult(flow=self.name)

        logger.info("Bridging %s -> %s", chain_name(source), chain_name(target))

        async with self.leg(result, "quote"):
            source_address = self.executor(source).address
            target_address = self.executor(target).address
            quote: Dict[str, Any] = await self.kana.cross_chain_quote(
                source_network=source,
                target_network=target,
                source_token=source_token,
                target_token=target_token,
                amount_in=amount_in,
                source_slippage=slippage,
                target_slippage=slippage,
            )
            result.quote = quote

        source_route = quote.get("sourceSwapRoute")
        if source == NetworkId.SOLANA and source_route:
            async with self.leg(result, "source_swap"):
                tx_hash = await self.execute_fresh(
                    source,
                    lambda: self.kana.swap_instruction(source_route, source_address),
                    "source swap",
                )
                result.record("source_swap", source, tx_hash)
            await self.wait_for_balance_sync()

        async with self.leg(result, "burn"):
            burn_hash = await self.execute_fresh(
                source,
                lambda: self.kana.cross_chain_transfer(quote, source_address, target_address),
                "burn",
            )
            result.record("burn", source, burn_hash)

        async with self.leg(result, "attestation"):
            attestation = await self.poller.await_attestation(source, burn_hash)

        async with self.leg(result, "mint"):
            mint_hash = await self.execute_fresh(
                target,
                lambda: self.kana.claim(
                    quote,
                    target_address,
                    attestation.message_bytes,
                    attestation.attestation_signature,
                ),
                "mint",
            )
            result.record("mint", target, mint_hash)

        target_route = quote.get("targetSwapRoute")
        if target_route:
            await self.wait_for_balance_sync()
            async with self.leg(result, "target_swap"):
                tx_hash = await self.execute_fresh(
                    target,
                    lambda: self.kana.swap_instruction(target_route, target_address),
                    "target swap",
                )
                result.record("target_swap", target, tx_hash)

        logger.info(
            "Bridge %s -> %s complete: %s",
            chain_name(source),
            chain_name(target),
            result.last_tx_hash,
        )
        return result
