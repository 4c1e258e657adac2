"""Same-chain swap: quote, instruction, execute."""

from __future__ import annotations

import logging
from typing import Optional, Union

from ..chain_types import NetworkId, chain_name, normalize_network
from .base import BaseFlow
from .models import FlowResult

logger = logging.getLogger(__name__)


class SwapFlow(BaseFlow):
    """
    Swap ``amount_in`` (smallest units) of ``input_token`` for ``output_token``.

    Usage:
        async with SwapFlow(KanaProvider()) as flow:
            result = await flow.run("solana", SOL_MINT, USDC_MINT, 10_000_000)
            print(result.last_tx_hash)
    """

    name = "swap"

    async def run(
        self,
        network: Union[NetworkId, int, str],
        input_token: str,
        output_token: str,
        amount_in: Union[int, str],
        slippage: Optional[float] = None,
        recipient: Optional[str] = None,
        swap_mode: Optional[str] = None,
    ) -> FlowResult:
        network_id = normalize_network(network)
        slippage = self.config.default_slippage if slippage is None else slippage
        result = FlowResult(flow=self.name)

        async with self.leg(result, "swap"):
            sender = self.executor(network_id).address

            async def fetch():
                quote = await self.kana.best_swap_quote(
                    network=network_id,
                    input_token=input_token,
                    output_token=output_token,
                    amount_in=amount_in,
                    slippage=slippage,
                    sender=sender,
                    swap_mode=swap_mode,
                )
                result.quote = quote
                return await self.kana.swap_instruction(quote, sender, recipient)

            tx_hash = await self.execute_fresh(network_id, fetch, "swap")
            result.record("swap", network_id, tx_hash)

        logger.info("Swap on %s complete: %s", chain_name(network_id), tx_hash)
        return result
