"""
Execution models and types.
"""

from dataclasses import dataclass
from typing import Optional

from ..chain_types import NetworkId
from ..submission.models import ConfirmationResult


@dataclass
class GasEstimate:
    """Gas settings for a legacy-priced EVM transaction."""
    gas_limit: int
    gas_price_wei: int
    estimated: bool = True          # False when the fallback limit was used

    @property
    def max_cost_wei(self) -> int:
        return self.gas_limit * self.gas_price_wei


@dataclass
class ExecutionResult:
    """Outcome of executing one aggregator instruction on one chain."""
    network: NetworkId
    tx_hash: str
    confirmation: Optional[ConfirmationResult] = None
    approval_tx_hash: Optional[str] = None     # EVM token approval sent first
