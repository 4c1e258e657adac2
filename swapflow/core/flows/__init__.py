"""Swap, bridge and redeem flows built on the executors and the attestation poller."""

from .base import BaseFlow
from .cross_chain import CrossChainFlow
from .models import FlowResult, LegRecord
from .redeem import RedeemFlow
from .swap import SwapFlow

__all__ = [
    "BaseFlow",
    "CrossChainFlow",
    "FlowResult",
    "LegRecord",
    "RedeemFlow",
    "SwapFlow",
]
