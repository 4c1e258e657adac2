"""Typed results of the swap, bridge and redeem flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..chain_types import NetworkId, explorer_url


@dataclass(frozen=True)
class LegRecord:
    """One confirmed transaction of a flow."""

    leg: str
    network: NetworkId
    tx_hash: str

    @property
    def explorer_url(self) -> str:
        return explorer_url(self.network, self.tx_hash)


@dataclass
class FlowResult:
    """Ordered legs completed by a flow run."""

    flow: str
    legs: List[LegRecord] = field(default_factory=list)
    quote: Optional[Dict[str, Any]] = None

    def record(self, leg: str, network: NetworkId, tx_hash: str) -> LegRecord:
        entry = LegRecord(leg=leg, network=network, tx_hash=tx_hash)
        self.legs.append(entry)
        return entry

    @property
    def last_tx_hash(self) -> Optional[str]:
        return self.legs[-1].tx_hash if self.legs else None

    def tx_hash(self, leg: str) -> Optional[str]:
        for entry in self.legs:
            if entry.leg == leg:
                return entry.tx_hash
        return None
