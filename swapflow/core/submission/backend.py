from abc import ABC, abstractmethod

from .models import FreshnessAnchor, SignedTransaction, StatusReport


class ChainBackend(ABC):
    """Chain capabilities the submitter needs: broadcast, status lookup, expiry check."""

    name: str

    @abstractmethod
    async def broadcast(self, tx: SignedTransaction) -> str:
        """Send the serialized bytes once and return the transaction identifier"""
        pass

    @abstractmethod
    async def get_status(self, identifier: str) -> StatusReport:
        """Look up the current status of a broadcast transaction"""
        pass

    async def is_anchor_valid(self, anchor: FreshnessAnchor) -> bool:
        """Whether a transaction built against ``anchor`` can still land"""
        return True
