from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class Provider(ABC):
    """Base interface for every HTTP-backed client"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is configured to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass

    async def close(self) -> None:
        pass


class AttestationProvider(Provider):
    """Source of signed CCTP messages for burn transactions"""

    @abstractmethod
    async def get_message(self, domain: int, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Return ``{message, attestation}`` once attested, or None while pending"""
        pass
