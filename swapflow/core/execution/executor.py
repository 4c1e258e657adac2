from abc import ABC, abstractmethod
from typing import Any

from ..chain_types import NetworkId
from .models import ExecutionResult


class InstructionExecutor(ABC):
    """Signs and submits aggregator instructions for one chain."""

    network: NetworkId

    @property
    @abstractmethod
    def address(self) -> str:
        """Address of the local signer on this chain"""
        pass

    @abstractmethod
    async def execute(self, payload: Any, description: str = "transaction") -> ExecutionResult:
        """Sign, submit and confirm ``payload``; return the landed hash"""
        pass

    async def close(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False
