"""Shared plumbing for multi-leg flows."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional, Union

import structlog

from ...config import Settings, settings as default_settings
from ...providers.kana import KanaProvider
from ..chain_types import NetworkId, normalize_network
from ..execution.executor import InstructionExecutor
from ..execution.factory import build_executor
from ..recovery.errors import LegFailedError
from ..recovery.refetch import refetch_on_expiry
from .models import FlowResult

logger = logging.getLogger(__name__)

ExecutorFactory = Callable[[NetworkId], InstructionExecutor]


class BaseFlow:
    """
    Owns the aggregator client and one executor per network.

    Each leg runs inside ``leg(result, name)``: any failure is re-raised as
    ``LegFailedError`` carrying the legs completed so far, and nothing after
    the failed leg is attempted.
    """

    name = "flow"

    def __init__(
        self,
        kana: KanaProvider,
        *,
        executor_factory: Optional[ExecutorFactory] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.kana = kana
        self.config = config or default_settings
        self._executor_factory = executor_factory or (lambda network: build_executor(network, self.config))
        self._executors: Dict[NetworkId, InstructionExecutor] = {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False

    def executor(self, network: Union[NetworkId, int, str]) -> InstructionExecutor:
        network_id = normalize_network(network)
        if network_id not in self._executors:
            self._executors[network_id] = self._executor_factory(network_id)
        return self._executors[network_id]

    async def close(self) -> None:
        for executor in self._executors.values():
            await executor.close()
        self._executors.clear()

    @asynccontextmanager
    async def leg(self, result: FlowResult, leg: str) -> AsyncIterator[None]:
        with structlog.contextvars.bound_contextvars(flow=self.name, leg=leg):
            try:
                yield
            except LegFailedError:
                raise
            except Exception as exc:
                logger.error("Leg %s of %s failed: %s", leg, self.name, exc)
                raise LegFailedError(
                    leg,
                    exc,
                    last_tx_hash=result.last_tx_hash,
                    completed_legs=list(result.legs),
                ) from exc

    async def execute_fresh(
        self,
        network: NetworkId,
        fetch: Callable[[], Any],
        description: str,
    ) -> str:
        """
        Fetch an instruction, execute it and return the landed hash.

        On expiry a new instruction is fetched rather than resubmitting stale
        bytes, up to ``flow_max_refetch_attempts`` times.
        """
        executor = self.executor(network)

        async def attempt() -> str:
            instruction = await fetch()
            execution = await executor.execute(instruction, description)
            return execution.tx_hash

        return await refetch_on_expiry(
            attempt,
            self.config.flow_max_refetch_attempts,
            description=description,
            log=logger,
        )

    async def wait_for_balance_sync(self) -> None:
        delay = self.config.balance_sync_delay_seconds
        if delay > 0:
            logger.debug("Waiting %.1fs for balances to sync", delay)
            await asyncio.sleep(delay)
