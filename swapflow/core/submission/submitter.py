"""
Transaction Submitter.

Broadcasts a signed transaction, keeps re-broadcasting the identical bytes in
the background, and polls the chain until the transaction lands, fails,
expires, or the attempt budget runs out.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from ..recovery.errors import (
    ConfirmationTimeoutError,
    ErrorCategory,
    ExpiredError,
    RejectedByNetworkError,
    SlippageExceededError,
    TransientError,
    UnrecoverableError,
    classify_error,
)
from .backend import ChainBackend
from .models import (
    ConfirmationResult,
    ConfirmationStatus,
    SignedTransaction,
    StatusReport,
    SubmissionAttempt,
    SubmissionPolicy,
)

logger = logging.getLogger(__name__)


class TransactionSubmitter:
    """
    Submit-and-confirm loop shared by every chain.

    Chain specifics live in the injected ``ChainBackend``. One call to
    ``submit`` owns exactly one background re-broadcast task, which is always
    stopped and awaited before the call returns or raises.

    Usage:
        submitter = TransactionSubmitter(SolanaBackend(rpc), policy)
        signature = await submitter.submit_and_confirm(signed_tx)
    """

    def __init__(
        self,
        backend: ChainBackend,
        policy: Optional[SubmissionPolicy] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.policy = policy or SubmissionPolicy()
        self._clock = clock

    async def submit_and_confirm(self, tx: SignedTransaction) -> str:
        """Submit ``tx`` and return its identifier once it has landed."""
        result = await self.submit(tx)
        return result.identifier

    async def submit(self, tx: SignedTransaction) -> ConfirmationResult:
        """
        Submit ``tx`` and wait for a terminal outcome.

        Returns:
            ConfirmationResult for a confirmed or finalized transaction.

        Raises:
            SlippageExceededError: Status reports the slippage failure code.
            RejectedByNetworkError: Status reports any other on-chain failure.
            ExpiredError: Freshness anchor invalid before the transaction landed.
            ConfirmationTimeoutError: Attempt or time budget exhausted.
            TransientError: First broadcast failed and no identifier is known.
        """
        attempt = SubmissionAttempt(
            identifier=tx.identifier,
            started_at=self._clock(),
            anchor=tx.anchor,
        )
        attempt.identifier = await self._first_broadcast(tx, attempt)
        logger.info(
            "Sent %s on %s: %s",
            tx.description,
            self.backend.name,
            attempt.identifier,
        )

        stop = asyncio.Event()
        resender = asyncio.create_task(self._resend_loop(tx, attempt, stop))
        try:
            return await self._poll_until_terminal(tx, attempt, resender)
        finally:
            stop.set()
            await resender

    async def _first_broadcast(self, tx: SignedTransaction, attempt: SubmissionAttempt) -> str:
        try:
            return await self.backend.broadcast(tx)
        except (ExpiredError, UnrecoverableError):
            raise
        except Exception as exc:
            context = classify_error(exc)
            if context.category == ErrorCategory.EXPIRED:
                raise ExpiredError(str(exc), tx_hash=tx.identifier, chain=self.backend.name) from exc
            if context.category == ErrorCategory.SLIPPAGE:
                raise SlippageExceededError(str(exc), tx_hash=tx.identifier, chain=self.backend.name) from exc
            if context.category == ErrorCategory.REJECTED:
                raise RejectedByNetworkError(str(exc), tx_hash=tx.identifier, chain=self.backend.name) from exc
            if tx.identifier is None:
                raise TransientError(f"Broadcast failed: {exc}", chain=self.backend.name) from exc

            # The identifier is known up front, so the resender and the
            # status poll can carry on without a successful first send.
            logger.warning("Initial broadcast of %s failed, continuing: %s", tx.identifier, exc)
            return tx.identifier
        finally:
            attempt.record_broadcast(self._clock())

    async def _resend_loop(
        self,
        tx: SignedTransaction,
        attempt: SubmissionAttempt,
        stop: asyncio.Event,
    ) -> None:
        """Re-broadcast until stopped or the broadcast budget is spent."""
        interval = self.policy.resend_interval_seconds

        while not stop.is_set() and attempt.broadcasts < self.policy.max_attempts:
            if await self._wait_for_stop(stop, interval):
                return
            try:
                await self.backend.broadcast(tx)
                logger.debug("Re-broadcast %s (%d)", attempt.identifier, attempt.broadcasts + 1)
            except Exception as exc:
                # Re-sending bytes the chain already has is expected to fail.
                logger.debug("Re-broadcast of %s failed: %s", attempt.identifier, exc)
            finally:
                attempt.record_broadcast(self._clock())

        # Give the final broadcast one interval to land before the budget
        # counts as spent.
        await self._wait_for_stop(stop, interval)

    @staticmethod
    async def _wait_for_stop(stop: asyncio.Event, timeout: float) -> bool:
        try:
            await asyncio.wait_for(stop.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return stop.is_set()

    async def _poll_until_terminal(
        self,
        tx: SignedTransaction,
        attempt: SubmissionAttempt,
        resender: asyncio.Task,
    ) -> ConfirmationResult:
        identifier = attempt.identifier
        deadline = attempt.started_at + self.policy.timeout_seconds

        while True:
            report = await self._check_status(attempt)
            result = self._settle(attempt, report)
            if result is not None:
                return result

            if tx.anchor is not None and not (report and report.seen) and not await self._anchor_valid(tx):
                # Re-check: a transaction included after the first lookup is not expired.
                report = await self._check_status(attempt)
                result = self._settle(attempt, report)
                if result is not None:
                    return result
                if report is not None and not report.seen:
                    logger.warning("Transaction %s expired before landing", identifier)
                    raise ExpiredError(
                        f"Transaction {identifier} expired before confirmation",
                        tx_hash=identifier,
                        chain=self.backend.name,
                    )

            if resender.done() or self._clock() >= deadline:
                logger.warning(
                    "Gave up on %s after %d broadcasts and %d status checks",
                    identifier,
                    attempt.broadcasts,
                    attempt.status_checks,
                )
                raise ConfirmationTimeoutError(
                    f"Transaction {identifier} not confirmed within budget; "
                    "check chain state before resubmitting",
                    tx_hash=identifier,
                    chain=self.backend.name,
                    attempts=attempt.broadcasts,
                )

            await asyncio.sleep(self.policy.poll_interval_seconds)

    def _settle(self, attempt: SubmissionAttempt, report: Optional[StatusReport]) -> Optional[ConfirmationResult]:
        """Return the result for a landed report, raise for a failed one."""
        if report is None:
            return None
        identifier = attempt.identifier

        if report.landed:
            elapsed = self._clock() - attempt.started_at
            logger.info(
                "Transaction %s %s after %.1fs (%d broadcasts)",
                identifier,
                report.status.value,
                elapsed,
                attempt.broadcasts,
            )
            return ConfirmationResult(
                identifier=identifier,
                status=report.status,
                broadcasts=attempt.broadcasts,
                status_checks=attempt.status_checks,
                elapsed_seconds=elapsed,
                slot=report.slot,
            )

        if report.status == ConfirmationStatus.FAILED:
            if report.slippage_exceeded:
                logger.error("Transaction %s failed: slippage exceeded", identifier)
                raise SlippageExceededError(
                    f"Transaction {identifier} failed: slippage tolerance exceeded",
                    tx_hash=identifier,
                    reason=report.error,
                    chain=self.backend.name,
                )
            logger.error("Transaction %s failed: %s", identifier, report.error)
            raise RejectedByNetworkError(
                f"Transaction {identifier} failed: {report.error}",
                tx_hash=identifier,
                reason=report.error,
                chain=self.backend.name,
            )
        return None

    async def _check_status(self, attempt: SubmissionAttempt) -> Optional[StatusReport]:
        attempt.status_checks += 1
        try:
            return await self.backend.get_status(attempt.identifier)
        except Exception as exc:
            logger.warning("Status lookup for %s failed: %s", attempt.identifier, exc)
            return None

    async def _anchor_valid(self, tx: SignedTransaction) -> bool:
        try:
            return await self.backend.is_anchor_valid(tx.anchor)
        except Exception as exc:
            # Unknown validity is not expiry; the budget still bounds the loop.
            logger.warning("Freshness check for %s failed: %s", tx.identifier, exc)
            return True
