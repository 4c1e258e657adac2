"""
Tests for the TransactionSubmitter

Covers the stop conditions of the poll loop, the background re-broadcast
task and the attempt budget.
"""

import asyncio

import httpx
import pytest

from swapflow.core.recovery.errors import (
    ConfirmationTimeoutError,
    ExpiredError,
    RejectedByNetworkError,
    SlippageExceededError,
    TransientError,
)
from swapflow.core.submission import (
    ChainBackend,
    ConfirmationStatus,
    FreshnessAnchor,
    SignedTransaction,
    StatusReport,
    SubmissionPolicy,
    TransactionSubmitter,
)


PENDING = StatusReport(status=ConfirmationStatus.PENDING)
CONFIRMED = StatusReport(status=ConfirmationStatus.CONFIRMED, slot=42)
FINALIZED = StatusReport(status=ConfirmationStatus.FINALIZED, slot=43)


class FakeBackend(ChainBackend):
    """Scripted chain: statuses are consumed in order, the last one repeats."""

    name = "fake"

    def __init__(
        self,
        statuses=None,
        *,
        identifier="sig-1",
        anchor_valid=True,
        broadcast_errors=None,
    ):
        self.statuses = list(statuses or [PENDING])
        self.identifier = identifier
        self.anchor_valid = anchor_valid
        self.broadcast_errors = list(broadcast_errors or [])
        self.broadcasts = 0
        self.status_calls = 0
        self.anchor_calls = 0

    async def broadcast(self, tx):
        self.broadcasts += 1
        if self.broadcast_errors:
            error = self.broadcast_errors.pop(0)
            if error is not None:
                raise error
        return self.identifier

    async def get_status(self, identifier):
        self.status_calls += 1
        item = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def is_anchor_valid(self, anchor):
        self.anchor_calls += 1
        if isinstance(self.anchor_valid, Exception):
            raise self.anchor_valid
        return self.anchor_valid


def fast_policy(**overrides):
    values = dict(
        poll_interval_seconds=0.01,
        resend_interval_seconds=0.02,
        max_attempts=30,
        timeout_seconds=5.0,
    )
    values.update(overrides)
    return SubmissionPolicy(**values)


def make_tx(identifier="sig-1", anchor=None):
    return SignedTransaction(raw=b"\x01\x02", identifier=identifier, anchor=anchor, description="swap")


# =============================================================================
# Success path
# =============================================================================

class TestSuccess:
    """Landed transactions."""

    @pytest.mark.asyncio
    async def test_returns_identifier_on_confirmation(self):
        backend = FakeBackend([PENDING, PENDING, CONFIRMED])
        submitter = TransactionSubmitter(backend, fast_policy())

        identifier = await submitter.submit_and_confirm(make_tx())

        assert identifier == "sig-1"
        assert backend.status_calls == 3

    @pytest.mark.asyncio
    async def test_no_broadcast_after_return(self):
        backend = FakeBackend([PENDING] * 5 + [FINALIZED])
        submitter = TransactionSubmitter(backend, fast_policy(resend_interval_seconds=0.005))

        result = await submitter.submit(make_tx())
        broadcasts_at_return = backend.broadcasts
        await asyncio.sleep(0.05)

        assert result.status == ConfirmationStatus.FINALIZED
        assert backend.broadcasts == broadcasts_at_return
        assert result.broadcasts == broadcasts_at_return

    @pytest.mark.asyncio
    async def test_result_carries_counters(self):
        backend = FakeBackend([CONFIRMED])
        submitter = TransactionSubmitter(backend, fast_policy())

        result = await submitter.submit(make_tx())

        assert result.identifier == "sig-1"
        assert result.broadcasts == 1
        assert result.status_checks == 1
        assert result.slot == 42
        assert result.elapsed_seconds >= 0

    @pytest.mark.asyncio
    async def test_rebroadcast_after_finalization_is_noop(self):
        """Re-sending bytes the chain already processed must not change the outcome."""
        already = RuntimeError("Transaction already processed")
        backend = FakeBackend(
            [PENDING, PENDING, PENDING, PENDING, PENDING, FINALIZED],
            broadcast_errors=[None, already, already, already],
        )
        submitter = TransactionSubmitter(backend, fast_policy(resend_interval_seconds=0.01))

        identifier = await submitter.submit_and_confirm(make_tx())

        assert identifier == "sig-1"

    @pytest.mark.asyncio
    async def test_transient_status_error_then_confirmed(self):
        backend = FakeBackend([httpx.ConnectError("connection reset"), CONFIRMED])
        submitter = TransactionSubmitter(backend, fast_policy())

        identifier = await submitter.submit_and_confirm(make_tx())

        assert identifier == "sig-1"
        assert backend.status_calls == 2


# =============================================================================
# Terminal failures
# =============================================================================

class TestFailures:
    """Expiry, on-chain rejection and budget exhaustion."""

    @pytest.mark.asyncio
    async def test_invalid_anchor_raises_expired(self):
        backend = FakeBackend([PENDING], anchor_valid=False)
        submitter = TransactionSubmitter(backend, fast_policy())

        with pytest.raises(ExpiredError) as exc_info:
            await submitter.submit(make_tx(anchor=FreshnessAnchor(blockhash="hash")))

        assert not isinstance(exc_info.value, ConfirmationTimeoutError)
        assert exc_info.value.context.tx_hash == "sig-1"

    @pytest.mark.asyncio
    async def test_anchor_not_checked_without_anchor(self):
        backend = FakeBackend([PENDING, CONFIRMED], anchor_valid=False)
        submitter = TransactionSubmitter(backend, fast_policy())

        await submitter.submit(make_tx(anchor=None))

        assert backend.anchor_calls == 0

    @pytest.mark.asyncio
    async def test_anchor_check_error_is_not_expiry(self):
        backend = FakeBackend([PENDING, CONFIRMED], anchor_valid=httpx.ReadTimeout("slow node"))
        submitter = TransactionSubmitter(backend, fast_policy())

        identifier = await submitter.submit_and_confirm(make_tx(anchor=FreshnessAnchor(blockhash="hash")))

        assert identifier == "sig-1"

    @pytest.mark.asyncio
    async def test_seen_transaction_is_not_expired(self):
        processed = StatusReport(status=ConfirmationStatus.PROCESSED, slot=40)
        backend = FakeBackend([processed, processed, CONFIRMED], anchor_valid=False)
        submitter = TransactionSubmitter(backend, fast_policy())

        result = await submitter.submit(make_tx(anchor=FreshnessAnchor(blockhash="hash")))

        assert result.status == ConfirmationStatus.CONFIRMED
        assert backend.anchor_calls == 0

    @pytest.mark.asyncio
    async def test_included_between_lookup_and_anchor_check(self):
        backend = FakeBackend([PENDING, CONFIRMED], anchor_valid=False)
        submitter = TransactionSubmitter(backend, fast_policy())

        result = await submitter.submit(make_tx(anchor=FreshnessAnchor(blockhash="hash")))

        assert result.status == ConfirmationStatus.CONFIRMED
        assert backend.status_calls == 2
        assert backend.anchor_calls == 1

    @pytest.mark.asyncio
    async def test_seen_after_anchor_expired_keeps_polling(self):
        processed = StatusReport(status=ConfirmationStatus.PROCESSED)
        backend = FakeBackend([PENDING, processed, processed, FINALIZED], anchor_valid=False)
        submitter = TransactionSubmitter(backend, fast_policy())

        result = await submitter.submit(make_tx(anchor=FreshnessAnchor(blockhash="hash")))

        assert result.status == ConfirmationStatus.FINALIZED
        assert backend.status_calls == 4

    @pytest.mark.asyncio
    async def test_unknown_status_after_expiry_is_not_expired(self):
        backend = FakeBackend(
            [PENDING, httpx.ConnectError("reset"), CONFIRMED],
            anchor_valid=False,
        )
        submitter = TransactionSubmitter(backend, fast_policy())

        result = await submitter.submit(make_tx(anchor=FreshnessAnchor(blockhash="hash")))

        assert result.status == ConfirmationStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_slippage_failure_raises_immediately(self):
        failed = StatusReport(
            status=ConfirmationStatus.FAILED,
            error={"InstructionError": [2, {"Custom": 6001}]},
            slippage_exceeded=True,
        )
        backend = FakeBackend([failed])
        submitter = TransactionSubmitter(backend, fast_policy(resend_interval_seconds=0.05))

        with pytest.raises(SlippageExceededError) as exc_info:
            await submitter.submit(make_tx())
        broadcasts_at_raise = backend.broadcasts
        await asyncio.sleep(0.1)

        assert isinstance(exc_info.value, RejectedByNetworkError)
        assert exc_info.value.tx_hash == "sig-1"
        assert broadcasts_at_raise == 1
        assert backend.broadcasts == 1

    @pytest.mark.asyncio
    async def test_other_failure_raises_rejected(self):
        failed = StatusReport(status=ConfirmationStatus.FAILED, error="execution reverted")
        backend = FakeBackend([PENDING, failed])
        submitter = TransactionSubmitter(backend, fast_policy())

        with pytest.raises(RejectedByNetworkError) as exc_info:
            await submitter.submit(make_tx())

        assert not isinstance(exc_info.value, SlippageExceededError)
        assert exc_info.value.reason == "execution reverted"

    @pytest.mark.asyncio
    async def test_two_attempt_budget_broadcasts_exactly_twice(self):
        backend = FakeBackend([httpx.ReadTimeout("status lookup timed out")])
        submitter = TransactionSubmitter(backend, fast_policy(max_attempts=2))

        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await submitter.submit(make_tx())

        assert backend.broadcasts == 2
        assert exc_info.value.attempts == 2

    @pytest.mark.asyncio
    async def test_wall_clock_timeout(self):
        backend = FakeBackend([PENDING])
        submitter = TransactionSubmitter(
            backend,
            fast_policy(timeout_seconds=0.05, resend_interval_seconds=10.0),
        )

        with pytest.raises(ConfirmationTimeoutError):
            await submitter.submit(make_tx())

        assert backend.broadcasts == 1


# =============================================================================
# First broadcast
# =============================================================================

class TestFirstBroadcast:
    """Errors from the initial send."""

    @pytest.mark.asyncio
    async def test_expired_blockhash_on_send(self):
        backend = FakeBackend(broadcast_errors=[RuntimeError("RPC error: Blockhash not found")])
        submitter = TransactionSubmitter(backend, fast_policy())

        with pytest.raises(ExpiredError):
            await submitter.submit(make_tx())

        assert backend.status_calls == 0

    @pytest.mark.asyncio
    async def test_rejected_on_send(self):
        backend = FakeBackend(broadcast_errors=[RuntimeError("insufficient funds for gas * price + value")])
        submitter = TransactionSubmitter(backend, fast_policy())

        with pytest.raises(RejectedByNetworkError):
            await submitter.submit(make_tx())

    @pytest.mark.asyncio
    async def test_transient_without_identifier_raises(self):
        backend = FakeBackend(broadcast_errors=[httpx.ConnectError("refused")])
        submitter = TransactionSubmitter(backend, fast_policy())

        with pytest.raises(TransientError):
            await submitter.submit(make_tx(identifier=None))

        assert backend.status_calls == 0

    @pytest.mark.asyncio
    async def test_transient_with_known_identifier_keeps_polling(self):
        backend = FakeBackend(
            [PENDING, CONFIRMED],
            broadcast_errors=[httpx.ConnectError("refused")],
        )
        submitter = TransactionSubmitter(backend, fast_policy())

        identifier = await submitter.submit_and_confirm(make_tx(identifier="known-sig"))

        assert identifier == "known-sig"
