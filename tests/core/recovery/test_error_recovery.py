"""
Tests for the Error Recovery System

Tests for the error taxonomy, classification and the expiry re-fetch loop.
"""

import pytest
from unittest.mock import AsyncMock

from swapflow.core.recovery import (
    AttestationTimeoutError,
    ConfirmationTimeoutError,
    ExpiredError,
    LegFailedError,
    ProviderError,
    RateLimitError,
    RecoverableError,
    RejectedByNetworkError,
    SlippageExceededError,
    TransientError,
    UnrecoverableError,
    UnsupportedChainError,
    classify_error,
    refetch_on_expiry,
)
from swapflow.core.recovery.errors import ErrorCategory


# =============================================================================
# Error Taxonomy Tests
# =============================================================================

class TestErrorTaxonomy:
    """Tests for error classes."""

    def test_recoverable_errors(self):
        assert isinstance(TransientError("x"), RecoverableError)
        assert isinstance(RateLimitError(), RecoverableError)
        assert isinstance(ExpiredError("x"), RecoverableError)

    def test_unrecoverable_errors(self):
        for error in (
            RejectedByNetworkError("x"),
            ConfirmationTimeoutError("x"),
            AttestationTimeoutError("x"),
            ProviderError("x"),
            UnsupportedChainError("x"),
        ):
            assert isinstance(error, UnrecoverableError)
            assert error.context.recoverable is False

    def test_slippage_is_a_rejection(self):
        error = SlippageExceededError("slippage", tx_hash="sig")

        assert isinstance(error, RejectedByNetworkError)
        assert error.category == ErrorCategory.SLIPPAGE
        assert error.tx_hash == "sig"

    def test_rate_limit_error(self):
        error = RateLimitError(retry_after=12.0, provider="kana")

        assert error.category == ErrorCategory.RATE_LIMIT
        assert error.retry_after == 12.0
        assert error.context.provider == "kana"

    def test_confirmation_timeout_keeps_attempts(self):
        error = ConfirmationTimeoutError("gave up", tx_hash="0xabc", chain="polygon", attempts=30)

        assert error.attempts == 30
        assert error.context.tx_hash == "0xabc"
        assert error.category == ErrorCategory.TIMEOUT

    def test_leg_failed_error(self):
        cause = AttestationTimeoutError("not ready", tx_hash="0xburn")
        error = LegFailedError("attestation", cause, last_tx_hash="0xburn", completed_legs=["burn"])

        assert error.leg == "attestation"
        assert error.cause is cause
        assert error.last_tx_hash == "0xburn"
        assert error.completed_legs == ["burn"]
        assert "0xburn" in str(error)
        assert error.category == ErrorCategory.TIMEOUT


# =============================================================================
# Error Classification Tests
# =============================================================================

class TestErrorClassification:
    """Tests for classify_error on raw exceptions."""

    @pytest.mark.parametrize(
        "message",
        [
            "RPC error: Blockhash not found",
            "Transaction simulation failed: block height exceeded",
            "Aptos API error 400: TRANSACTION_EXPIRED",
        ],
    )
    def test_expired(self, message):
        assert classify_error(RuntimeError(message)).category == ErrorCategory.EXPIRED

    def test_rate_limit(self):
        assert classify_error(RuntimeError("HTTP error: 429")).category == ErrorCategory.RATE_LIMIT

    def test_slippage(self):
        context = classify_error(RuntimeError("Slippage tolerance exceeded"))

        assert context.category == ErrorCategory.SLIPPAGE
        assert context.recoverable is False

    @pytest.mark.parametrize(
        "message",
        ["execution reverted", "insufficient funds for gas", "Attempt to debit an account but found no record of a prior credit: insufficient lamports"],
    )
    def test_rejected(self, message):
        assert classify_error(RuntimeError(message)).category == ErrorCategory.REJECTED

    def test_unknown_is_transient(self):
        context = classify_error(ConnectionResetError("peer reset"))

        assert context.category == ErrorCategory.TRANSIENT
        assert context.recoverable is True

    def test_typed_error_keeps_its_context(self):
        error = ExpiredError("expired", tx_hash="sig")

        assert classify_error(error) is error.context


# =============================================================================
# Re-fetch Tests
# =============================================================================

class TestRefetchOnExpiry:
    """Tests for refetch_on_expiry."""

    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        operation = AsyncMock(return_value="sig")

        assert await refetch_on_expiry(operation, 3) == "sig"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_refetches_after_expiry(self):
        operation = AsyncMock(side_effect=[ExpiredError("old"), ExpiredError("old"), "sig"])

        assert await refetch_on_expiry(operation, 5, "swap") == "sig"
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        operation = AsyncMock(side_effect=ExpiredError("old", tx_hash="sig", chain="solana"))

        with pytest.raises(ExpiredError) as exc_info:
            await refetch_on_expiry(operation, 2)

        assert operation.await_count == 2
        assert exc_info.value.context.tx_hash == "sig"

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        operation = AsyncMock(side_effect=SlippageExceededError("slippage"))

        with pytest.raises(SlippageExceededError):
            await refetch_on_expiry(operation, 5)

        assert operation.await_count == 1
