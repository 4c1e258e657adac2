"""
Error Classification

Defines the error types raised while submitting transactions and running
multi-leg flows. Errors are classified as recoverable (retry, possibly after
re-fetching a fresh transaction) or unrecoverable (surface to the user).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(str, Enum):
    """Categories of errors for retry decisions."""

    TRANSIENT = "transient"       # Network blip, node lag
    EXPIRED = "expired"           # Freshness anchor invalidated
    REJECTED = "rejected"         # Explicit on-chain failure
    SLIPPAGE = "slippage"         # Output below slippage floor
    RATE_LIMIT = "rate_limit"     # HTTP 429 from the aggregator
    TIMEOUT = "timeout"           # Budget exhausted, outcome unknown
    PROVIDER = "provider"         # Upstream API returned an error or bad shape
    UNSUPPORTED = "unsupported"   # Chain not supported for the operation
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    recoverable: bool = True
    retry_after_seconds: Optional[float] = None
    suggested_action: Optional[str] = None
    provider: Optional[str] = None
    chain: Optional[str] = None
    tx_hash: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class RecoverableError(Exception):
    """
    Base class for errors that can be retried.

    These errors are typically transient:
    - Network issues
    - Rate limits
    - Expired transactions (retry with a freshly fetched one)
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        retry_after: Optional[float] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.retry_after = retry_after
        self.context = context or ErrorContext(category=category, recoverable=True)


class UnrecoverableError(Exception):
    """
    Base class for errors that must not be retried automatically.

    These errors require a human decision:
    - On-chain rejections (slippage, reverts)
    - Inconclusive timeouts (check chain state before resubmitting)
    - Unsupported chains
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or ErrorContext(category=category, recoverable=False)


# Recoverable errors
class TransientError(RecoverableError):
    """Network or node hiccup; the same request may be repeated."""

    def __init__(
        self,
        message: str = "Transient network error",
        provider: Optional[str] = None,
        chain: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.TRANSIENT,
            retry_after=1.0,
            context=ErrorContext(
                category=ErrorCategory.TRANSIENT,
                recoverable=True,
                retry_after_seconds=1.0,
                provider=provider,
                chain=chain,
                suggested_action="Retry the same request",
            ),
        )


class RateLimitError(RecoverableError):
    """Aggregator rate limit exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: float = 5.0,
        provider: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.RATE_LIMIT,
            retry_after=retry_after,
            context=ErrorContext(
                category=ErrorCategory.RATE_LIMIT,
                recoverable=True,
                retry_after_seconds=retry_after,
                provider=provider,
                suggested_action=f"Wait {retry_after}s before retrying",
            ),
        )


class ExpiredError(RecoverableError):
    """
    The transaction's freshness anchor (blockhash, expiration) is no longer valid.

    Recoverable only by fetching a new transaction from the aggregator; the
    stale bytes must never be resubmitted.
    """

    def __init__(
        self,
        message: str = "Transaction expired",
        tx_hash: Optional[str] = None,
        chain: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.EXPIRED,
            context=ErrorContext(
                category=ErrorCategory.EXPIRED,
                recoverable=True,
                tx_hash=tx_hash,
                chain=chain,
                suggested_action="Fetch a fresh transaction and sign it again",
            ),
        )


# Unrecoverable errors
class RejectedByNetworkError(UnrecoverableError):
    """Transaction landed (or was simulated) and failed on-chain."""

    def __init__(
        self,
        message: str = "Transaction rejected by network",
        tx_hash: Optional[str] = None,
        reason: Optional[Any] = None,
        chain: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.REJECTED,
        suggested_action: str = "Review transaction parameters",
    ):
        super().__init__(
            message,
            category=category,
            context=ErrorContext(
                category=category,
                recoverable=False,
                tx_hash=tx_hash,
                chain=chain,
                suggested_action=suggested_action,
                details={"reason": reason} if reason is not None else {},
            ),
        )
        self.tx_hash = tx_hash
        self.reason = reason


class SlippageExceededError(RejectedByNetworkError):
    """Swap output fell below the quoted slippage floor."""

    def __init__(
        self,
        message: str = "Slippage tolerance exceeded",
        tx_hash: Optional[str] = None,
        reason: Optional[Any] = None,
        chain: Optional[str] = None,
    ):
        super().__init__(
            message,
            tx_hash=tx_hash,
            reason=reason,
            chain=chain,
            category=ErrorCategory.SLIPPAGE,
            suggested_action="Request a new quote or raise the slippage tolerance",
        )


class ConfirmationTimeoutError(UnrecoverableError):
    """
    Budget exhausted without a terminal status.

    The outcome is unknown: the transaction may still land. Check chain state
    before submitting again to avoid a duplicate.
    """

    def __init__(
        self,
        message: str = "Transaction confirmation timed out",
        tx_hash: Optional[str] = None,
        chain: Optional[str] = None,
        attempts: Optional[int] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.TIMEOUT,
            context=ErrorContext(
                category=ErrorCategory.TIMEOUT,
                recoverable=False,
                tx_hash=tx_hash,
                chain=chain,
                suggested_action="Check the transaction on-chain before retrying",
                details={"attempts": attempts} if attempts is not None else {},
            ),
        )
        self.tx_hash = tx_hash
        self.attempts = attempts


class AttestationTimeoutError(UnrecoverableError):
    """Attestation still pending after the poll budget."""

    def __init__(
        self,
        message: str = "Attestation timeout exceeded",
        tx_hash: Optional[str] = None,
        chain: Optional[str] = None,
        polls: Optional[int] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.TIMEOUT,
            context=ErrorContext(
                category=ErrorCategory.TIMEOUT,
                recoverable=False,
                tx_hash=tx_hash,
                chain=chain,
                suggested_action="Resume later with the redeem flow using the burn hash",
                details={"polls": polls} if polls is not None else {},
            ),
        )
        self.tx_hash = tx_hash
        self.polls = polls


class ProviderError(UnrecoverableError):
    """Upstream API returned an error status or an unexpected payload."""

    def __init__(
        self,
        message: str = "Provider error",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[Any] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.PROVIDER,
            context=ErrorContext(
                category=ErrorCategory.PROVIDER,
                recoverable=False,
                provider=provider,
                suggested_action="Inspect the provider response",
                details={"status_code": status_code, "body": body},
            ),
        )
        self.status_code = status_code
        self.body = body


class UnsupportedChainError(UnrecoverableError):
    """Requested chain cannot be used for this operation."""

    def __init__(self, message: str = "Unsupported chain", chain: Optional[str] = None):
        super().__init__(
            message,
            category=ErrorCategory.UNSUPPORTED,
            context=ErrorContext(
                category=ErrorCategory.UNSUPPORTED,
                recoverable=False,
                chain=chain,
            ),
        )


class LegFailedError(UnrecoverableError):
    """
    One leg of a multi-step flow failed; remaining legs were not attempted.

    Carries the last successful transaction hash so the flow can be continued
    by hand (for example with the redeem flow once a burn has landed).
    """

    def __init__(
        self,
        leg: str,
        cause: Exception,
        last_tx_hash: Optional[str] = None,
        completed_legs: Optional[List[Any]] = None,
    ):
        message = f"Leg '{leg}' failed: {cause}"
        if last_tx_hash:
            message += f" (last successful tx: {last_tx_hash})"
        super().__init__(
            message,
            category=getattr(cause, "category", ErrorCategory.UNKNOWN),
            context=ErrorContext(
                category=getattr(cause, "category", ErrorCategory.UNKNOWN),
                recoverable=False,
                tx_hash=last_tx_hash,
                suggested_action="Continue the remaining legs manually",
                details={"leg": leg},
            ),
        )
        self.leg = leg
        self.cause = cause
        self.last_tx_hash = last_tx_hash
        self.completed_legs = list(completed_legs or [])


def classify_error(error: Exception) -> ErrorContext:
    """
    Classify an exception and return its error context.

    Raw RPC and HTTP errors are classified from their message text.
    """
    if isinstance(error, (RecoverableError, UnrecoverableError)):
        return error.context

    message = str(error).lower()

    expired_patterns = [
        "blockhash not found",
        "blockhashnotfound",
        "block height exceeded",
        "blockheightexceeded",
        "transaction expired",
        "transaction_expired",
    ]
    if any(p in message for p in expired_patterns):
        return ErrorContext(
            category=ErrorCategory.EXPIRED,
            recoverable=True,
            suggested_action="Fetch a fresh transaction and sign it again",
        )

    rate_limit_patterns = ["rate limit", "too many requests", "429"]
    if any(p in message for p in rate_limit_patterns):
        return ErrorContext(
            category=ErrorCategory.RATE_LIMIT,
            recoverable=True,
            retry_after_seconds=5.0,
            suggested_action="Wait before retrying",
        )

    slippage_patterns = ["slippage", "insufficient output", "insufficient_output"]
    if any(p in message for p in slippage_patterns):
        return ErrorContext(
            category=ErrorCategory.SLIPPAGE,
            recoverable=False,
            suggested_action="Request a new quote or raise the slippage tolerance",
        )

    rejected_patterns = [
        "execution reverted",
        "insufficient funds",
        "insufficient lamports",
        "invalid transaction",
    ]
    if any(p in message for p in rejected_patterns):
        return ErrorContext(
            category=ErrorCategory.REJECTED,
            recoverable=False,
            suggested_action="Review transaction parameters",
        )

    # Everything else (connection resets, node lag, "already processed") is
    # treated as transient.
    return ErrorContext(
        category=ErrorCategory.TRANSIENT,
        recoverable=True,
        suggested_action="Retry operation",
    )
