"""Typed models for transaction submission and confirmation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ConfirmationStatus(str, Enum):
    """
    Status of a broadcast transaction as reported by a chain backend.

    PENDING means the chain does not know the transaction. PROCESSED means it
    has been seen (included, or waiting in the mempool) but has not reached
    the commitment treated as landed.
    """

    PENDING = "pending"
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
    FAILED = "failed"


LANDED_STATUSES = frozenset({ConfirmationStatus.CONFIRMED, ConfirmationStatus.FINALIZED})


@dataclass(frozen=True)
class FreshnessAnchor:
    """
    Chain-specific bound on how long a signed transaction can be included.

    Solana transactions embed a recent blockhash and stay valid until the
    chain passes ``last_valid_block_height``; Aptos transactions carry an
    absolute ``expires_at`` (unix seconds).
    """

    blockhash: Optional[str] = None
    last_valid_block_height: Optional[int] = None
    expires_at: Optional[int] = None


@dataclass(frozen=True)
class SignedTransaction:
    """Signed, serialized transaction ready to broadcast."""

    raw: bytes
    identifier: Optional[str] = None
    anchor: Optional[FreshnessAnchor] = None
    description: str = "transaction"
    # Chain SDK object ``raw`` was serialized from, for backends that submit objects
    native: Any = field(default=None, compare=False, repr=False)


@dataclass
class StatusReport:
    """One status lookup result."""

    status: ConfirmationStatus
    error: Optional[Any] = None
    slippage_exceeded: bool = False
    slot: Optional[int] = None

    @property
    def landed(self) -> bool:
        return self.status in LANDED_STATUSES

    @property
    def seen(self) -> bool:
        """Whether the chain knows the transaction at all."""
        return self.status != ConfirmationStatus.PENDING


@dataclass
class SubmissionAttempt:
    """Local state of one submission; never persisted."""

    identifier: Optional[str]
    started_at: float
    anchor: Optional[FreshnessAnchor] = None
    broadcasts: int = 0
    status_checks: int = 0
    last_broadcast_at: Optional[float] = None

    def record_broadcast(self, at: float) -> None:
        self.broadcasts += 1
        self.last_broadcast_at = at


@dataclass
class ConfirmationResult:
    """Terminal success outcome of a submission."""

    identifier: str
    status: ConfirmationStatus
    broadcasts: int
    status_checks: int
    elapsed_seconds: float
    slot: Optional[int] = None


@dataclass
class SubmissionPolicy:
    """Polling and re-broadcast policy, shared by every chain."""

    poll_interval_seconds: float = 1.0
    resend_interval_seconds: float = 2.0
    max_attempts: int = 30
    timeout_seconds: float = 90.0
