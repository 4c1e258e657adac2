"""Transaction submission and confirmation."""

from .backend import ChainBackend
from .models import (
    ConfirmationResult,
    ConfirmationStatus,
    FreshnessAnchor,
    SignedTransaction,
    StatusReport,
    SubmissionAttempt,
    SubmissionPolicy,
)
from .submitter import TransactionSubmitter

__all__ = [
    "ChainBackend",
    "ConfirmationResult",
    "ConfirmationStatus",
    "FreshnessAnchor",
    "SignedTransaction",
    "StatusReport",
    "SubmissionAttempt",
    "SubmissionPolicy",
    "TransactionSubmitter",
]
