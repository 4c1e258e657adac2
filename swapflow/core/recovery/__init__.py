"""
Error Recovery Module

Provides the error taxonomy and classification used by the submitter, the
attestation poller and the multi-leg flows.
"""

from .errors import (
    ErrorCategory,
    ErrorContext,
    RecoverableError,
    UnrecoverableError,
    TransientError,
    RateLimitError,
    ExpiredError,
    RejectedByNetworkError,
    SlippageExceededError,
    ConfirmationTimeoutError,
    AttestationTimeoutError,
    ProviderError,
    UnsupportedChainError,
    LegFailedError,
    classify_error,
)
from .refetch import refetch_on_expiry

__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RecoverableError",
    "UnrecoverableError",
    "TransientError",
    "RateLimitError",
    "ExpiredError",
    "RejectedByNetworkError",
    "SlippageExceededError",
    "ConfirmationTimeoutError",
    "AttestationTimeoutError",
    "ProviderError",
    "UnsupportedChainError",
    "LegFailedError",
    "classify_error",
    "refetch_on_expiry",
]
