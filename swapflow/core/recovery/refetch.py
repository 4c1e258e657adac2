"""
Re-fetch loop for expired transactions.

An ``ExpiredError`` means the signed bytes are dead; the only way forward is
a new transaction from the aggregator. ``refetch_on_expiry`` re-runs the
whole fetch-sign-submit operation for that case and nothing else.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import ExpiredError

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def refetch_on_expiry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    description: str = "transaction",
    log: Optional[logging.Logger] = None,
) -> T:
    """
    Run ``operation`` until it succeeds or raises something other than ExpiredError.

    Args:
        operation: Zero-argument coroutine factory that fetches a fresh
            transaction, signs it and submits it.
        max_attempts: Total runs allowed.
        description: Label used in log lines.

    Raises:
        ExpiredError: If every attempt expired.
    """
    log = log or logger
    last_error: Optional[ExpiredError] = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except ExpiredError as exc:
            last_error = exc
            log.warning(
                "%s expired (attempt %d/%d), fetching a fresh one",
                description,
                attempt,
                max_attempts,
            )

    raise ExpiredError(
        f"{description} expired after {max_attempts} attempts",
        tx_hash=last_error.context.tx_hash if last_error else None,
        chain=last_error.context.chain if last_error else None,
    )
