"""
Exponential backoff retry

Executes a fallible remote call up to N times, waiting
min(base_delay * 2^(attempt-1), max_delay) seconds between attempts.
Failures classified as terminal (bad request, authentication) are raised
immediately without consuming the remaining attempts.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Callable, TypeVar

from casejudge_core.domain.constants import MAX_BACKOFF_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Message patterns of errors that cannot succeed on repetition
_TERMINAL_PATTERN = re.compile(
    r"\b(400|401|403)\b|bad request|unauthori[sz]ed|authentication|invalid api key|forbidden",
    re.IGNORECASE,
)


class RetryExhaustedError(Exception):
    """Raised when every attempt of a retried operation failed"""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Operation failed after {attempts} attempts: {last_error}")


class RetryCancelledError(Exception):
    """Raised when the caller cancels a retry loop"""


def backoff_delay(attempt: int, base_delay: float, max_delay: float = MAX_BACKOFF_SECONDS) -> float:
    """
    Delay to wait after a failed attempt

    Args:
        attempt: The attempt that just failed (numbered from 1)
        base_delay: Delay after the first failure (seconds)
        max_delay: Upper bound of any single delay (seconds)

    Returns:
        Delay in seconds
    """
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


def is_retryable(error: BaseException) -> bool:
    """
    Classify an error as retryable (transient) or terminal.

    Gateway errors carry an explicit ``retryable`` flag. Other errors are
    treated as transient unless their message names a malformed request or an
    authentication failure.
    """
    flag = getattr(error, "retryable", None)
    if flag is not None:
        return bool(flag)
    return not _TERMINAL_PATTERN.search(str(error))


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    *,
    max_delay: float = MAX_BACKOFF_SECONDS,
    classify: Callable[[BaseException], bool] = is_retryable,
    cancel_event: threading.Event | None = None,
) -> T:
    """
    Execute with exponential backoff retry.

    Args:
        operation: The function to retry (a callable with no arguments)
        max_attempts: Maximum number of invocations
        base_delay: Delay after the first failed attempt (seconds)
        max_delay: Cap on a single delay (seconds)
        classify: Returns True when an error is worth retrying
        cancel_event: When set, no further attempt is made and the wait is interrupted

    Returns:
        The return value of operation()

    Raises:
        ValueError: If max_attempts is less than 1
        RetryCancelledError: If cancel_event was set
        RetryExhaustedError: If every attempt failed with a retryable error
        Exception: A terminal error, unchanged, on the attempt that raised it
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1.")

    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise RetryCancelledError(f"Cancelled before attempt {attempt}/{max_attempts}")
        try:
            return operation()
        except Exception as e:
            if not classify(e):
                raise
            last_error = e
            logger.warning("Attempt %d/%d failed: %s", attempt, max_attempts, e)

        if attempt < max_attempts:
            delay = backoff_delay(attempt, base_delay, max_delay)
            if cancel_event is None:
                time.sleep(delay)
            elif cancel_event.wait(delay):
                raise RetryCancelledError(
                    f"Cancelled while waiting to retry (after attempt {attempt}/{max_attempts})"
                ) from last_error

    assert last_error is not None
    raise RetryExhaustedError(max_attempts, last_error) from last_error
