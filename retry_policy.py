"""
Exponential-backoff retry wrapper for single remote calls.
"""

import logging
import random
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 1000
MAX_JITTER_MS = 1000

# Substrings that mark an error as transient when it carries no explicit tag
TRANSIENT_MARKERS = ("overloaded", "503", "429", "RESOURCE_EXHAUSTED", "UNAVAILABLE")


def is_transient_error(error: BaseException) -> bool:
    """Rate-limited, overloaded and temporarily-unavailable errors are worth retrying."""
    tagged = getattr(error, "transient", None)
    if tagged is not None:
        return bool(tagged)
    message = str(error)
    return any(marker in message for marker in TRANSIENT_MARKERS)


def backoff_delay_ms(attempt: int, base_delay_ms: int, jitter_ms: Optional[float] = None) -> float:
    """Delay before the retry that follows zero-based `attempt`: base * 2^attempt + jitter."""
    if jitter_ms is None:
        jitter_ms = random.uniform(0, MAX_JITTER_MS)
    return base_delay_ms * (2 ** attempt) + jitter_ms


def retry_with_backoff(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    is_retryable: Callable[[BaseException], bool] = is_transient_error,
    sleep: Callable[[float], None] = time.sleep,
    deadline: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
    label: str = "remote call",
) -> T:
    """
    Invoke `operation`, retrying transient failures with exponential backoff.

    Non-retryable errors are re-raised immediately. After `max_attempts` failed
    attempts the last error is re-raised. When `deadline` (a `clock()` value) is
    given, the loop never sleeps past it and re-raises instead, so an enclosing
    request that runs out of time does not leave a pending retry behind.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(max_attempts):
        try:
            return operation()
        except Exception as e:
            logger.warning(f"{label}: attempt {attempt + 1}/{max_attempts} failed: {e}")

            if attempt == max_attempts - 1:
                logger.error(f"{label}: giving up after {max_attempts} attempts")
                raise

            if not is_retryable(e):
                logger.info(f"{label}: error is not retryable, aborting")
                raise

            delay_s = backoff_delay_ms(attempt, base_delay_ms) / 1000.0
            if deadline is not None and clock() + delay_s > deadline:
                logger.warning(f"{label}: retry delay {delay_s:.2f}s would exceed the request deadline, aborting")
                raise

            logger.info(f"{label}: retrying after {delay_s * 1000:.0f}ms delay...")
            sleep(delay_s)

    # Unreachable: the loop either returns or raises
    raise RuntimeError("Max retries exceeded")
