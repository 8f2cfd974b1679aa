"""
Retry with exponential backoff for calls to the external AI service.

Timeouts, dropped connections and retryable HTTP statuses are retried;
everything else propagates on the first failure.
"""

import time
import functools
from typing import Callable, Type, Tuple, Optional

RETRYABLE_STATUS_CODES = frozenset({
    408,  # Request Timeout
    429,  # Too Many Requests
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
})


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, message: str, attempts: int):
        self.attempts = attempts
        super().__init__(message)


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    should_retry: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[Callable] = None,
):
    """
    Decorator retrying a function with exponentially growing delays.

    Args:
        max_retries: Retry attempts after the first call (0 = no retries)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay
        exponential_base: Multiplier applied to the delay after each retry
        exceptions: Exception types that may be retried
        should_retry: Optional predicate; a caught exception it rejects is
            re-raised immediately
        on_retry: Optional callback(attempt, exception, delay)

    Example:
        @exponential_backoff(max_retries=2, exceptions=(requests.Timeout,))
        def post_completion(payload):
            return requests.post(url, json=payload, timeout=30)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if should_retry is not None and not should_retry(e):
                        raise
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}",
                            attempts=max_retries + 1,
                        ) from e

                    current_delay = min(delay, max_delay)
                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)
                    time.sleep(current_delay)
                    delay *= exponential_base

        return wrapper
    return decorator


def should_retry_http_status(status_code: int) -> bool:
    """True for statuses worth retrying (rate limits, timeouts, 5xx gateway errors)."""
    return status_code in RETRYABLE_STATUS_CODES


def is_transient_error(exception: Exception) -> bool:
    """
    Guess from the message whether an error is transient.

    Used for errors that carry no status code, e.g. a local Ollama server
    still loading its model.
    """
    error_str = str(exception).lower()
    transient_keywords = (
        'timeout',
        'timed out',
        'connection',
        'temporarily unavailable',
        'service unavailable',
        'model is loading',
        '429',
        '502',
        '503',
        '504',
    )
    return any(keyword in error_str for keyword in transient_keywords)
