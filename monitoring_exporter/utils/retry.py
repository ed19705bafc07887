"""
Retry utility using tenacity with exponential backoff.
"""
from tenacity import (
    retry,
    stop_after_delay,
    wait_exponential,
    retry_if_exception_type,
)


def with_retry_on_exception(
    exception_types: tuple,
    max_delay_seconds: float = 5,
    min_wait: float = 0.1,
    max_wait: float = 1,
):
    """
    Decorator for retrying only on specific exception types.

    Args:
        exception_types: Tuple of exception types to retry on
        max_delay_seconds: Maximum total retry time
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)
    """
    return retry(
        wait=wait_exponential(multiplier=2.0, min=min_wait, max=max_wait),
        stop=stop_after_delay(max_delay_seconds),
        retry=retry_if_exception_type(exception_types),
        reraise=True,
    )
