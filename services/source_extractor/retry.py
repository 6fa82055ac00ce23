"""Retry logic for provider API calls with exponential backoff.

Only transient transport failures are retried. An HTTP error from a job board
is a real answer and is reported straight away.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

import requests

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


def retry_with_backoff(
    max_retries: int = 1,
    initial_delay: float = 0.5,
    backoff_factor: float = 2.0,
    exceptions: tuple[type[Exception], ...] = TRANSIENT_ERRORS,
) -> Callable[[F], F]:
    """Decorator to retry a function with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 1)
        initial_delay: Delay in seconds before the first retry (default: 0.5)
        backoff_factor: Multiplier for delay after each retry (default: 2.0)
                       delay = initial_delay * (backoff_factor ** attempt)
        exceptions: Exception types that trigger a retry. Anything else
                    propagates immediately.

    Returns:
        Decorated function that will retry on failure

    Example:
        @retry_with_backoff(max_retries=2, initial_delay=0.5)
        def fetch_listing():
            response = requests.get("https://jobs.example.com/api/jobs", timeout=10)
            return response.json()

    Backoff calculation (initial_delay=0.5, backoff_factor=2.0):
        Attempt 1: No delay (first try)
        Attempt 2: Wait 0.5 seconds (0.5 * 2^0)
        Attempt 3: Wait 1 second    (0.5 * 2^1)
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    # Don't sleep after the last attempt
                    if attempt < max_retries:
                        delay = initial_delay * (backoff_factor**attempt)

                        logger.warning(
                            "Function %s failed (attempt %d/%d): %s. Retrying in %.1f seconds...",
                            func.__name__,
                            attempt + 1,
                            max_retries + 1,
                            e,
                            delay,
                            extra={
                                "function": func.__name__,
                                "retry_attempt": attempt + 1,
                                "max_retries": max_retries + 1,
                                "delay_seconds": delay,
                                "exception_type": type(e).__name__,
                            },
                        )

                        time.sleep(delay)
                    else:
                        logger.error(
                            "Function %s failed after %d attempts",
                            func.__name__,
                            max_retries + 1,
                            extra={
                                "function": func.__name__,
                                "total_attempts": max_retries + 1,
                                "exception_type": type(e).__name__,
                            },
                        )

            raise last_exception  # type: ignore

        return wrapper  # type: ignore

    return decorator
