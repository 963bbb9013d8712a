"""
Retry Manager Module

Implements exponential backoff retry logic for idempotent backend reads.

Sign-in and ownership checks are never retried: a retried sign-in would
count twice against the login limit, and an ownership answer must come from
a single response.
"""

import asyncio
import random
from typing import Awaitable, Callable, TypeVar, Optional, Set
from dataclasses import dataclass, field

import httpx
from loguru import logger

from storefront.core.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_JITTER_FACTOR,
)


T = TypeVar('T')


@dataclass
class RetryConfig:
    """
    Configuration for retry logic.

    Attributes:
        max_retries: Maximum number of retry attempts
        initial_backoff: Initial backoff delay in seconds
        max_backoff: Maximum backoff delay in seconds
        backoff_multiplier: Multiplier for exponential backoff
        jitter_factor: Jitter factor (0.0-1.0) to add randomness
        retryable_status_codes: HTTP status codes that should trigger retry
        non_retryable_status_codes: HTTP status codes that should never retry
    """
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF
    max_backoff: float = DEFAULT_MAX_BACKOFF
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    jitter_factor: float = DEFAULT_JITTER_FACTOR
    retryable_status_codes: Set[int] = field(
        default_factory=lambda: {408, 429, 500, 502, 503, 504}
    )
    non_retryable_status_codes: Set[int] = field(
        default_factory=lambda: {400, 401, 403, 404}
    )


class RetryManager:
    """
    Manages retry logic with exponential backoff.

    Example:
        >>> retry_manager = RetryManager()
        >>> status = await retry_manager.retry_async(
        ...     backend.check_connect_status, 'store1'
        ... )
    """

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()

    def calculate_backoff(self, attempt: int) -> float:
        """
        Calculate backoff delay for a retry attempt.

        delay = min(initial * multiplier^attempt, max) * (1 + jitter * random())
        """
        delay = self.config.initial_backoff * (self.config.backoff_multiplier ** attempt)
        delay = min(delay, self.config.max_backoff)

        jitter = delay * self.config.jitter_factor * random.random()
        return delay + jitter

    def should_retry(self, attempt: int, error: Exception, status_code: Optional[int] = None) -> bool:
        """
        Determine if operation should be retried.

        Args:
            attempt: Current attempt number (0-indexed)
            error: Exception that was raised
            status_code: HTTP status code (if applicable)
        """
        if attempt >= self.config.max_retries:
            return False

        if status_code is not None:
            if status_code in self.config.non_retryable_status_codes:
                return False
            if status_code in self.config.retryable_status_codes:
                return True

        return isinstance(error, (ConnectionError, TimeoutError, httpx.TransportError))

    async def retry_async(
        self,
        func: Callable[..., Awaitable[T]],
        *args,
        **kwargs
    ) -> T:
        """
        Retry an async function with exponential backoff.

        Returns:
            Result from successful function call

        Raises:
            Exception: Last exception if all retries fail or the error is not retryable
        """
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)

            except Exception as e:
                status_code = getattr(e, 'status_code', None)

                if not self.should_retry(attempt, e, status_code):
                    if attempt:
                        logger.warning(
                            f"Giving up after attempt {attempt + 1}: {type(e).__name__}: {e}"
                        )
                    raise

                delay = self.calculate_backoff(attempt)
                logger.warning(
                    f"Retry attempt {attempt + 1}/{self.config.max_retries} "
                    f"after {delay:.2f}s delay: {type(e).__name__}: {e}"
                )
                await asyncio.sleep(delay)
                attempt += 1


# Create default retry manager instance
default_retry_manager = RetryManager()
