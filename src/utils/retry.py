"""
Retry utilities for backend calls.

Wraps one opaque async operation with bounded retries and exponential
backoff with full jitter: after the n-th failure the wait is drawn
uniformly from [0, min(max_delay, base_delay * 2**n)).
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from config.constants import MAX_RETRIES, RETRY_BASE_DELAY, RETRY_MAX_DELAY
from config.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior (delays in seconds)."""
    retries: int = MAX_RETRIES
    base_delay: float = RETRY_BASE_DELAY
    max_delay: float = RETRY_MAX_DELAY


API_RETRY_CONFIG = RetryConfig()


def calculate_backoff_ceiling(attempt: int, base_delay: float, max_delay: float) -> float:
    """
    Upper bound of the jittered delay after a failure.

    Args:
        attempt: Number of failures so far (1-based)
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds

    Returns:
        Ceiling in seconds
    """
    try:
        return min(max_delay, base_delay * (2 ** attempt))
    except OverflowError:
        return max_delay


def _log_retry(operation_name: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"{operation_name} failed on attempt {retry_state.attempt_number}/{max_attempts} "
            f"({error.__class__.__name__}: {error}). Retrying in {delay:.1f}s"
        )
    return before_sleep


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    fatal_exceptions: Sequence[type[BaseException]] = (),
    sleep: Callable[[float], Any] = asyncio.sleep,
    operation_name: str = "operation",
) -> T:
    """
    Run an async operation with bounded retries and full-jitter backoff.

    The operation is attempted up to ``retries + 1`` times. There is no
    wait after a success nor after the last failed attempt, whose
    exception is re-raised unchanged.

    Args:
        operation: No-argument callable returning an awaitable
        retries: Number of retries after the first attempt
        base_delay: Base delay in seconds
        max_delay: Maximum delay between retries
        fatal_exceptions: Exception types that are re-raised without retrying
        sleep: Awaitable sleep function (injectable for tests)
        operation_name: Label used in retry warnings

    Returns:
        Whatever the operation returns

    Usage:
        response = await call_with_retry(
            lambda: backend.generate_content(model=model, contents=contents),
            retries=3,
        )
    """
    if retries < 0:
        raise ValueError("retries must be >= 0")

    retry_condition = retry_if_exception_type(Exception)
    if fatal_exceptions:
        retry_condition = retry_condition & retry_if_not_exception_type(tuple(fatal_exceptions))

    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        # tenacity's ceiling is multiplier * 2**(n - 1), n = failures so far
        wait=wait_random_exponential(multiplier=base_delay * 2, max=max_delay),
        retry=retry_condition,
        before_sleep=_log_retry(operation_name, retries + 1),
        sleep=sleep,
        reraise=True,
    )
    # Iterate attempts so lambdas returning coroutines are awaited too
    async for attempt in retrying:
        with attempt:
            return await operation()


async def call_with_config(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig = API_RETRY_CONFIG,
    **kwargs,
) -> T:
    """
    ``call_with_retry`` driven by a RetryConfig object.

    Usage:
        config = RetryConfig(retries=5, base_delay=1.0)
        await call_with_config(lambda: fetch(), config)
    """
    return await call_with_retry(
        operation,
        retries=config.retries,
        base_delay=config.base_delay,
        max_delay=config.max_delay,
        **kwargs,
    )
