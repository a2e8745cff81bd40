"""Retry utilities for asynchronous operations using Tenacity."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    FETCH_MAX_ATTEMPTS,
    RETRY_BACKOFF_MULTIPLIER,
    RETRY_MAX_BACKOFF_SECONDS,
)
from ..errors.internal import NetworkError

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    context: str,
    max_attempts: int = FETCH_MAX_ATTEMPTS,
) -> T:
    """Retry an asynchronous operation on transient network errors.

    Only ``NetworkError`` is retried; every other exception propagates on the
    first occurrence. When attempts run out the last ``NetworkError`` is
    re-raised unchanged so callers can keep distinguishing failure kinds.

    Args:
        operation: Zero-argument async callable to run.
        context: Descriptive context used in retry log lines.
        max_attempts: Maximum number of attempts.

    Returns:
        The result of the first successful attempt.
    """

    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logging.info(
            f"🔁 Retrying {context} (attempt {retry_state.attempt_number + 1}/{max_attempts}): {exc}"
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=RETRY_BACKOFF_MULTIPLIER, max=RETRY_MAX_BACKOFF_SECONDS
        ),
        retry=retry_if_exception_type(NetworkError),
        before_sleep=before_sleep,
        reraise=True,
    )
    return await retrying(operation)
