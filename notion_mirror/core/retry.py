"""
Retry with exponential backoff for Notion API calls.

Only transient failures are retried: network errors, timeouts and responses
with status 429 or 5xx. The server-provided `Retry-After` delay is honored
when present.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from logging import Logger
from typing import Any, Callable, TypeVar

import httpx
from notion_client.errors import RequestTimeoutError

__all__ = [
    "RetryPolicy",
    "get_retry_after",
    "is_retryable",
    "with_retry",
]

T = TypeVar("T")


@dataclass(kw_only=True)
class RetryPolicy:
    """
    Encapsulates backoff parameters.
    """

    retries: int = 4
    """
    Maximum number of retries after the first attempt.
    """

    min_delay: float = 0.25
    """
    Delay in seconds before the first retry, before jitter.
    """

    max_delay: float = 10.0
    """
    Upper bound on any single delay, applied after jitter.
    """

    factor: float = 2.0
    """
    Exponential growth factor of the delay.
    """

    jitter: bool = True
    """
    Scale each delay by a random factor in [0.5, 1.5).
    """

    max_elapsed: float = 60.0
    """
    Stop retrying once this many seconds have elapsed since the first attempt.
    """

    sleep: Callable[[float], Any] = time.sleep
    clock: Callable[[], float] = time.monotonic
    rand: Callable[[], float] = random.random


def is_retryable(error: BaseException) -> bool:
    """
    Check whether the error is transient.
    """
    status = getattr(error, "status", None)
    if isinstance(status, int):
        return status == 429 or 500 <= status < 600

    return isinstance(
        error, (RequestTimeoutError, httpx.TransportError, OSError)
    )


def get_retry_after(error: BaseException) -> float | None:
    """
    Get server-specified retry delay in seconds, if any.
    """
    headers = getattr(error, "headers", None)

    if headers is None:
        response = getattr(error, "response", None)
        headers = getattr(response, "headers", None)

    if not headers:
        return None

    value = headers.get("retry-after") or headers.get("Retry-After")
    if value is None:
        return None

    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def with_retry(
    func: Callable[[], T],
    *,
    policy: RetryPolicy | None = None,
    logger: Logger | None = None,
    name: str | None = None,
) -> T:
    """
    Invoke `func`, retrying transient failures with exponential backoff.

    The original exception is re-raised when the error isn't retryable, the
    retry count is exhausted or the elapsed time exceeds the policy's limit.
    """
    policy = policy or RetryPolicy()
    logger = logger or logging.getLogger()
    name = name or getattr(func, "__name__", "call")

    start = policy.clock()
    attempt = 0
    delay = policy.min_delay

    while True:
        try:
            return func()
        except Exception as e:
            attempt += 1
            elapsed = policy.clock() - start

            if (
                not is_retryable(e)
                or attempt > policy.retries
                or elapsed > policy.max_elapsed
            ):
                raise

            # server-specified delay is used as-is, without jitter
            retry_after = get_retry_after(e)
            if retry_after is not None:
                wait = retry_after
            else:
                wait = delay * (0.5 + policy.rand()) if policy.jitter else delay

            # sleep never extends past the elapsed limit
            wait = min(wait, policy.max_delay, policy.max_elapsed - elapsed)

            logger.warning(
                f"Attempt {attempt}/{policy.retries + 1} of {name} failed: {e}; "
                f"retrying in {wait:.2f}s"
            )

            policy.sleep(wait)
            delay = min(policy.max_delay, delay * policy.factor)
