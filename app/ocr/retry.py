"""Retry policy for rate-limited providers.

A tenacity ``AsyncRetrying`` loop moves through Attempting -> Backoff ->
Attempting ... and ends in Succeeded or ExhaustedRetries. Only the
exception types named by the policy are retried; everything else escapes
on the first attempt.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from app.logging.logger import Log
from app.ocr.exceptions import RateLimitError, RetryExhaustedError

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded linear backoff: wait ``attempt_number * backoff_seconds``."""

    max_attempts: int = 3
    backoff_seconds: float = 5.0
    retry_on: tuple[type[Exception], ...] = (RateLimitError,)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must not be negative")

    def backoff_for(self, attempt_number: int) -> float:
        """Seconds to wait after the given failed attempt (1-based)."""
        return attempt_number * self.backoff_seconds

    async def call(
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        label: str,
        sleep: SleepFn = asyncio.sleep,
    ) -> T:
        """Run ``fn`` under this policy.

        Raises:
            RetryExhaustedError: when every attempt failed with a retryable error.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=lambda state: _log_backoff(label, state),
            sleep=sleep,
        )
        try:
            return await retrying(fn)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            raise RetryExhaustedError(
                f"{label}: rate limited on all {self.max_attempts} attempts: {last}",
                attempts=self.max_attempts,
            ) from last


def _log_backoff(label: str, state: RetryCallState) -> None:
    wait = state.next_action.sleep if state.next_action is not None else 0.0
    Log.warning(
        f"{label}: attempt {state.attempt_number} rate limited, backing off {wait:.0f}s"
    )
