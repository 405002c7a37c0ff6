"""Exponential backoff retry policy."""

import time
from collections.abc import Callable
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from compaction_tts.config import RetryConfig

T = TypeVar("T")


class FailedAttempt(BaseModel):
    """Describes one failed attempt before the next retry (or give-up)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attempt_number: int
    retries_left: int
    error: Exception


def _always(_: Exception) -> bool:
    return True


class RetryPolicy:
    """
    Runs a single-attempt operation until it succeeds or the budget is spent.

    With the defaults the operation is tried four times, sleeping 1s, 2s and
    4s between attempts. Delays are capped at ``max_delay_seconds``.
    """

    def __init__(
        self,
        max_retries: int = 3,
        min_delay_seconds: float = 1.0,
        factor: float = 2.0,
        max_delay_seconds: float = 60.0,
        is_retryable: Callable[[Exception], bool] = _always,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max_retries
        self.min_delay_seconds = min_delay_seconds
        self.factor = factor
        self.max_delay_seconds = max_delay_seconds
        self._is_retryable = is_retryable
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: RetryConfig,
        is_retryable: Callable[[Exception], bool] = _always,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries,
            min_delay_seconds=config.min_delay_seconds,
            factor=config.factor,
            max_delay_seconds=config.max_delay_seconds,
            is_retryable=is_retryable,
            sleep=sleep,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt_number: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        delay = self.min_delay_seconds * self.factor ** (attempt_number - 1)
        return min(delay, self.max_delay_seconds)

    def execute(
        self,
        operation: Callable[[], T],
        on_failed_attempt: Callable[[FailedAttempt], None] | None = None,
    ) -> T:
        """
        Calls ``operation`` with retries.

        Args:
            operation: Zero-argument callable performing one attempt.
            on_failed_attempt: Notified after every failed attempt, including
                the last one.

        Returns:
            The operation's result from the first successful attempt.

        Raises:
            Exception: The error from the last attempt, or the first error the
                retry predicate rejects.
        """
        attempt_number = 0
        while True:
            attempt_number += 1
            try:
                return operation()
            except Exception as e:
                retryable = self._is_retryable(e)
                retries_left = (
                    self.max_attempts - attempt_number if retryable else 0
                )
                if on_failed_attempt is not None:
                    on_failed_attempt(
                        FailedAttempt(
                            attempt_number=attempt_number,
                            retries_left=retries_left,
                            error=e,
                        )
                    )
                if retries_left <= 0:
                    raise
                self._sleep(self.delay_for(attempt_number))
