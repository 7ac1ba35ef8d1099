"""
stagehand.infrastructure.retry - Bounded Retry with Backoff
=============================================================

File operations on a deployment target fail for transient reasons all the
time: a service that was just stopped still holds a handle, an antivirus
scanner has a file open, a directory listing races a delete. The retry
primitives here let the file-system gateway keep trying for a bounded
number of attempts and a bounded amount of time.

Retry Protocol:
    retry = RetryTracker(max_retries=3, time_limit=60.0, retry_interval=interval)

    while retry.try_():                 # attempt 1, 2, 3, 4
        try:
            do_the_thing()
            break
        except OSError:
            if retry.can_retry():
                time.sleep(retry.sleep())   # escalating backoff
            else:
                raise                       # out of attempts or out of time

Backoff Schedule (file-operation default):

    retry #1  ── 100ms ──>
    retry #2  ── 100ms ──>
    retry #3+ ── 200ms ──> (constant from here on)

Design Decisions:
    - RetryInterval is a frozen Pydantic model: it is a value, built from
      FileRetryConfig and shared by every tracker.
    - RetryTracker is a plain stateful object created per operation and
      thrown away afterwards.
    - The clock is injectable so time-limit behavior is testable without
      sleeping.
"""

from __future__ import annotations

import time
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from stagehand.core.config import FileRetryConfig


# Retries that are always worth a log line before throttling kicks in.
WARNING_THRESHOLD = 3

# After the threshold, only every Nth retry is logged.
WARNING_INTERVAL = 10


# =============================================================================
# RetryInterval
# =============================================================================
class RetryInterval(BaseModel):
    """Escalating backoff schedule.

    The first ``initial_attempts`` retries wait ``initial_ms``; every retry
    after that waits ``steady_ms``.

    Example:
        >>> interval = RetryInterval(initial_ms=100, steady_ms=200, initial_attempts=2)
        >>> [interval.get_interval(n) for n in (1, 2, 3, 4)]
        [0.1, 0.1, 0.2, 0.2]
    """

    model_config = ConfigDict(frozen=True)

    initial_ms: int = Field(default=100, ge=0, description="Backoff for early retries")
    steady_ms: int = Field(default=200, ge=0, description="Backoff once escalated")
    initial_attempts: int = Field(
        default=2,
        ge=0,
        description="How many retries use the initial backoff",
    )

    def get_interval(self, retry_count: int) -> float:
        """Seconds to wait before retry number ``retry_count`` (1-based)."""
        if retry_count <= self.initial_attempts:
            return self.initial_ms / 1000.0
        return self.steady_ms / 1000.0

    @classmethod
    def from_config(cls, config: FileRetryConfig) -> RetryInterval:
        return cls(
            initial_ms=config.initial_interval_ms,
            steady_ms=config.steady_interval_ms,
            initial_attempts=config.initial_attempts,
        )


# =============================================================================
# RetryTracker
# =============================================================================
class RetryTracker:
    """Counts attempts of one operation against an attempt and time budget.

    ``try_()`` returns True at most ``max_retries + 1`` times (the first
    attempt plus ``max_retries`` retries) and never once ``time_limit``
    seconds have elapsed since the tracker was created.

    Attributes:
        max_retries: Retries allowed after the first attempt.
        time_limit: Wall-clock budget in seconds.
        retry_interval: Backoff schedule consulted by ``sleep()``.
    """

    def __init__(
        self,
        max_retries: int,
        time_limit: float,
        retry_interval: RetryInterval,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if time_limit <= 0:
            raise ValueError("time_limit must be > 0")

        self.max_retries = max_retries
        self.time_limit = time_limit
        self.retry_interval = retry_interval
        self._clock = clock
        self._started_at = clock()
        self._current_try = 0

    @classmethod
    def for_file_operations(
        cls,
        config: FileRetryConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> RetryTracker:
        """Tracker with the file-operation budget from configuration."""
        return cls(
            max_retries=config.max_retries,
            time_limit=config.time_limit_seconds,
            retry_interval=RetryInterval.from_config(config),
            clock=clock,
        )

    @property
    def current_try(self) -> int:
        """Number of attempts started so far (1 during the first attempt)."""
        return self._current_try

    @property
    def is_not_first_attempt(self) -> bool:
        return self._current_try > 1

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started_at

    def can_retry(self) -> bool:
        """Whether another attempt would be permitted. Does not count one."""
        return self._current_try <= self.max_retries and self.elapsed < self.time_limit

    def try_(self) -> bool:
        """Start an attempt if the budget allows it."""
        if not self.can_retry():
            return False
        self._current_try += 1
        return True

    def sleep(self) -> float:
        """Backoff in seconds before the next attempt."""
        return self.retry_interval.get_interval(self._current_try)

    def should_log_warning(self) -> bool:
        """Throttle retry logging: the first few retries, then every Nth."""
        if self._current_try <= WARNING_THRESHOLD:
            return True
        return self._current_try % WARNING_INTERVAL == 0

    def __repr__(self) -> str:
        return (
            f"RetryTracker(current_try={self._current_try}, "
            f"max_retries={self.max_retries}, time_limit={self.time_limit})"
        )
