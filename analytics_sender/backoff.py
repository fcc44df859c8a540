from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_random,
)

from .constants import (
    DEFAULT_BACKOFF_INITIAL,
    DEFAULT_BACKOFF_JITTER,
    DEFAULT_BACKOFF_MAX,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_MAX_ATTEMPTS,
)
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Delay sequence and retry budget applied to one batch's send cycle.

    The n-th wait is ``min(initial * multiplier ** (n - 1), max_delay) + U(0, jitter)``.
    The budget is ``max_attempts`` sends in total, optionally also bounded by
    ``max_elapsed`` seconds since the first send.

    Instances are immutable; pass a different policy to a worker instead of
    changing a shared one.
    """

    initial: float = DEFAULT_BACKOFF_INITIAL
    multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    max_delay: float = DEFAULT_BACKOFF_MAX
    jitter: float = DEFAULT_BACKOFF_JITTER
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    max_elapsed: Optional[float] = None
    sleep: Callable[[float], None] = field(
        default=time.sleep, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.initial < 0:
            raise ConfigurationError("backoff.initial", "must not be negative")
        if self.multiplier < 1:
            raise ConfigurationError("backoff.multiplier", "must be at least 1")
        if self.max_delay < self.initial:
            raise ConfigurationError(
                "backoff.max_delay", "must not be smaller than the initial delay"
            )
        if self.jitter < 0:
            raise ConfigurationError("backoff.jitter", "must not be negative")
        if self.max_attempts < 1:
            raise ConfigurationError("backoff.max_attempts", "must be at least 1")
        if self.max_elapsed is not None and self.max_elapsed <= 0:
            raise ConfigurationError("backoff.max_elapsed", "must be positive")

    @classmethod
    def fast(cls, max_attempts: int = 3) -> "BackoffPolicy":
        """Near-zero delays, mostly useful for tests."""
        return cls(
            initial=0.001,
            multiplier=1.0,
            max_delay=0.001,
            jitter=0.0,
            max_attempts=max_attempts,
        )

    @property
    def max_retries(self) -> int:
        return self.max_attempts - 1

    def delays(self) -> Iterator[float]:
        """
        Yield the nominal (jitter-free) wait before each retry.
        """
        for attempt in range(1, self.max_attempts):
            yield min(self.initial * self.multiplier ** (attempt - 1), self.max_delay)

    def retrying(
        self,
        should_retry: Callable[[Any], bool],
        before_sleep: Optional[Callable[[RetryCallState], None]] = None,
    ) -> Retrying:
        """
        Build a tenacity controller that retries while ``should_retry(result)``
        holds and the budget allows.

        Exhausting the budget raises ``tenacity.RetryError``.
        """
        stop = stop_after_attempt(self.max_attempts)
        if self.max_elapsed is not None:
            stop = stop | stop_after_delay(self.max_elapsed)

        return Retrying(
            stop=stop,
            wait=wait_exponential(
                multiplier=self.initial,
                max=self.max_delay,
                exp_base=self.multiplier,
            )
            + wait_random(0, self.jitter),
            retry=retry_if_result(should_retry),
            before_sleep=before_sleep,
            sleep=self.sleep,
        )
