"""
Rate Limit Retry Policy
=======================

Tracks the retry state of a single request that may be answered with
HTTP 429. The request moves through explicit phases:

    ATTEMPTING(n) -> WAITING -> ATTEMPTING(n + 1) -> ... -> EXHAUSTED

or ends in SUCCEEDED. The caller performs the request and the sleep; this
object only decides what happens next, so the retry ceiling can be tested
without any network or clock.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RetryPhase(Enum):
    """Phases of a rate-limited request"""
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


def parse_retry_after(value: Optional[str], default: float) -> float:
    """
    Read a Retry-After header expressed in seconds.

    Args:
        value: Raw header value, or None when the header is absent
        default: Wait used when the header is absent or not a number

    Returns:
        Seconds to wait (never negative)
    """
    if value is None or not str(value).strip():
        return default
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return default
    return max(seconds, 0.0)


@dataclass
class RateLimitRetry:
    """Retry state for one request."""
    max_retries: int = 3
    default_wait: float = 60.0
    phase: RetryPhase = RetryPhase.ATTEMPTING
    retries: int = 0
    wait_seconds: Optional[float] = None

    @property
    def attempt(self) -> int:
        """1-based number of the current (or last) attempt."""
        return self.retries + 1

    def on_success(self) -> RetryPhase:
        self._expect(RetryPhase.ATTEMPTING)
        self.phase = RetryPhase.SUCCEEDED
        self.wait_seconds = None
        return self.phase

    def on_rate_limited(self, retry_after: Optional[str] = None) -> RetryPhase:
        """Record a 429 response; move to WAITING or EXHAUSTED."""
        self._expect(RetryPhase.ATTEMPTING)
        if self.retries >= self.max_retries:
            self.phase = RetryPhase.EXHAUSTED
            self.wait_seconds = None
        else:
            self.phase = RetryPhase.WAITING
            self.wait_seconds = parse_retry_after(retry_after, self.default_wait)
        return self.phase

    def on_wait_complete(self) -> RetryPhase:
        self._expect(RetryPhase.WAITING)
        self.retries += 1
        self.wait_seconds = None
        self.phase = RetryPhase.ATTEMPTING
        return self.phase

    @property
    def finished(self) -> bool:
        return self.phase in (RetryPhase.SUCCEEDED, RetryPhase.EXHAUSTED)

    def _expect(self, phase: RetryPhase) -> None:
        if self.phase is not phase:
            raise RuntimeError(
                f"Invalid retry transition from {self.phase.value} (expected {phase.value})"
            )
