"""
Tests for the rate limit retry state machine.
"""

import pytest

from issue_sync.src.retry_policy import RateLimitRetry, RetryPhase, parse_retry_after


class TestParseRetryAfter:

    @pytest.mark.parametrize("value, expected", [
        ("2", 2.0),
        ("0", 0.0),
        ("1.5", 1.5),
        (None, 60.0),
        ("", 60.0),
        ("soon", 60.0),
        ("-5", 0.0),
    ])
    def test_values(self, value, expected):
        assert parse_retry_after(value, default=60.0) == expected


class TestRateLimitRetry:
    """Test suite for RateLimitRetry transitions."""

    def test_success_on_first_attempt(self):
        retry = RateLimitRetry()

        assert retry.on_success() is RetryPhase.SUCCEEDED
        assert retry.finished
        assert retry.retries == 0

    def test_wait_then_retry(self):
        retry = RateLimitRetry(max_retries=3)

        assert retry.on_rate_limited("2") is RetryPhase.WAITING
        assert retry.wait_seconds == 2.0
        assert retry.on_wait_complete() is RetryPhase.ATTEMPTING
        assert retry.attempt == 2
        assert retry.on_success() is RetryPhase.SUCCEEDED

    def test_default_wait_when_header_missing(self):
        retry = RateLimitRetry(default_wait=60)

        retry.on_rate_limited(None)

        assert retry.wait_seconds == 60

    def test_exhausted_after_max_retries(self):
        retry = RateLimitRetry(max_retries=3)

        for _ in range(3):
            assert retry.on_rate_limited("1") is RetryPhase.WAITING
            retry.on_wait_complete()

        assert retry.on_rate_limited("1") is RetryPhase.EXHAUSTED
        assert retry.finished
        assert retry.retries == 3
        assert retry.attempt == 4

    def test_zero_retries_exhausts_immediately(self):
        retry = RateLimitRetry(max_retries=0)

        assert retry.on_rate_limited("1") is RetryPhase.EXHAUSTED

    def test_invalid_transition(self):
        retry = RateLimitRetry()

        with pytest.raises(RuntimeError):
            retry.on_wait_complete()

        retry.on_success()
        with pytest.raises(RuntimeError):
            retry.on_rate_limited("1")
