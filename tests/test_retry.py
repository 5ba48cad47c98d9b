"""
Tests for retry logic.
"""

from unittest.mock import patch

import pytest

from jobharvest.retry import (
    RetryError,
    TransientHTTPError,
    exponential_backoff,
    should_retry_http_status,
)


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("jobharvest.retry.time.sleep") as sleep:
        yield sleep


class TestExponentialBackoff:
    """Test exponential backoff decorator."""

    def test_success_on_first_try(self, no_sleep):
        """Function that succeeds immediately should not retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.1)
        def succeeds():
            call_count[0] += 1
            return "success"

        assert succeeds() == "success"
        assert call_count[0] == 1
        no_sleep.assert_not_called()

    def test_retry_then_succeed(self):
        """Function that fails then succeeds should retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01)
        def fails_twice():
            call_count[0] += 1
            if call_count[0] < 3:
                raise ConnectionError("Temporary failure")
            return "success"

        assert fails_twice() == "success"
        assert call_count[0] == 3

    def test_all_retries_exhausted(self):
        """Should raise RetryError after all attempts fail."""
        call_count = [0]

        @exponential_backoff(max_retries=2, base_delay=0.01)
        def always_fails():
            call_count[0] += 1
            raise TransientHTTPError(503, "https://www.tes.com/jobs")

        with pytest.raises(RetryError) as exc_info:
            always_fails()

        assert call_count[0] == 3  # Initial + 2 retries
        assert "Failed after 3 attempts: HTTP 503 from https://www.tes.com/jobs" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, TransientHTTPError)

    def test_only_catches_specified_exceptions(self):
        """Should only retry on specified exception types."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01, exceptions=(ConnectionError,))
        def raises_value_error():
            call_count[0] += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            raises_value_error()

        assert call_count[0] == 1

    def test_exponential_delay(self, no_sleep):
        """Delay should increase exponentially."""
        delays = []

        @exponential_backoff(
            max_retries=3,
            base_delay=0.5,
            exponential_base=2.0,
            on_retry=lambda attempt, exception, delay: delays.append(delay),
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert delays == [0.5, 1.0, 2.0]
        assert [c.args[0] for c in no_sleep.call_args_list] == [0.5, 1.0, 2.0]

    def test_max_delay_cap(self):
        """Delay should not exceed max_delay."""
        delays = []

        @exponential_backoff(
            max_retries=5,
            base_delay=1.0,
            max_delay=2.0,
            exponential_base=3.0,
            on_retry=lambda attempt, exception, delay: delays.append(delay),
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert len(delays) == 5
        assert all(d <= 2.0 for d in delays)

    def test_no_retries(self, no_sleep):
        @exponential_backoff(max_retries=0)
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()
        no_sleep.assert_not_called()


class TestRetryableStatus:
    """Test HTTP status classification."""

    def test_transient_error_carries_status(self):
        error = TransientHTTPError(429, "https://api.lever.co/v0/postings/x")
        assert error.status_code == 429
        assert error.url == "https://api.lever.co/v0/postings/x"
        assert str(error) == "HTTP 429 from https://api.lever.co/v0/postings/x"

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_retryable(self, status):
        assert should_retry_http_status(status)

    @pytest.mark.parametrize("status", [200, 301, 401, 403, 404, 410])
    def test_not_retryable(self, status):
        assert not should_retry_http_status(status)
