"""
Tests for retry logic.
"""

import pytest

from profilefinder.retry import (
    RetryableStatus,
    RetryError,
    exponential_backoff,
    should_retry_http_status,
)


class TestExponentialBackoff:
    """Test exponential backoff decorator."""

    def test_success_on_first_try(self):
        """Function that succeeds immediately should not retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.1)
        def succeeds():
            call_count[0] += 1
            return "success"

        assert succeeds() == "success"
        assert call_count[0] == 1

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
        """Should raise RetryError after all attempts fail, chained to the last error."""
        call_count = [0]

        @exponential_backoff(max_retries=2, base_delay=0.01)
        def always_fails():
            call_count[0] += 1
            raise ValueError("Always fails")

        with pytest.raises(RetryError) as exc_info:
            always_fails()

        assert call_count[0] == 3  # Initial + 2 retries
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_zero_retries_means_single_attempt(self):
        call_count = [0]

        @exponential_backoff(max_retries=0, base_delay=0.01)
        def always_fails():
            call_count[0] += 1
            raise ConnectionError("down")

        with pytest.raises(RetryError):
            always_fails()
        assert call_count[0] == 1

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

    def test_exponential_delay(self):
        """Delay should increase exponentially."""
        delays = []

        def on_retry_callback(attempt, exception, delay):
            delays.append(delay)

        @exponential_backoff(
            max_retries=3,
            base_delay=0.01,
            exponential_base=2.0,
            on_retry=on_retry_callback,
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert delays == [0.01, 0.02, 0.04]

    def test_max_delay_cap(self, monkeypatch):
        """Delay should not exceed max_delay."""
        monkeypatch.setattr("profilefinder.retry.time.sleep", lambda s: None)
        delays = []

        @exponential_backoff(
            max_retries=5,
            base_delay=1.0,
            max_delay=2.0,
            exponential_base=3.0,
            on_retry=lambda attempt, exc, delay: delays.append(delay),
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert len(delays) == 5
        assert all(d <= 2.0 for d in delays)


class TestRetryableStatus:
    """Test the status-code retry signal."""

    def test_carries_status_and_response(self):
        response = object()
        exc = RetryableStatus(503, response)
        assert exc.status_code == 503
        assert exc.response is response
        assert "503" in str(exc)

    def test_http_status_retry_logic(self):
        """Should correctly identify retryable HTTP status codes."""
        assert should_retry_http_status(408)
        assert should_retry_http_status(429)
        assert should_retry_http_status(500)
        assert should_retry_http_status(502)
        assert should_retry_http_status(503)
        assert should_retry_http_status(504)

        assert not should_retry_http_status(200)
        assert not should_retry_http_status(404)
        assert not should_retry_http_status(403)
        assert not should_retry_http_status(401)
