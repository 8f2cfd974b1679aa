"""
Tests for retry logic.
"""

import pytest

from freelancematch.retry import (
    exponential_backoff,
    is_transient_error,
    should_retry_http_status,
    RetryError,
)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Skip real backoff delays."""
    monkeypatch.setattr("freelancematch.retry.time.sleep", lambda seconds: None)


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
        """Should raise RetryError chained to the last failure."""
        call_count = [0]

        @exponential_backoff(max_retries=2, base_delay=0.01)
        def always_fails():
            call_count[0] += 1
            raise ValueError("Always fails")

        with pytest.raises(RetryError) as exc_info:
            always_fails()

        assert call_count[0] == 3  # Initial + 2 retries
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.__cause__, ValueError)

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

    def test_should_retry_predicate(self):
        """A rejected exception is re-raised without retrying."""
        call_count = [0]

        @exponential_backoff(max_retries=3, should_retry=lambda e: "transient" in str(e))
        def permanent_failure():
            call_count[0] += 1
            raise ConnectionError("bad credentials")

        with pytest.raises(ConnectionError):
            permanent_failure()

        assert call_count[0] == 1

    def test_exponential_delay(self):
        """Delay should increase exponentially."""
        delays = []

        @exponential_backoff(
            max_retries=3,
            base_delay=0.01,
            exponential_base=2.0,
            on_retry=lambda attempt, exception, delay: delays.append(delay),
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert delays == pytest.approx([0.01, 0.02, 0.04])

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

        assert delays == [1.0, 2.0, 2.0, 2.0, 2.0]

    def test_zero_retries(self):
        call_count = [0]

        @exponential_backoff(max_retries=0)
        def fails():
            call_count[0] += 1
            raise ConnectionError("down")

        with pytest.raises(RetryError):
            fails()
        assert call_count[0] == 1


class TestRetryHelpers:
    """Test retry classification helpers."""

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert should_retry_http_status(status)

    @pytest.mark.parametrize("status", [200, 400, 401, 403, 404])
    def test_non_retryable_statuses(self, status):
        assert not should_retry_http_status(status)

    def test_transient_errors(self):
        """Transient errors should be detected."""
        assert is_transient_error(Exception("Connection timeout"))
        assert is_transient_error(Exception("Request timed out"))
        assert is_transient_error(Exception("model is loading"))
        assert is_transient_error(Exception("HTTP 503 Service Unavailable"))

    def test_permanent_errors(self):
        assert not is_transient_error(Exception("Invalid API key"))
        assert not is_transient_error(Exception("404 Not Found"))
