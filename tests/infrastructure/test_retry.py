"""
Backoff retry tests

Covers the attempt bound, the exponential delay schedule, the terminal-error
short circuit and cancellation of with_retry().
"""

import threading

import pytest
from unittest.mock import patch, MagicMock

from casejudge_core.infrastructure.model_clients.base import (
    AuthenticationError,
    BadRequestError,
    GatewayTimeoutError,
    RateLimitError,
)
from casejudge_core.infrastructure.retry import (
    RetryCancelledError,
    RetryExhaustedError,
    backoff_delay,
    is_retryable,
    with_retry,
)


class TestBackoffDelay:
    def test_doubles_per_attempt(self):
        assert backoff_delay(1, 1.0) == 1.0
        assert backoff_delay(2, 1.0) == 2.0
        assert backoff_delay(3, 1.0) == 4.0

    def test_capped_at_max_delay(self):
        assert backoff_delay(10, 1.0, max_delay=30.0) == 30.0


class TestIsRetryable:
    def test_gateway_flags(self):
        assert is_retryable(RateLimitError("slow down", 429)) is True
        assert is_retryable(GatewayTimeoutError("timed out")) is True
        assert is_retryable(BadRequestError("bad", 400)) is False
        assert is_retryable(AuthenticationError("denied", 401)) is False

    def test_message_classification(self):
        assert is_retryable(RuntimeError("connection reset by peer")) is True
        assert is_retryable(RuntimeError("401 Unauthorized")) is False
        assert is_retryable(RuntimeError("Bad Request: missing field")) is False
        assert is_retryable(RuntimeError("Invalid API key")) is False


class TestWithRetry:
    """with_retry() behavior"""

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_success_on_first_attempt(self, mock_sleep):
        """Returns the value without retrying"""
        fn = MagicMock(return_value="ok")

        assert with_retry(fn) == "ok"
        fn.assert_called_once()
        mock_sleep.assert_not_called()

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_success_after_two_failures(self, mock_sleep):
        """Two transient failures, then success on the third attempt"""
        fn = MagicMock(side_effect=[GatewayTimeoutError("1"), RateLimitError("2", 429), "ok"])

        assert with_retry(fn, max_attempts=3, base_delay=1.0) == "ok"
        assert fn.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_exhausted_after_max_attempts(self, mock_sleep):
        """Every attempt fails: exactly max_attempts calls, last error kept"""
        final = GatewayTimeoutError("final")
        fn = MagicMock(side_effect=[GatewayTimeoutError("1"), final])

        with pytest.raises(RetryExhaustedError, match="Operation failed after 2 attempts") as exc_info:
            with_retry(fn, max_attempts=2)

        assert fn.call_count == 2
        assert exc_info.value.attempts == 2
        assert exc_info.value.last_error is final
        assert exc_info.value.__cause__ is final
        # No wait after the last attempt
        assert mock_sleep.call_count == 1

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_delays_capped(self, mock_sleep):
        fn = MagicMock(side_effect=GatewayTimeoutError("down"))

        with pytest.raises(RetryExhaustedError):
            with_retry(fn, max_attempts=4, base_delay=2.0, max_delay=5.0)

        assert [c.args[0] for c in mock_sleep.call_args_list] == [2.0, 4.0, 5.0]

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_terminal_error_short_circuits(self, mock_sleep):
        """A terminal error is raised unchanged after a single call"""
        error = BadRequestError("400 Bad Request", 400)
        fn = MagicMock(side_effect=error)

        with pytest.raises(BadRequestError) as exc_info:
            with_retry(fn, max_attempts=5)

        assert exc_info.value is error
        fn.assert_called_once()
        mock_sleep.assert_not_called()

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_custom_classifier(self, mock_sleep):
        fn = MagicMock(side_effect=TypeError("not retryable"))

        with pytest.raises(TypeError):
            with_retry(fn, max_attempts=3, classify=lambda e: not isinstance(e, TypeError))

        fn.assert_called_once()

    def test_zero_attempts_raises_value_error(self):
        fn = MagicMock(return_value="ok")

        with pytest.raises(ValueError, match="max_attempts must be at least 1"):
            with_retry(fn, max_attempts=0)

        fn.assert_not_called()


class TestCancellation:
    def test_cancelled_before_first_attempt(self):
        cancel = threading.Event()
        cancel.set()
        fn = MagicMock(return_value="ok")

        with pytest.raises(RetryCancelledError):
            with_retry(fn, cancel_event=cancel)

        fn.assert_not_called()

    def test_cancel_interrupts_wait(self):
        """Setting the event during the backoff wait stops further attempts"""
        cancel = threading.Event()

        def fail_and_cancel():
            cancel.set()
            raise GatewayTimeoutError("timed out")

        fn = MagicMock(side_effect=fail_and_cancel)

        with pytest.raises(RetryCancelledError):
            with_retry(fn, max_attempts=3, base_delay=10.0, cancel_event=cancel)

        fn.assert_called_once()
