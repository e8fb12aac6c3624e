"""Unit tests for the retrying generation client."""

import litellm
import pytest

from onboarder.config import RetryConfig
from onboarder.errors import ErrorKind, OnboarderError
from onboarder.llm.client import GenerationOptions
from onboarder.llm.resilient import ResilientApiClient, RetryPolicy, classify_error
from onboarder.utils.cancellation import CancelToken
from tests.fixtures import FakeGenerator


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class TestRetryPolicy:
    """Tests for RetryPolicy backoff."""

    def test_backoff_sequence_is_capped(self) -> None:
        """Test delays double from 1000 ms and cap at 30000 ms."""
        policy = RetryPolicy(initial_delay_ms=1000, multiplier=2.0, max_delay_ms=30000)

        delays = [policy.backoff_delay_ms(attempt) for attempt in range(7)]

        assert delays == [1000, 2000, 4000, 8000, 16000, 30000, 30000]

    def test_huge_attempt_does_not_overflow(self) -> None:
        """Test very large attempt numbers return the cap."""
        policy = RetryPolicy(multiplier=10.0, max_delay_ms=5000)

        assert policy.backoff_delay_ms(100_000) == 5000

    def test_from_config(self) -> None:
        """Test policy fields are copied from RetryConfig."""
        policy = RetryPolicy.from_config(RetryConfig(max_attempts=5, initial_delay_ms=200, multiplier=3.0, max_delay_ms=900))

        assert policy == RetryPolicy(max_attempts=5, initial_delay_ms=200, multiplier=3.0, max_delay_ms=900)


class TestClassifyError:
    """Tests for classify_error."""

    @pytest.mark.parametrize(
        "message",
        ["HTTP 429 Too Many Requests", "Rate limit reached", "Quota exceeded for project"],
    )
    def test_rate_limit_messages(self, message: str) -> None:
        """Test rate limit markers in messages."""
        assert classify_error(RuntimeError(message)) is ErrorKind.RATE_LIMIT

    @pytest.mark.parametrize(
        "message",
        ["401 Unauthorized", "Invalid API key provided", "Authentication failed"],
    )
    def test_auth_messages(self, message: str) -> None:
        """Test authentication markers in messages."""
        assert classify_error(RuntimeError(message)) is ErrorKind.AUTH

    def test_litellm_rate_limit_type(self) -> None:
        """Test LiteLLM's RateLimitError is recognized by type."""
        error = litellm.exceptions.RateLimitError(message="slow down", llm_provider="gemini", model="gemini-2.5-flash")

        assert classify_error(error) is ErrorKind.RATE_LIMIT

    def test_onboarder_error_keeps_kind(self) -> None:
        """Test an OnboarderError is classified by its own kind."""
        assert classify_error(OnboarderError(ErrorKind.CANCELLED, "stop")) is ErrorKind.CANCELLED

    def test_everything_else_is_transient(self) -> None:
        """Test unknown failures are transient."""
        assert classify_error(ConnectionError("connection reset")) is ErrorKind.TRANSIENT


class TestResilientApiClient:
    """Tests for ResilientApiClient.call."""

    def test_success_first_attempt(self) -> None:
        """Test a successful call returns the content without sleeping."""
        generator = FakeGenerator(["# Document"])
        sleep = RecordingSleep()

        result = ResilientApiClient(generator, sleep=sleep).call("prompt")

        assert result == "# Document"
        assert len(generator.calls) == 1
        assert sleep.delays == []

    def test_passes_options(self) -> None:
        """Test generation options reach the underlying client."""
        generator = FakeGenerator(["ok"])
        options = GenerationOptions(cached_content="cachedContents/abc", max_tokens=100)

        ResilientApiClient(generator).call("prompt", options)

        assert generator.calls[0][1] == options

    def test_rate_limit_never_retried(self) -> None:
        """Test a 429 failure invokes the client exactly once."""
        generator = FakeGenerator([RuntimeError("429 Resource exhausted")])
        sleep = RecordingSleep()
        client = ResilientApiClient(generator, RetryPolicy(max_attempts=5), sleep=sleep)

        with pytest.raises(OnboarderError) as exc_info:
            client.call("prompt")

        assert exc_info.value.kind is ErrorKind.RATE_LIMIT
        assert len(generator.calls) == 1
        assert sleep.delays == []

    def test_auth_never_retried(self) -> None:
        """Test an authentication failure invokes the client exactly once."""
        generator = FakeGenerator([RuntimeError("Invalid API key")])
        client = ResilientApiClient(generator, RetryPolicy(max_attempts=5), sleep=RecordingSleep())

        with pytest.raises(OnboarderError) as exc_info:
            client.call("prompt")

        assert exc_info.value.kind is ErrorKind.AUTH
        assert len(generator.calls) == 1

    def test_transient_then_success(self) -> None:
        """Test transient failures are retried with backoff."""
        generator = FakeGenerator([ConnectionError("reset"), TimeoutError("slow"), "done"])
        sleep = RecordingSleep()
        client = ResilientApiClient(generator, RetryPolicy(max_attempts=3), sleep=sleep)

        assert client.call("prompt") == "done"
        assert len(generator.calls) == 3
        assert sleep.delays == [1.0, 2.0]

    def test_exhaustion_wraps_last_error(self) -> None:
        """Test exhausting attempts raises GENERATION_FAILED with the last cause."""
        last = ConnectionError("still down")
        generator = FakeGenerator([ConnectionError("down"), last])
        client = ResilientApiClient(generator, RetryPolicy(max_attempts=3), sleep=RecordingSleep())

        with pytest.raises(OnboarderError) as exc_info:
            client.call("prompt")

        assert exc_info.value.kind is ErrorKind.GENERATION_FAILED
        assert exc_info.value.cause is last
        assert "after 3 attempts" in exc_info.value.message
        assert len(generator.calls) == 3

    def test_empty_response_is_parse_failure(self) -> None:
        """Test a blank response raises PARSE_FAILURE without retrying."""
        generator = FakeGenerator(["   "])
        client = ResilientApiClient(generator, RetryPolicy(max_attempts=3), sleep=RecordingSleep())

        with pytest.raises(OnboarderError) as exc_info:
            client.call("prompt")

        assert exc_info.value.kind is ErrorKind.PARSE_FAILURE
        assert len(generator.calls) == 1

    def test_cancelled_before_call(self) -> None:
        """Test a cancelled token stops the call before generation."""
        token = CancelToken()
        token.cancel()
        generator = FakeGenerator(["unused"])

        with pytest.raises(OnboarderError) as exc_info:
            ResilientApiClient(generator, cancel=token).call("prompt")

        assert exc_info.value.kind is ErrorKind.CANCELLED
        assert generator.calls == []

    def test_interrupted_backoff_is_not_resumed(self) -> None:
        """Test cancellation during backoff surfaces as an error."""
        token = CancelToken()
        generator = FakeGenerator([ConnectionError("reset"), "never returned"])

        def cancelling_sleep(seconds: float) -> None:
            token.cancel()
            token.sleep(seconds)

        client = ResilientApiClient(generator, RetryPolicy(max_attempts=3), cancel=token, sleep=cancelling_sleep)

        with pytest.raises(OnboarderError) as exc_info:
            client.call("prompt")

        assert exc_info.value.kind is ErrorKind.CANCELLED
        assert len(generator.calls) == 1

    def test_deadline_passed_as_timeout(self) -> None:
        """Test the remaining deadline is forwarded as the request timeout."""
        token = CancelToken(timeout=120, clock=lambda: 0.0)
        generator = FakeGenerator(["ok"])

        ResilientApiClient(generator, cancel=token).call("prompt")

        assert generator.calls[0][1].timeout == 120
