"""Retrying wrapper around generation calls.

Failures are classified before any retry decision:

- rate limit (429, "rate limit", "quota exceeded") and authentication
  (401, "unauthorized", "invalid api key", "authentication") errors are
  raised at once, since retrying only burns quota
- cancellation is raised at once
- everything else is transient and retried with capped exponential backoff

Backoff delay for attempt ``n`` (0-based) is
``min(initial_delay * multiplier ** n, max_delay)``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

import litellm

from onboarder.config import RetryConfig
from onboarder.errors import ErrorKind, OnboarderError
from onboarder.llm.client import GenerationOptions, Generator
from onboarder.utils.cancellation import CancelToken
from onboarder.utils.tokens import describe_size

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("429", "rate limit", "quota exceeded")
AUTH_MARKERS = ("401", "unauthorized", "invalid api key", "authentication")


def classify_error(error: BaseException) -> ErrorKind:
    """Map a generation failure to an ErrorKind.

    LiteLLM exception types are checked first, then the message text.
    """
    if isinstance(error, OnboarderError):
        return error.kind
    if isinstance(error, litellm.exceptions.RateLimitError):
        return ErrorKind.RATE_LIMIT
    if isinstance(error, litellm.exceptions.AuthenticationError):
        return ErrorKind.AUTH

    message = str(error).lower()
    if any(marker in message for marker in RATE_LIMIT_MARKERS):
        return ErrorKind.RATE_LIMIT
    if any(marker in message for marker in AUTH_MARKERS):
        return ErrorKind.AUTH
    return ErrorKind.TRANSIENT


@dataclass(frozen=True)
class RetryPolicy:
    """Retry parameters (delays in milliseconds)."""

    max_attempts: int = 3
    initial_delay_ms: int = 1000
    multiplier: float = 2.0
    max_delay_ms: int = 30000

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            initial_delay_ms=config.initial_delay_ms,
            multiplier=config.multiplier,
            max_delay_ms=config.max_delay_ms,
        )

    def backoff_delay_ms(self, attempt: int) -> int:
        """Delay before retrying after 0-based ``attempt`` failed."""
        try:
            delay = self.initial_delay_ms * self.multiplier**attempt
        except OverflowError:
            return self.max_delay_ms
        return int(min(delay, self.max_delay_ms))


class ResilientApiClient:
    """Generation calls with error classification, backoff and cancellation.

    Usage:
        api = ResilientApiClient(create_client(config.llm), RetryPolicy.from_config(config.retry))
        text = api.call(prompt, GenerationOptions(cached_content=handle))
    """

    def __init__(
        self,
        client: Generator,
        policy: RetryPolicy | None = None,
        cancel: CancelToken | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            client: Underlying generation client
            policy: Retry parameters
            cancel: Run-wide cancellation token
            sleep: Backoff sleep in seconds (defaults to the token's
                interruptible sleep)
        """
        self.client = client
        self.policy = policy or RetryPolicy()
        self.cancel = cancel or CancelToken()
        self._sleep = sleep or self.cancel.sleep

    def call(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Send ``prompt`` and return the response text.

        Raises:
            OnboarderError: RATE_LIMIT or AUTH immediately; CANCELLED when
                interrupted; PARSE_FAILURE for an empty response;
                GENERATION_FAILED once attempts are exhausted
        """
        options = options or GenerationOptions()
        logger.info("Sending prompt: %s", describe_size(prompt))

        last_error: BaseException | None = None
        for attempt in range(self.policy.max_attempts):
            self.cancel.raise_if_cancelled("generation")
            call_options = options
            remaining = self.cancel.remaining()
            if remaining is not None:
                call_options = replace(options, timeout=remaining)

            try:
                response = self.client.generate(prompt, call_options)
            except Exception as e:
                kind = classify_error(e)
                if kind is not ErrorKind.TRANSIENT:
                    if isinstance(e, OnboarderError):
                        raise
                    logger.error("Generation failed (%s), not retrying: %s", kind.value, e)
                    raise OnboarderError(kind, f"Generation refused ({kind.value}): {e}", e) from e

                last_error = e
                if attempt + 1 >= self.policy.max_attempts:
                    break

                delay_ms = self.policy.backoff_delay_ms(attempt)
                logger.warning(
                    "Generation attempt %d/%d failed: %s; retrying in %d ms",
                    attempt + 1,
                    self.policy.max_attempts,
                    e,
                    delay_ms,
                )
                self._sleep(delay_ms / 1000)
                continue

            if not response.content or not response.content.strip():
                raise OnboarderError(ErrorKind.PARSE_FAILURE, "Generation returned an empty response")

            logger.info(
                "Received response: %d chars (attempt %d/%d)",
                len(response.content),
                attempt + 1,
                self.policy.max_attempts,
            )
            return response.content

        raise OnboarderError(
            ErrorKind.GENERATION_FAILED,
            f"Failed to call API after {self.policy.max_attempts} attempts: {last_error}",
            last_error,
        )
