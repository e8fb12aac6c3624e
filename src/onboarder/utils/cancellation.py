"""Cooperative cancellation for blocking calls.

A CancelToken is created once per run and handed to every component that
blocks: cache store I/O, generation calls and retry backoff. It trips either
when ``cancel()`` is called (for example from a signal handler) or when the
optional deadline passes.
"""

import threading
import time
from collections.abc import Callable

from onboarder.errors import ErrorKind, OnboarderError


class CancelToken:
    """Cancellation signal with an optional deadline.

    Usage:
        token = CancelToken(timeout=600)
        token.sleep(2.0)   # raises OnboarderError(CANCELLED) if interrupted
    """

    def __init__(
        self,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the token.

        Args:
            timeout: Seconds until the token trips on its own (None = never)
            clock: Monotonic clock, injectable for tests
        """
        self._event = threading.Event()
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None

    def cancel(self) -> None:
        """Trip the token. Waiting sleepers wake up immediately."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return True once cancelled or past the deadline."""
        if self._event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(self._deadline - self._clock(), 0.0)

    def raise_if_cancelled(self, operation: str = "operation") -> None:
        """Raise CANCELLED if the token has tripped.

        Args:
            operation: Name of the interrupted operation, used in the message
        """
        if self._event.is_set():
            raise OnboarderError(ErrorKind.CANCELLED, f"{operation} cancelled")
        if self._deadline is not None and self._clock() >= self._deadline:
            raise OnboarderError(ErrorKind.CANCELLED, f"{operation} exceeded deadline")

    def sleep(self, seconds: float) -> None:
        """Block for ``seconds`` unless the token trips first.

        Raises:
            OnboarderError: CANCELLED if interrupted or the deadline is
                reached before the full delay elapses
        """
        self.raise_if_cancelled("backoff")

        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._event.wait(remaining)
            raise OnboarderError(ErrorKind.CANCELLED, "backoff exceeded deadline")

        if self._event.wait(seconds):
            raise OnboarderError(ErrorKind.CANCELLED, "backoff interrupted")
