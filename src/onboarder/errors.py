"""Error taxonomy for repo-onboarder.

A single tagged exception type is raised everywhere. Callers switch on
``error.kind`` instead of catching a hierarchy of subclasses:

- REPO_ACCESS: clone/fetch/checkout failure (fatal)
- ANALYSIS: commit walk or diff failure (fatal)
- CACHE_UNAVAILABLE: cache store disabled or rejected creation (recoverable)
- RATE_LIMIT / AUTH: generation refused, never retried
- TRANSIENT: generation failure that may succeed on retry
- GENERATION_FAILED: retries exhausted
- PARSE_FAILURE: generation succeeded but produced no usable content
- CANCELLED: caller cancelled the run or its deadline passed
"""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Category of an OnboarderError."""

    REPO_ACCESS = "repo_access"
    ANALYSIS = "analysis"
    CACHE_UNAVAILABLE = "cache_unavailable"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    TRANSIENT = "transient"
    GENERATION_FAILED = "generation_failed"
    PARSE_FAILURE = "parse_failure"
    CANCELLED = "cancelled"


class OnboarderError(Exception):
    """Exception raised by every onboarder component.

    Attributes:
        kind: Error category
        message: Human-readable description
        cause: Underlying exception, if any
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause

    @property
    def retryable(self) -> bool:
        """Return True if the failed call may be attempted again."""
        return self.kind is ErrorKind.TRANSIENT

    @property
    def recoverable(self) -> bool:
        """Return True if the run can continue in degraded mode."""
        return self.kind is ErrorKind.CACHE_UNAVAILABLE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "cause": repr(self.cause) if self.cause else None,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"
