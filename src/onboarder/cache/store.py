"""Cache store backends.

A store holds large context payloads server-side and hands back an opaque
name that generation calls can reference instead of resending the payload.

- GeminiCacheStore: Gemini cached contents via google-genai
- InMemoryCacheStore: process-local store for tests and offline runs
"""

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from onboarder.errors import ErrorKind, OnboarderError
from onboarder.utils.tokens import estimate_tokens

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class CachedContent:
    """Metadata of one stored context payload.

    Attributes:
        name: Opaque handle passed to generation calls
        display_name: Repository identity the entry belongs to
        model: Model the entry was created for
        create_time: Creation time (UTC)
        expire_time: Expiry time (UTC); None if the store did not report one
    """

    name: str
    display_name: str
    model: str | None = None
    create_time: datetime | None = None
    expire_time: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        """Return True while ``now`` is before the expiry time."""
        return self.expire_time is None or now < self.expire_time


class CacheStore(Protocol):
    """External store holding cached context payloads."""

    def create(self, model: str, content: str, display_name: str, ttl: timedelta) -> CachedContent:
        """Store ``content`` and return its metadata.

        Raises:
            OnboarderError: CACHE_UNAVAILABLE if the store rejects the payload
        """
        ...

    def list_active(self) -> list[CachedContent]:
        """Return the entries the store still holds.

        Entries past their expiry may still be listed until the store
        garbage-collects them; callers check ``is_active`` themselves.
        """
        ...

    def delete(self, name: str) -> None:
        """Remove an entry. Deleting an unknown name is not an error."""
        ...


class InMemoryCacheStore:
    """Process-local cache store.

    Mirrors the contract of a remote store, including a minimum payload size
    below which creation is rejected.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        min_tokens: int = 0,
    ) -> None:
        """Initialize the store.

        Args:
            clock: Source of "now", injectable for tests
            min_tokens: Reject payloads estimated below this many tokens
        """
        self._clock = clock
        self._min_tokens = min_tokens
        self._entries: dict[str, tuple[CachedContent, str]] = {}
        self._lock = threading.Lock()

    def create(self, model: str, content: str, display_name: str, ttl: timedelta) -> CachedContent:
        tokens = estimate_tokens(content)
        if tokens < self._min_tokens:
            raise OnboarderError(
                ErrorKind.CACHE_UNAVAILABLE,
                f"Payload of ~{tokens} tokens is below the store minimum of {self._min_tokens}",
            )

        now = self._clock()
        entry = CachedContent(
            name=f"cachedContents/{uuid.uuid4().hex}",
            display_name=display_name,
            model=model,
            create_time=now,
            expire_time=now + ttl,
        )
        with self._lock:
            self._entries[entry.name] = (entry, content)
        return entry

    def list_active(self) -> list[CachedContent]:
        with self._lock:
            return [entry for entry, _ in self._entries.values()]

    def delete(self, name: str) -> None:
        with self._lock:
            self._entries.pop(name, None)

    def content(self, name: str) -> str | None:
        """Return the stored payload for ``name``."""
        with self._lock:
            stored = self._entries.get(name)
        return stored[1] if stored else None


# Transport failures never reach the SDK error hierarchy.
TRANSPORT_ERRORS = (httpx.HTTPError, OSError)


def _from_sdk(cache: Any) -> CachedContent:
    return CachedContent(
        name=cache.name,
        display_name=cache.display_name or "",
        model=cache.model,
        create_time=cache.create_time,
        expire_time=cache.expire_time,
    )


class GeminiCacheStore:
    """Gemini cached contents (``client.caches``)."""

    def __init__(self, api_key: str | None, client: genai.Client | None = None) -> None:
        """Initialize the store.

        Args:
            api_key: Gemini API key
            client: Pre-built client (tests inject a mock)
        """
        if client is None and not api_key:
            raise OnboarderError(ErrorKind.CACHE_UNAVAILABLE, "Gemini API key is not configured")
        self._client = client or genai.Client(api_key=api_key)

    def create(self, model: str, content: str, display_name: str, ttl: timedelta) -> CachedContent:
        try:
            cache = self._client.caches.create(
                model=model,
                config=types.CreateCachedContentConfig(
                    display_name=display_name,
                    contents=[types.Content(role="user", parts=[types.Part.from_text(text=content)])],
                    ttl=f"{int(ttl.total_seconds())}s",
                ),
            )
        except genai_errors.APIError as e:
            raise OnboarderError(
                ErrorKind.CACHE_UNAVAILABLE, f"Gemini rejected cache creation: {e}", e
            ) from e
        except TRANSPORT_ERRORS as e:
            raise OnboarderError(
                ErrorKind.CACHE_UNAVAILABLE, f"Gemini cache creation failed: {e}", e
            ) from e

        logger.debug("Created Gemini cache %s (expires %s)", cache.name, cache.expire_time)
        return _from_sdk(cache)

    def list_active(self) -> list[CachedContent]:
        try:
            return [_from_sdk(cache) for cache in self._client.caches.list()]
        except (genai_errors.APIError, *TRANSPORT_ERRORS) as e:
            raise OnboarderError(ErrorKind.CACHE_UNAVAILABLE, f"Failed to list Gemini caches: {e}", e) from e

    def delete(self, name: str) -> None:
        try:
            self._client.caches.delete(name=name)
        except genai_errors.ClientError as e:
            if e.code == 404:
                return
            raise OnboarderError(ErrorKind.CACHE_UNAVAILABLE, f"Failed to delete cache {name}: {e}", e) from e
        except (genai_errors.APIError, *TRANSPORT_ERRORS) as e:
            raise OnboarderError(ErrorKind.CACHE_UNAVAILABLE, f"Failed to delete cache {name}: {e}", e) from e
