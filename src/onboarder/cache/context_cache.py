"""TTL cache for repository context payloads.

One cache entry per repository identity. Lookups are expiry-aware: entries
past their TTL are deleted when observed and treated as absent. Creation
failures never raise; callers fall back to embedding the full payload.

Check-then-create is serialized per identity within one process. Two
processes analyzing the same repository at once may still both create an
entry (at-least-once creation); the next lookup keeps the newest entry and
deletes the others.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from onboarder.cache.identity import RepositoryIdentity
from onboarder.cache.store import CachedContent, CacheStore, utc_now
from onboarder.config import CacheConfig
from onboarder.errors import ErrorKind, OnboarderError
from onboarder.utils.cancellation import CancelToken
from onboarder.utils.tokens import estimate_tokens

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


class ContextCache:
    """Expiry-aware cache of context handles keyed by repository identity.

    Usage:
        cache = ContextCache(store, config.cache)
        handle = cache.ensure(identity, payload, model)
        if handle is None:
            ...  # degrade to the full payload
    """

    def __init__(
        self,
        store: CacheStore | None,
        config: CacheConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Backend store; None disables caching
            config: TTL, minimum size and enablement
            clock: Source of "now", injectable for tests
        """
        self.store = store
        self.config = config or CacheConfig()
        self.ttl = timedelta(seconds=self.config.ttl_seconds)
        self._clock = clock
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.store is not None and self.config.enabled

    def _lock_for(self, identity: RepositoryIdentity) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(identity.key, threading.Lock())

    def _delete_quietly(self, store: CacheStore, entry: CachedContent, reason: str) -> None:
        try:
            store.delete(entry.name)
            logger.info("Deleted %s cache entry %s for %s", reason, entry.name, entry.display_name)
        except OnboarderError as e:
            logger.warning("Could not delete %s cache entry %s: %s", reason, entry.name, e.message)

    def lookup(self, identity: RepositoryIdentity) -> str | None:
        """Return the live cache handle for ``identity``, if any.

        Expired matches are deleted; when several live matches exist the
        newest is returned and the rest are deleted. Store errors are
        logged and reported as a miss.
        """
        store = self.store
        if store is None or not self.config.enabled:
            return None

        try:
            entries = store.list_active()
        except OnboarderError as e:
            logger.warning("Cache lookup failed for %s: %s", identity, e.message)
            return None

        now = self._clock()
        live: list[CachedContent] = []
        for entry in entries:
            if entry.display_name != identity.display_name:
                continue
            if entry.is_active(now):
                live.append(entry)
            else:
                self._delete_quietly(store, entry, "expired")

        if not live:
            logger.debug("No live cache entry for %s", identity)
            return None

        live.sort(key=lambda e: e.create_time or _OLDEST, reverse=True)
        canonical, *duplicates = live
        for duplicate in duplicates:
            self._delete_quietly(store, duplicate, "duplicate")

        logger.info("Reusing cached context %s for %s", canonical.name, identity)
        return canonical.name

    def create(self, identity: RepositoryIdentity, payload: str, model: str) -> str | None:
        """Store ``payload`` for ``identity`` and return its handle.

        Returns:
            The new handle, or None if the cache is disabled or the store
            rejected the payload
        """
        store = self.store
        if store is None or not self.config.enabled:
            logger.info("Context cache disabled; using full payload")
            return None

        tokens = estimate_tokens(payload)
        if tokens < self.config.min_tokens:
            logger.warning(
                "Context for %s is ~%d tokens, below the cache minimum of %d; creation may be rejected",
                identity,
                tokens,
                self.config.min_tokens,
            )

        try:
            entry = store.create(model, payload, identity.display_name, self.ttl)
        except OnboarderError as e:
            if e.kind is not ErrorKind.CACHE_UNAVAILABLE:
                raise
            logger.warning("Context cache unavailable for %s: %s", identity, e.message)
            return None

        logger.info(
            "Created cached context %s for %s (~%d tokens, ttl %ss)",
            entry.name,
            identity,
            tokens,
            int(self.ttl.total_seconds()),
        )
        return entry.name

    def ensure(
        self,
        identity: RepositoryIdentity,
        payload: str,
        model: str,
        cancel: CancelToken | None = None,
    ) -> str | None:
        """Return a live handle for ``identity``, creating one on a miss.

        Raises:
            OnboarderError: CANCELLED if ``cancel`` trips before the store is called
        """
        with self._lock_for(identity):
            if cancel is not None:
                cancel.raise_if_cancelled("context cache")
            handle = self.lookup(identity)
            if handle is not None:
                return handle
            if cancel is not None:
                cancel.raise_if_cancelled("context cache")
            return self.create(identity, payload, model)
