"""Repository context cache.

- identity: URL normalization into a stable cache key
- store: cache backends (Gemini cached contents, in-memory)
- context_cache: TTL-aware lookup/create/ensure
"""

from onboarder.cache.context_cache import ContextCache
from onboarder.cache.identity import RepositoryIdentity, normalize_repository_url
from onboarder.cache.store import CachedContent, CacheStore, GeminiCacheStore, InMemoryCacheStore

__all__ = [
    "CacheStore",
    "CachedContent",
    "ContextCache",
    "GeminiCacheStore",
    "InMemoryCacheStore",
    "RepositoryIdentity",
    "normalize_repository_url",
]
