"""Repository identity used as the context cache key."""

import re
from dataclasses import dataclass

UNKNOWN_REPO = "unknown-repo"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_USERINFO_RE = re.compile(r"^[^@/]+@")
_GIT_SUFFIX_RE = re.compile(r"\.git$", re.IGNORECASE)
_SEPARATOR_RE = re.compile(r"[^a-zA-Z0-9]+")


def normalize_repository_url(url: str | None) -> str:
    """Normalize a repository URL into a stable cache key.

    Strips the scheme, any ``user[:token]@`` prefix (which also covers
    ``git@host:`` SSH forms) and a trailing ``.git``; collapses every run of
    non-alphanumeric characters to ``-`` and lowercases the result.

    Examples:
        >>> normalize_repository_url("https://github.com/Acme/Widgets.git")
        'github-com-acme-widgets'
        >>> normalize_repository_url("git@github.com:acme/widgets.git")
        'github-com-acme-widgets'
    """
    if not url or not url.strip():
        return UNKNOWN_REPO

    value = url.strip()
    value = _SCHEME_RE.sub("", value)
    value = _USERINFO_RE.sub("", value)
    value = _GIT_SUFFIX_RE.sub("", value.rstrip("/"))
    value = _SEPARATOR_RE.sub("-", value).strip("-").lower()
    return value or UNKNOWN_REPO


@dataclass(frozen=True)
class RepositoryIdentity:
    """Normalized repository key; also the cache entry's display name."""

    key: str

    @classmethod
    def from_url(cls, url: str | None) -> "RepositoryIdentity":
        return cls(normalize_repository_url(url))

    @property
    def display_name(self) -> str:
        return self.key

    def __str__(self) -> str:
        return self.key
