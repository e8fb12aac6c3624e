"""Repository analysis entities.

This module contains the immutable results of one analysis run:
- FileChange / DiffStats: per-commit diff against the first parent
- CommitRecord: one analyzed commit
- FileStats: cumulative churn for one path (hotspot entry)
- RepoInfo / RemoteInfo: repository metadata
- RepositoryReport: aggregate root read by the context builder
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class ChangeType(Enum):
    """Kind of change applied to a file by a commit."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"
    RENAME = "rename"
    COPY = "copy"


@dataclass(frozen=True)
class FileChange:
    """Single file difference between a commit and its first parent.

    Attributes:
        change_type: Kind of change
        old_path: Path before the change (None for additions)
        new_path: Path after the change (None for deletions)
        lines_added: Added lines summed over all hunks
        lines_deleted: Deleted lines summed over all hunks
        patch: Bounded unified-diff snippet, when patches are collected
    """

    change_type: ChangeType
    old_path: str | None
    new_path: str | None
    lines_added: int = 0
    lines_deleted: int = 0
    patch: str | None = None

    @property
    def path(self) -> str | None:
        """Canonical path: new path, falling back to old path for deletions."""
        for candidate in (self.new_path, self.old_path):
            if candidate and candidate.strip():
                return candidate
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.change_type.value,
            "old_path": self.old_path,
            "new_path": self.new_path,
            "lines_added": self.lines_added,
            "lines_deleted": self.lines_deleted,
            "patch": self.patch,
        }


@dataclass(frozen=True)
class DiffStats:
    """Commit-wide diff totals.

    Totals always cover every file difference of the commit, even when the
    retained list of FileChange entries was truncated.
    """

    files_changed: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def lines_total(self) -> int:
        return self.lines_added + self.lines_deleted

    def to_dict(self) -> dict[str, int]:
        return {
            "files_changed": self.files_changed,
            "lines_added": self.lines_added,
            "lines_deleted": self.lines_deleted,
            "lines_total": self.lines_total,
        }


@dataclass(frozen=True)
class Signature:
    """Author or committer identity with timestamp."""

    name: str
    email: str
    when: datetime

    def __post_init__(self) -> None:
        # Normalize to aware UTC so timestamps compare and serialize uniformly
        if self.when.tzinfo is None:
            object.__setattr__(self, "when", self.when.replace(tzinfo=UTC))
        else:
            object.__setattr__(self, "when", self.when.astimezone(UTC))


@dataclass(frozen=True)
class CommitRecord:
    """One analyzed commit.

    Attributes:
        commit_id: Full commit hash
        short_id: First 8 characters of the hash
        author: Author signature
        committer: Committer signature
        short_message: First line of the message
        full_message: Complete commit message
        parent_ids: Parent hashes, first parent first
        stats: Diff totals against the first parent
        changes: Retained file changes (bounded by max_changed_files)
    """

    commit_id: str
    short_id: str
    author: Signature
    committer: Signature
    short_message: str
    full_message: str
    parent_ids: tuple[str, ...] = ()
    stats: DiffStats = field(default_factory=DiffStats)
    changes: tuple[FileChange, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parent_ids

    @property
    def is_merge(self) -> bool:
        return len(self.parent_ids) > 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.commit_id,
            "short_id": self.short_id,
            "author": {
                "name": self.author.name,
                "email": self.author.email,
                "when": self.author.when.isoformat(),
            },
            "committer": {
                "name": self.committer.name,
                "email": self.committer.email,
                "when": self.committer.when.isoformat(),
            },
            "short_message": self.short_message,
            "parents": list(self.parent_ids),
            "stats": self.stats.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass(frozen=True)
class FileStats:
    """Cumulative churn for one path across all analyzed commits.

    Attributes:
        path: Repository-relative path
        commits: Number of commits touching the path
        lines_added: Total added lines
        lines_deleted: Total deleted lines
    """

    path: str
    commits: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def churn(self) -> int:
        """Churn score used for ranking: added plus deleted lines."""
        return self.lines_added + self.lines_deleted

    def record(self, change: FileChange) -> "FileStats":
        """Return a copy that also accounts for ``change``."""
        return replace(
            self,
            commits=self.commits + 1,
            lines_added=self.lines_added + change.lines_added,
            lines_deleted=self.lines_deleted + change.lines_deleted,
        )


@dataclass(frozen=True)
class RemoteInfo:
    """Configured remote and its URLs."""

    name: str
    urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class RepoInfo:
    """Repository metadata captured at analysis time.

    Attributes:
        url: Repository URL as given by the caller
        branch: Checked-out branch (None when detached)
        workdir: Local working tree path
        head_commit: HEAD commit hash
        head_message: HEAD short message
        head_time: HEAD commit time (UTC)
    """

    url: str
    branch: str | None = None
    workdir: str | None = None
    head_commit: str | None = None
    head_message: str | None = None
    head_time: datetime | None = None


@dataclass(frozen=True)
class RepositoryReport:
    """Aggregate root of one analysis run.

    Built once by RepositoryAnalyzer and only read afterwards. ``file_stats``
    is exposed as a read-only mapping whose iteration order is the order in
    which paths were first seen (newest commit first).
    """

    repo: RepoInfo
    remotes: tuple[RemoteInfo, ...] = ()
    branches: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    files: tuple[str, ...] = ()
    commits: tuple[CommitRecord, ...] = ()
    file_stats: Mapping[str, FileStats] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not isinstance(self.file_stats, MappingProxyType):
            object.__setattr__(self, "file_stats", MappingProxyType(dict(self.file_stats)))

    def hotspots(self, limit: int | None = None) -> list[FileStats]:
        """Return file stats ranked by descending churn."""
        from onboarder.analyzers.hotspots import rank_hotspots

        ranked = rank_hotspots(self.file_stats)
        return ranked[:limit] if limit else ranked
