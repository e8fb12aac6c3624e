"""Commit history analysis.

Walks commits newest first and turns each into a CommitRecord with diff
statistics against its first parent. Merge commits are compared with the
first parent only.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from onboarder.config import AnalysisConfig
from onboarder.errors import ErrorKind, OnboarderError
from onboarder.models.report import CommitRecord, DiffStats, FileChange, Signature
from onboarder.vcs.diff import DiffProvider

logger = logging.getLogger(__name__)

SHORT_ID_LENGTH = 8
TRUNCATION_MARKER = "\n...[truncated]...\n"


def truncate_patch(patch: str, max_chars: int) -> str:
    """Cut ``patch`` to ``max_chars`` and append the truncation marker.

    ``max_chars <= 0`` disables truncation.
    """
    if max_chars <= 0 or len(patch) <= max_chars:
        return patch
    return patch[:max_chars] + TRUNCATION_MARKER


def _signature(actor: Any, when: datetime) -> Signature:
    return Signature(name=actor.name or "", email=actor.email or "", when=when)


def _text(value: str | bytes) -> str:
    # GitPython returns bytes for messages in undeclared encodings
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class CommitHistoryAnalyzer:
    """Builds CommitRecords from a commit iterable.

    Commits are GitPython ``Commit`` objects or anything exposing the same
    attributes (hexsha, author, committer, authored_datetime,
    committed_datetime, summary, message, parents).
    """

    def __init__(self, diff_provider: DiffProvider, config: AnalysisConfig | None = None) -> None:
        """Initialize the analyzer.

        Args:
            diff_provider: First-parent diff source
            config: Commit/changed-file limits and patch settings
        """
        self.diff_provider = diff_provider
        self.config = config or AnalysisConfig()

    def analyze(self, commits: Iterable[Any]) -> list[CommitRecord]:
        """Analyze up to ``max_commits`` commits (0 = all).

        Raises:
            OnboarderError: ANALYSIS on any git or I/O failure
        """
        records: list[CommitRecord] = []
        limit = self.config.max_commits

        try:
            for commit in commits:
                if limit and len(records) >= limit:
                    break
                records.append(self.record(commit))
        except OnboarderError:
            raise
        except Exception as e:
            raise OnboarderError(ErrorKind.ANALYSIS, f"Commit history walk failed: {e}", e) from e

        logger.debug("Analyzed %d commits", len(records))
        return records

    def record(self, commit: Any) -> CommitRecord:
        """Build the CommitRecord for a single commit."""
        parents = tuple(commit.parents)
        stats = DiffStats()
        changes: tuple[FileChange, ...] = ()

        if parents:
            stats, changes = self._diff_first_parent(parents[0], commit)

        return CommitRecord(
            commit_id=commit.hexsha,
            short_id=commit.hexsha[:SHORT_ID_LENGTH],
            author=_signature(commit.author, commit.authored_datetime),
            committer=_signature(commit.committer, commit.committed_datetime),
            short_message=_text(commit.summary),
            full_message=_text(commit.message),
            parent_ids=tuple(p.hexsha for p in parents),
            stats=stats,
            changes=changes,
        )

    def _diff_first_parent(self, parent: Any, commit: Any) -> tuple[DiffStats, tuple[FileChange, ...]]:
        diffs = self.diff_provider.diff(parent, commit, include_patch=self.config.include_patch)

        # Totals cover every diff; only the retained list is capped
        stats = DiffStats(
            files_changed=len(diffs),
            lines_added=sum(d.lines_added for d in diffs),
            lines_deleted=sum(d.lines_deleted for d in diffs),
        )

        kept = diffs
        if self.config.max_changed_files and len(diffs) > self.config.max_changed_files:
            kept = diffs[: self.config.max_changed_files]
            logger.debug(
                "Commit %s: keeping %d of %d file changes",
                commit.hexsha[:SHORT_ID_LENGTH],
                len(kept),
                len(diffs),
            )

        return stats, tuple(self._bound_patch(change) for change in kept)

    def _bound_patch(self, change: FileChange) -> FileChange:
        if change.patch is None:
            return change
        if not self.config.include_patch:
            return replace(change, patch=None)
        return replace(change, patch=truncate_patch(change.patch, self.config.max_patch_chars))
