"""First-parent diff provider backed by GitPython."""

import logging
from typing import Protocol

import git
from git.exc import GitError

from onboarder.errors import ErrorKind, OnboarderError
from onboarder.models.report import ChangeType, FileChange

logger = logging.getLogger(__name__)


class DiffProvider(Protocol):
    """Produces file-level differences between a commit and one parent."""

    def diff(self, parent: git.Commit, commit: git.Commit, include_patch: bool = False) -> list[FileChange]:
        """Return one FileChange per differing file, with full (untruncated) patches."""
        ...


def count_hunk_lines(patch: str) -> tuple[int, int]:
    """Count added and deleted lines in unified-diff hunks.

    Lines before the first ``@@`` header are file headers and are ignored,
    so a deleted line whose content starts with ``--`` is still counted.

    Returns:
        (lines_added, lines_deleted)
    """
    added = deleted = 0
    in_hunk = False
    for line in patch.splitlines():
        if line.startswith("@@"):
            in_hunk = True
            continue
        if not in_hunk:
            continue
        if line.startswith("+"):
            added += 1
        elif line.startswith("-"):
            deleted += 1
    return added, deleted


def _change_type(diff: git.Diff) -> ChangeType:
    if diff.new_file:
        return ChangeType.ADD
    if diff.deleted_file:
        return ChangeType.DELETE
    if diff.copied_file:
        return ChangeType.COPY
    if diff.renamed_file:
        return ChangeType.RENAME
    return ChangeType.MODIFY


def _decode(body: bytes | str | None) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


class GitPythonDiffProvider:
    """Diffs a commit against a parent with rename detection.

    GitPython passes ``-M`` to ``git diff`` so renames surface as a single
    RENAME entry rather than a delete/add pair.
    """

    def diff(self, parent: git.Commit, commit: git.Commit, include_patch: bool = False) -> list[FileChange]:
        try:
            diffs = parent.diff(commit, create_patch=True)
        except (GitError, ValueError) as e:
            raise OnboarderError(
                ErrorKind.ANALYSIS,
                f"Failed to diff {commit.hexsha[:8]} against {parent.hexsha[:8]}",
                e,
            ) from e

        changes: list[FileChange] = []
        for diff in diffs:
            change_type = _change_type(diff)
            old_path = None if change_type is ChangeType.ADD else (diff.a_path or diff.b_path)
            new_path = None if change_type is ChangeType.DELETE else (diff.b_path or diff.a_path)

            body = _decode(diff.diff)
            added, deleted = count_hunk_lines(body)

            patch = None
            if include_patch:
                patch = f"--- {old_path or '/dev/null'}\n+++ {new_path or '/dev/null'}\n{body}"

            changes.append(
                FileChange(
                    change_type=change_type,
                    old_path=old_path,
                    new_path=new_path,
                    lines_added=added,
                    lines_deleted=deleted,
                    patch=patch,
                )
            )

        return changes
