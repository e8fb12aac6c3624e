"""Hotspot aggregation: per-file churn across analyzed commits."""

import logging
from collections.abc import Iterable, Mapping

from onboarder.models.report import CommitRecord, FileStats

logger = logging.getLogger(__name__)


def aggregate_hotspots(commits: Iterable[CommitRecord]) -> dict[str, FileStats]:
    """Accumulate FileStats for every path touched by ``commits``.

    Each FileChange counts once for its canonical path (new path, falling
    back to the old path for deletions); changes without a path are skipped.
    The returned dict preserves the order in which paths were first seen.
    """
    stats: dict[str, FileStats] = {}
    skipped = 0

    for commit in commits:
        for change in commit.changes:
            path = change.path
            if path is None:
                skipped += 1
                continue
            current = stats.get(path) or FileStats(path=path)
            stats[path] = current.record(change)

    if skipped:
        logger.debug("Skipped %d file changes without a path", skipped)

    return stats


def rank_hotspots(stats: Mapping[str, FileStats]) -> list[FileStats]:
    """Order file stats by descending churn.

    Ties keep discovery order: ``sorted`` is stable, including with
    ``reverse=True``.
    """
    return sorted(stats.values(), key=lambda s: s.churn, reverse=True)
