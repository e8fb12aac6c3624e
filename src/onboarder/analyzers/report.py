"""Staged repository analysis.

Each stage returns plain values; the final RepositoryReport is assembled
once at the end and never modified afterwards:

1. Metadata (url, branch, HEAD, remotes, refs)
2. File listing at HEAD (test files optionally excluded)
3. Commit history with first-parent diff stats
4. Hotspot aggregation
"""

import logging
from datetime import UTC, datetime

from onboarder.analyzers.commits import CommitHistoryAnalyzer
from onboarder.analyzers.hotspots import aggregate_hotspots
from onboarder.analyzers.metadata import (
    collect_branches,
    collect_remotes,
    collect_repo_info,
    collect_tags,
    filter_test_paths,
)
from onboarder.config import AnalysisConfig
from onboarder.errors import ErrorKind, OnboarderError
from onboarder.models.report import RepositoryReport
from onboarder.vcs.diff import DiffProvider, GitPythonDiffProvider
from onboarder.vcs.repository import RepositorySession

logger = logging.getLogger(__name__)


class RepositoryAnalyzer:
    """Builds the RepositoryReport for one run.

    Usage:
        analyzer = RepositoryAnalyzer(config.analysis)
        report = analyzer.analyze(session, include_tests=False)
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        diff_provider: DiffProvider | None = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.history = CommitHistoryAnalyzer(diff_provider or GitPythonDiffProvider(), self.config)

    def analyze(self, session: RepositorySession, include_tests: bool = False) -> RepositoryReport:
        """Run all analysis stages against an opened repository.

        Args:
            session: Opened and checked-out repository
            include_tests: Keep test-named files in the listing

        Returns:
            Immutable RepositoryReport

        Raises:
            OnboarderError: ANALYSIS if the repository cannot be read
        """
        repo = session.repo
        generated_at = datetime.now(UTC)

        try:
            logger.info("Stage 1: Collecting repository metadata")
            repo_info = collect_repo_info(repo, session.url)
            remotes = collect_remotes(repo)
            branches = collect_branches(repo)
            tags = collect_tags(repo)

            logger.info("Stage 2: Listing files at HEAD")
            all_files = session.list_head_files()
            files = filter_test_paths(all_files, include_tests)
            if len(files) != len(all_files):
                logger.info("Excluded %d test files", len(all_files) - len(files))
        except OnboarderError:
            raise
        except Exception as e:
            raise OnboarderError(ErrorKind.ANALYSIS, f"Failed to read repository metadata: {e}", e) from e

        logger.info("Stage 3: Analyzing commit history (max %s)", self.config.max_commits or "all")
        commits = self.history.analyze(session.iter_commits(self.config.max_commits))

        logger.info("Stage 4: Aggregating hotspots")
        file_stats = aggregate_hotspots(commits)

        logger.info(
            "Analysis complete: %d files, %d commits, %d hotspots",
            len(files),
            len(commits),
            len(file_stats),
        )

        return RepositoryReport(
            repo=repo_info,
            remotes=remotes,
            branches=branches,
            tags=tags,
            files=tuple(files),
            commits=tuple(commits),
            file_stats=file_stats,
            generated_at=generated_at,
        )
