"""Repository analyzers.

- commits: commit history with first-parent diff statistics
- hotspots: per-file churn aggregation and ranking
- metadata: repository info, remotes, refs, test-path filtering
- report: staged analyzer producing the RepositoryReport
"""

from onboarder.analyzers.commits import CommitHistoryAnalyzer, truncate_patch
from onboarder.analyzers.hotspots import aggregate_hotspots, rank_hotspots
from onboarder.analyzers.metadata import filter_test_paths, is_test_path
from onboarder.analyzers.report import RepositoryAnalyzer

__all__ = [
    "CommitHistoryAnalyzer",
    "RepositoryAnalyzer",
    "aggregate_hotspots",
    "filter_test_paths",
    "is_test_path",
    "rank_hotspots",
    "truncate_patch",
]
