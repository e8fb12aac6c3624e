"""Version-control collaborator (GitPython).

Provides clone/open, fetch/checkout/pull, commit iteration, HEAD file
listing and first-parent diffs. Analysis code depends only on these
read-oriented operations.
"""

from onboarder.vcs.diff import DiffProvider, GitPythonDiffProvider, count_hunk_lines
from onboarder.vcs.repository import (
    Credentials,
    GitRepositoryManager,
    RepositorySession,
    credentials_from_config,
)

__all__ = [
    "Credentials",
    "DiffProvider",
    "GitPythonDiffProvider",
    "GitRepositoryManager",
    "RepositorySession",
    "count_hunk_lines",
    "credentials_from_config",
]
