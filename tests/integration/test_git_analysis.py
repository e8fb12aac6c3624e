"""Integration tests for repository analysis against a real git repository.

Uses the three-commit repository from build_hotspot_repo:
root adds a.txt, the second commit reworks a.txt (+5/-2) and adds b.txt,
the third deletes a.txt (8 lines).
"""

from pathlib import Path

import pytest

from onboarder.analyzers.report import RepositoryAnalyzer
from onboarder.config import AnalysisConfig, GitConfig
from onboarder.context.builder import RepositoryContextBuilder
from onboarder.errors import ErrorKind, OnboarderError
from onboarder.models.report import ChangeType, RepositoryReport
from onboarder.vcs.repository import GitRepositoryManager

pytestmark = pytest.mark.integration


@pytest.fixture
def manager(tmp_path: Path) -> GitRepositoryManager:
    return GitRepositoryManager(GitConfig(workdir=str(tmp_path / "work")))


@pytest.fixture
def report(hotspot_repo: Path, manager: GitRepositoryManager) -> RepositoryReport:
    with manager.open(str(hotspot_repo)) as session:
        session.fetch_checkout_pull(None)
        return RepositoryAnalyzer(AnalysisConfig(include_patch=True)).analyze(session)


class TestRepositoryAnalysis:
    """End-to-end analysis of a cloned repository."""

    def test_history_newest_first(self, report: RepositoryReport) -> None:
        """Test commits are listed newest first."""
        assert [c.short_message for c in report.commits] == ["Remove a", "Rework a, add b", "Initial commit"]

    def test_root_commit_has_zero_stats(self, report: RepositoryReport) -> None:
        """Test the root commit is not diffed."""
        root = report.commits[-1]

        assert root.is_root
        assert root.stats.files_changed == 0
        assert root.stats.lines_total == 0

    def test_first_parent_diff_stats(self, report: RepositoryReport) -> None:
        """Test the rework commit counts lines per file."""
        rework = report.commits[1]
        by_path = {c.path: c for c in rework.changes}

        assert rework.stats.files_changed == 2
        assert (by_path["a.txt"].lines_added, by_path["a.txt"].lines_deleted) == (5, 2)
        assert by_path["b.txt"].change_type is ChangeType.ADD
        assert by_path["b.txt"].lines_added == 10

    def test_deletion_attributed_to_old_path(self, report: RepositoryReport) -> None:
        """Test the deleted file keeps its old path."""
        (change,) = report.commits[0].changes

        assert change.change_type is ChangeType.DELETE
        assert change.path == "a.txt"
        assert change.lines_deleted == 8

    def test_hotspots(self, report: RepositoryReport) -> None:
        """Test churn accumulates across commits and ranks a.txt first."""
        a_stats = report.file_stats["a.txt"]

        assert (a_stats.commits, a_stats.lines_added, a_stats.lines_deleted, a_stats.churn) == (2, 5, 10, 15)
        assert report.file_stats["b.txt"].churn == 10
        assert [s.path for s in report.hotspots()] == ["a.txt", "b.txt"]

    def test_files_at_head(self, report: RepositoryReport) -> None:
        """Test the listing reflects HEAD only."""
        assert report.files == ("b.txt", "src/app.py")

    def test_metadata(self, report: RepositoryReport, hotspot_repo: Path) -> None:
        """Test url, HEAD and remotes are captured."""
        assert report.repo.url == str(hotspot_repo)
        assert report.repo.head_message == "Remove a"
        assert report.repo.head_commit == report.commits[0].commit_id
        assert [r.name for r in report.remotes] == ["origin"]

    def test_patches_collected(self, report: RepositoryReport) -> None:
        """Test patches are kept when requested."""
        (change,) = report.commits[0].changes

        assert change.patch is not None
        assert "-a line 1" in change.patch


class TestContextFromRepository:
    """Payload built from a real clone."""

    def test_payload(self, hotspot_repo: Path, manager: GitRepositoryManager) -> None:
        """Test the payload carries hotspots and file content."""
        with manager.open(str(hotspot_repo)) as session:
            session.fetch_checkout_pull(None)
            report = RepositoryAnalyzer().analyze(session)
            payload = RepositoryContextBuilder().build(report, session.root)

        assert "<project_name>origin</project_name>" in payload
        assert '<file path="a.txt" churn_score="15" />' in payload
        assert "b line 10" in payload


class TestRepositoryAccess:
    """Failure handling of the repository manager."""

    def test_missing_repository(self, manager: GitRepositoryManager, tmp_path: Path) -> None:
        """Test cloning a missing path is a REPO_ACCESS error."""
        with pytest.raises(OnboarderError) as exc_info:
            manager.open(str(tmp_path / "does-not-exist"))

        assert exc_info.value.kind is ErrorKind.REPO_ACCESS

    def test_unknown_branch(self, hotspot_repo: Path, manager: GitRepositoryManager) -> None:
        """Test checking out a branch missing on the remote fails."""
        with manager.open(str(hotspot_repo)) as session:
            with pytest.raises(OnboarderError) as exc_info:
                session.fetch_checkout_pull("no-such-branch")

        assert exc_info.value.kind is ErrorKind.REPO_ACCESS

    def test_reopen_existing_clone(self, hotspot_repo: Path, manager: GitRepositoryManager, tmp_path: Path) -> None:
        """Test an existing clone is opened instead of cloned again."""
        workdir = tmp_path / "work" / "fixed"
        with manager.open(str(hotspot_repo), workdir) as session:
            first = session.repo.head.commit.hexsha

        with manager.open(str(hotspot_repo), workdir) as session:
            assert session.repo.head.commit.hexsha == first
