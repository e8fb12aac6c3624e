"""Repository metadata and file listing collection."""

import logging
from collections.abc import Iterable

import git
from git.refs.tag import TagReference

from onboarder.models.report import RemoteInfo, RepoInfo

logger = logging.getLogger(__name__)


def is_test_path(path: str) -> bool:
    """Return True for paths that look like test code (``test`` anywhere, any case)."""
    return "test" in path.lower()


def filter_test_paths(paths: Iterable[str], include_tests: bool) -> list[str]:
    """Drop test-named paths unless ``include_tests`` is set."""
    if include_tests:
        return list(paths)
    return [p for p in paths if not is_test_path(p)]


def collect_repo_info(repo: git.Repo, url: str) -> RepoInfo:
    """Capture url, branch, working tree and HEAD details."""
    try:
        branch: str | None = repo.active_branch.name
    except TypeError:
        # Detached HEAD
        branch = None

    if not repo.head.is_valid():
        return RepoInfo(url=url, branch=branch, workdir=repo.working_tree_dir)

    head = repo.head.commit
    summary = head.summary if isinstance(head.summary, str) else head.summary.decode("utf-8", "replace")
    return RepoInfo(
        url=url,
        branch=branch,
        workdir=repo.working_tree_dir,
        head_commit=head.hexsha,
        head_message=summary,
        head_time=head.committed_datetime,
    )


def collect_remotes(repo: git.Repo) -> tuple[RemoteInfo, ...]:
    """List configured remotes with all their URLs."""
    remotes: list[RemoteInfo] = []
    for remote in repo.remotes:
        try:
            urls = tuple(remote.urls)
        except git.GitCommandError as e:
            logger.debug("Could not read URLs for remote %s: %s", remote.name, e)
            urls = ()
        remotes.append(RemoteInfo(name=remote.name, urls=urls))
    return tuple(remotes)


def collect_branches(repo: git.Repo) -> tuple[str, ...]:
    """Full names of local and remote-tracking branches, sorted."""
    return tuple(sorted(ref.path for ref in repo.refs if not isinstance(ref, TagReference)))


def collect_tags(repo: git.Repo) -> tuple[str, ...]:
    """Full names of tags, sorted."""
    return tuple(sorted(tag.path for tag in repo.tags))
