"""Git repository access via GitPython.

Covers everything the analysis needs from the version-control side:
- open or clone a repository into a per-run working directory
- fetch/checkout/pull the requested branch
- list commits (newest first) and files at HEAD

Every GitPython failure is re-raised as OnboarderError(REPO_ACCESS).
"""

import logging
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from urllib.parse import quote, urlsplit, urlunsplit

import git
from git.exc import GitCommandError, GitError, InvalidGitRepositoryError, NoSuchPathError

from onboarder.config import GitConfig
from onboarder.errors import ErrorKind, OnboarderError

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "x-access-token"


@dataclass(frozen=True)
class Credentials:
    """Token credentials for HTTPS remotes.

    Attributes:
        username: User paired with the token
        token: Access token (never logged or repr'd)
    """

    username: str
    token: str = field(repr=False)

    def apply(self, url: str) -> str:
        """Return ``url`` with credentials embedded.

        Only http(s) URLs carry credentials; SSH and local paths are returned
        unchanged.
        """
        parts = urlsplit(url)
        if parts.scheme not in {"http", "https"} or not parts.hostname:
            return url
        host = parts.hostname
        if parts.port:
            host = f"{host}:{parts.port}"
        netloc = f"{quote(self.username, safe='')}:{quote(self.token, safe='')}@{host}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def credentials_from_config(config: GitConfig) -> Credentials | None:
    """Build credentials from config, or None when no token is configured."""
    if not config.token or not config.token.strip():
        return None
    username = config.username.strip() if config.username else ""
    return Credentials(username=username or DEFAULT_USERNAME, token=config.token.strip())


class RepositorySession:
    """One run's handle on a cloned repository.

    Usage:
        with manager.open(url) as session:
            session.fetch_checkout_pull("main")
            commits = list(session.iter_commits())

    Leaving the block strips credentials from the remote URL and releases
    GitPython's object database handles.
    """

    def __init__(
        self,
        repo: git.Repo,
        url: str,
        config: GitConfig,
        credentials: Credentials | None = None,
    ) -> None:
        self.repo = repo
        self.url = url
        self.config = config
        self.credentials = credentials

    @property
    def root(self) -> Path:
        """Working tree root."""
        if self.repo.working_tree_dir is None:
            raise OnboarderError(ErrorKind.REPO_ACCESS, "Repository has no working tree")
        return Path(self.repo.working_tree_dir)

    def fetch_checkout_pull(self, branch: str | None) -> str | None:
        """Fetch with prune, check out ``branch`` and pull with rebase.

        A missing local branch is created tracking ``<remote>/<branch>``.
        Without a branch the currently checked-out one is refreshed.

        Returns:
            The checked-out branch name (None for a detached HEAD)
        """
        try:
            remote = self.repo.remote(self.config.remote)
        except ValueError as e:
            raise OnboarderError(
                ErrorKind.REPO_ACCESS, f"Remote '{self.config.remote}' is not configured", e
            ) from e

        try:
            logger.debug("Fetching %s (prune)", self.config.remote)
            remote.fetch(prune=True)

            if branch:
                self._checkout(remote, branch)

            if self.repo.head.is_detached:
                logger.warning("HEAD is detached; skipping pull")
                return None

            active = self.repo.active_branch.name
            if self.repo.active_branch.tracking_branch() is not None:
                logger.debug("Pulling %s with rebase", active)
                self.repo.git.pull(self.config.remote, active, rebase=True)
            return active
        except GitCommandError as e:
            raise OnboarderError(
                ErrorKind.REPO_ACCESS,
                f"Failed to update branch '{branch}': {e.stderr.strip() if e.stderr else e}",
                e,
            ) from e

    def _checkout(self, remote: git.Remote, branch: str) -> None:
        if branch in self.repo.heads:
            self.repo.heads[branch].checkout()
            return

        remote_ref = next((ref for ref in remote.refs if ref.remote_head == branch), None)
        if remote_ref is None:
            raise OnboarderError(
                ErrorKind.REPO_ACCESS,
                f"Branch '{branch}' not found on remote '{remote.name}'",
            )

        logger.debug("Creating local branch %s tracking %s", branch, remote_ref.name)
        head = self.repo.create_head(branch, remote_ref)
        head.set_tracking_branch(remote_ref)
        head.checkout()

    def iter_commits(self, max_count: int = 0) -> Iterator[git.Commit]:
        """Iterate commits reachable from HEAD, newest first.

        An empty repository (no valid HEAD) yields nothing.
        """
        if not self.repo.head.is_valid():
            return iter(())
        kwargs = {"max_count": max_count} if max_count > 0 else {}
        return self.repo.iter_commits("HEAD", **kwargs)

    def list_head_files(self) -> list[str]:
        """List every file path at HEAD, sorted."""
        if not self.repo.head.is_valid():
            return []
        return sorted(
            item.path
            for item in self.repo.head.commit.tree.traverse()
            if item.type == "blob"
        )

    def close(self) -> None:
        if self.credentials is not None:
            try:
                remote = self.repo.remote(self.config.remote)
                remote.set_url(self.url)
            except (ValueError, GitError) as e:
                logger.warning("Could not reset remote URL: %s", e)
        self.repo.close()

    def __enter__(self) -> "RepositorySession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class GitRepositoryManager:
    """Opens existing clones or clones fresh copies of a repository."""

    def __init__(self, config: GitConfig) -> None:
        self.config = config
        self.credentials = credentials_from_config(config)

    def new_workdir(self) -> Path:
        """Return a fresh, not-yet-existing directory under the configured workdir."""
        return Path(self.config.workdir).resolve() / uuid.uuid4().hex

    def open(self, url: str, workdir: Path | None = None) -> RepositorySession:
        """Open ``workdir`` if it already holds a clone, else clone ``url`` into it.

        Args:
            url: Repository URL or local path
            workdir: Target directory (defaults to a fresh per-run directory)

        Raises:
            OnboarderError: REPO_ACCESS if the clone or open fails
        """
        workdir = workdir or self.new_workdir()
        remote_url = self.credentials.apply(url) if self.credentials else url

        try:
            if (workdir / ".git").exists():
                logger.info("Opening existing clone at %s", workdir)
                repo = git.Repo(workdir)
                if self.credentials is not None:
                    repo.remote(self.config.remote).set_url(remote_url)
            else:
                workdir.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Cloning %s into %s", url, workdir)
                repo = git.Repo.clone_from(remote_url, workdir, no_single_branch=True)
        except (GitCommandError, InvalidGitRepositoryError, NoSuchPathError, ValueError) as e:
            # GitCommandError renders the full command line, token included
            detail = e.stderr.strip() if isinstance(e, GitCommandError) and e.stderr else type(e).__name__
            raise OnboarderError(
                ErrorKind.REPO_ACCESS, f"Failed to open repository {url}: {detail}", e
            ) from e

        logger.info("Repository ready at %s", repo.working_tree_dir)
        return RepositorySession(repo, url, self.config, self.credentials)
