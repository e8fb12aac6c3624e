"""Test fixtures for repo-onboarder.

Fakes for the external collaborators plus a builder for small real git
repositories:
- FakeClock: settable UTC clock for cache TTL tests
- FakeGenerator: scripted generation client
- make_commit / FakeDiffProvider: commit-shaped objects without git
- build_hotspot_repo: three-commit repository used by end-to-end tests
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Any

from onboarder.llm.client import GenerationOptions, LLMResponse
from onboarder.models.report import FileChange

EPOCH = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """UTC clock that only moves when told to."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class FakeGenerator:
    """Generation client returning scripted results in order.

    Each script item is either a response string or an exception to raise.
    When the script runs out, the last item repeats.
    """

    script: list[Any] = field(default_factory=lambda: ["Generated document"])
    calls: list[tuple[str, GenerationOptions | None]] = field(default_factory=list)

    def generate(self, prompt: str, options: GenerationOptions | None = None) -> LLMResponse:
        self.calls.append((prompt, options))
        index = min(len(self.calls) - 1, len(self.script) - 1)
        item = self.script[index]
        if isinstance(item, BaseException):
            raise item
        return LLMResponse(content=item, model="fake-model", usage={}, finish_reason="stop")


def make_commit(
    sha: str,
    parents: Iterable[Any] = (),
    summary: str = "Commit message",
    when: datetime = EPOCH,
    author: str = "Ada Lovelace",
) -> SimpleNamespace:
    """Build an object with the attributes CommitHistoryAnalyzer reads."""
    actor = SimpleNamespace(name=author, email=f"{author.split()[0].lower()}@example.com")
    return SimpleNamespace(
        hexsha=sha,
        parents=tuple(parents),
        author=actor,
        committer=actor,
        authored_datetime=when,
        committed_datetime=when,
        summary=summary,
        message=f"{summary}\n",
    )


class FakeDiffProvider:
    """Returns canned FileChanges keyed by commit sha."""

    def __init__(self, changes: dict[str, list[FileChange]]) -> None:
        self.changes = changes
        self.calls: list[tuple[str, str]] = []

    def diff(self, parent: Any, commit: Any, include_patch: bool = False) -> list[FileChange]:
        self.calls.append((parent.hexsha, commit.hexsha))
        return list(self.changes.get(commit.hexsha, []))


def _lines(prefix: str, count: int) -> str:
    return "".join(f"{prefix} line {i}\n" for i in range(1, count + 1))


def build_hotspot_repo(path: Path) -> Path:
    """Create a repository with three commits on its default branch.

    1. root: adds ``a.txt`` (5 lines) and ``src/app.py``
    2. modifies ``a.txt`` (+5/-2) and adds ``b.txt`` (10 lines)
    3. deletes ``a.txt`` (8 lines)

    Returns:
        The repository path
    """
    import git

    repo = git.Repo.init(path)
    actor = git.Actor("Ada Lovelace", "ada@example.com")

    def commit(message: str, when: datetime) -> None:
        stamp = f"{int(when.timestamp())} +0000"
        repo.index.commit(
            message,
            author=actor,
            committer=actor,
            author_date=stamp,
            commit_date=stamp,
        )

    (path / "src").mkdir()
    (path / "a.txt").write_text(_lines("a", 5))
    (path / "src" / "app.py").write_text('print("hello")\n')
    repo.index.add(["a.txt", "src/app.py"])
    commit("Initial commit", EPOCH)

    (path / "a.txt").write_text(_lines("a", 3) + _lines("new", 5))
    (path / "b.txt").write_text(_lines("b", 10))
    repo.index.add(["a.txt", "b.txt"])
    commit("Rework a, add b", EPOCH + timedelta(hours=1))

    repo.index.remove(["a.txt"], working_tree=True)
    commit("Remove a", EPOCH + timedelta(hours=2))

    repo.close()
    return path
