"""Repository context payload assembly.

The payload is a single XML-like document combining the directory tree,
the hotspot table, the commit digest and the source corpus. Building it is
a pure function of the RepositoryReport and the files under the repository
root: no network access and no shared state.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from onboarder.context.sections import (
    render_commit_history,
    render_hotspots,
    render_source_corpus,
)
from onboarder.context.tree import render_directory_tree
from onboarder.models.report import RepositoryReport
from onboarder.templates.renderer import render_template

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
UNKNOWN_PROJECT = "unknown-project"
CONTEXT_TEMPLATE = "repository_context.xml.j2"


def project_name_from_url(url: str | None) -> str:
    """Derive the project name from a repository URL.

    Takes the last path segment (after the final ``/`` or ``:``) with any
    ``.git`` suffix removed.

    Examples:
        >>> project_name_from_url("git@github.com:acme/widgets.git")
        'widgets'
        >>> project_name_from_url("")
        'unknown-project'
    """
    if not url or not url.strip():
        return UNKNOWN_PROJECT
    cleaned = re.sub(r"\.git$", "", url.strip().rstrip("/"))
    name = re.split(r"[/:]", cleaned)[-1].strip()
    return name or UNKNOWN_PROJECT


@dataclass(frozen=True)
class ContextSections:
    """Rendered payload sections, also written individually as debug files."""

    directory_tree: str
    hotspots: str
    commit_history: str
    source_corpus: str

    def as_files(self) -> dict[str, str]:
        """Section file names and contents."""
        return {
            "DIRECTORY_TREE_PAYLOAD.txt": self.directory_tree,
            "HOTSPOTS_PAYLOAD.txt": self.hotspots,
            "COMMIT_HISTORY_PAYLOAD.txt": self.commit_history,
            "SOURCE_CODE_CORPUS_PAYLOAD.txt": self.source_corpus,
        }


class RepositoryContextBuilder:
    """Builds the repository context payload.

    Usage:
        builder = RepositoryContextBuilder()
        payload = builder.build(report, repo_root)
    """

    def __init__(self, template_name: str = CONTEXT_TEMPLATE) -> None:
        self.template_name = template_name

    def sections(self, report: RepositoryReport, root: Path) -> ContextSections:
        """Render every payload section."""
        return ContextSections(
            directory_tree=render_directory_tree(report.files),
            hotspots=render_hotspots(report.hotspots()),
            commit_history=render_commit_history(report.commits),
            source_corpus=render_source_corpus(report.files, root),
        )

    def build(
        self,
        report: RepositoryReport,
        root: Path,
        sections: ContextSections | None = None,
    ) -> str:
        """Assemble the full payload.

        Args:
            report: Analysis result
            root: Repository working tree (source of the corpus)
            sections: Pre-rendered sections, to avoid reading files twice

        Returns:
            Payload text
        """
        sections = sections or self.sections(report, root)
        payload = render_template(
            self.template_name,
            project_name=project_name_from_url(report.repo.url),
            analysis_timestamp=report.generated_at,
            branch=report.repo.branch or DEFAULT_BRANCH,
            directory_tree=sections.directory_tree,
            hotspots=sections.hotspots,
            commit_history=sections.commit_history,
            source_corpus=sections.source_corpus,
        )
        logger.info("Built repository context (%d chars)", len(payload))
        return payload
