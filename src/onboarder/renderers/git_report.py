"""Human-readable markdown report of a repository analysis."""

import logging
from pathlib import Path

from onboarder.models.report import RepositoryReport
from onboarder.templates.renderer import render_template

logger = logging.getLogger(__name__)

GIT_REPORT_TEMPLATE = "git_report.md.j2"


def render_git_report(
    report: RepositoryReport,
    max_files: int = 300,
    max_hotspots: int = 20,
) -> str:
    """Render the git report markdown.

    Args:
        report: Analysis result
        max_files: Files listed under "Files at HEAD" (the rest is counted)
        max_hotspots: Rows in the hotspot table

    Returns:
        Markdown document
    """
    listed = report.files[: max(max_files, 0)]
    return render_template(
        GIT_REPORT_TEMPLATE,
        report=report,
        listed_files=listed,
        hidden_files=len(report.files) - len(listed),
        hotspots=report.hotspots(max_hotspots),
    )


def write_git_report(
    report: RepositoryReport,
    output_path: Path,
    max_files: int = 300,
) -> Path:
    """Render the git report and write it to ``output_path``."""
    content = render_git_report(report, max_files=max_files)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    logger.info("Wrote git report: %s", output_path)
    return output_path
