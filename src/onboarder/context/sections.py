"""Payload sections of the repository context.

Each function renders one section as text. Values are escaped with the
shared ``escape_xml`` so the payload stays well-formed.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from onboarder.models.report import CommitRecord, FileStats
from onboarder.renderers.filters import escape_xml, iso_utc

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 8000


def render_hotspots(ranked: Iterable[FileStats]) -> str:
    """One ``<file path=".." churn_score=".." />`` line per ranked entry."""
    return "".join(
        f'<file path="{escape_xml(stats.path)}" churn_score="{stats.churn}" />\n'
        for stats in ranked
    )


def render_commit_history(commits: Iterable[CommitRecord]) -> str:
    """One ``<commit date='..'>message</commit>`` line per commit, history order."""
    return "".join(
        f"<commit date='{iso_utc(commit.committer.when)}'>"
        f"{escape_xml(commit.short_message.strip())}</commit>\n"
        for commit in commits
    )


def _cdata(text: str) -> str:
    # "]]>" cannot appear inside CDATA; split it across two sections
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def read_source_file(root: Path, relative_path: str) -> str | None:
    """Read a repository file as UTF-8 text.

    Returns None for files outside ``root``, missing or unreadable files and
    binary content, so the corpus silently omits them.
    """
    root = root.resolve()
    path = (root / relative_path).resolve()
    if not path.is_relative_to(root):
        logger.warning("Skipping path outside repository: %s", relative_path)
        return None

    try:
        data = path.read_bytes()
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", relative_path, e)
        return None

    if b"\0" in data[:BINARY_SNIFF_BYTES]:
        logger.debug("Skipping binary file %s", relative_path)
        return None

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Skipping non-UTF-8 file %s", relative_path)
        return None


def render_source_corpus(paths: Iterable[str], root: Path) -> str:
    """Wrap the content of every readable text file with its relative path."""
    blocks: list[str] = []
    skipped = 0
    for relative_path in paths:
        content = read_source_file(root, relative_path)
        if content is None:
            skipped += 1
            continue
        blocks.append(f'<file path="{escape_xml(relative_path)}">\n{_cdata(content)}\n</file>\n\n')

    if skipped:
        logger.info("Source corpus: %d files included, %d skipped", len(blocks), skipped)
    return "".join(blocks)
