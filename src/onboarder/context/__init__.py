"""Repository context payload: tree, hotspots, commit digest, source corpus."""

from onboarder.context.builder import (
    ContextSections,
    RepositoryContextBuilder,
    project_name_from_url,
)
from onboarder.context.tree import render_directory_tree

__all__ = [
    "ContextSections",
    "RepositoryContextBuilder",
    "project_name_from_url",
    "render_directory_tree",
]
