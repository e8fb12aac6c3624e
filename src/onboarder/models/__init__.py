"""Data models.

- RepositoryReport: immutable result of one repository analysis
- CommitRecord / FileChange / DiffStats: per-commit diff data
- FileStats: cumulative churn for one path
- DocumentResult: ordered generated documents
- LLMConfig: generation backend configuration
"""

from onboarder.models.documents import DocumentResult, output_filename, write_document
from onboarder.models.llm_config import VALID_PROVIDERS, LLMConfig
from onboarder.models.report import (
    ChangeType,
    CommitRecord,
    DiffStats,
    FileChange,
    FileStats,
    RemoteInfo,
    RepoInfo,
    RepositoryReport,
    Signature,
)

__all__ = [
    "ChangeType",
    "CommitRecord",
    "DiffStats",
    "DocumentResult",
    "FileChange",
    "FileStats",
    "LLMConfig",
    "RemoteInfo",
    "RepoInfo",
    "RepositoryReport",
    "Signature",
    "VALID_PROVIDERS",
    "output_filename",
    "write_document",
]
