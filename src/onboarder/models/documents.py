"""Generated documentation entities."""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

_INVALID_FILENAME_CHARS = re.compile(r"[^A-Z0-9_.]")


def output_filename(document_type: str) -> str:
    """Derive the output file name for a document type.

    The key is uppercased, spaces become underscores, characters outside
    ``[A-Z0-9_.]`` are removed and ``.md`` is appended when missing.

    Examples:
        >>> output_filename("README.md")
        'README.md'
        >>> output_filename("DDD Refactoring")
        'DDD_REFACTORING.md'
    """
    name = document_type.upper().replace(" ", "_")
    name = _INVALID_FILENAME_CHARS.sub("", name)
    if not name.endswith(".MD"):
        return f"{name}.md"
    return f"{name[:-3]}.md"


def write_document(output_dir: Path, document_type: str, content: str) -> Path | None:
    """Write one document into ``output_dir``; blank content is skipped.

    Returns:
        The written path, or None when nothing was written
    """
    if not content or not content.strip():
        return None
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / output_filename(document_type)
    path.write_text(content, encoding="utf-8")
    return path


@dataclass
class DocumentResult:
    """Ordered mapping of document type to generated content.

    Insertion order is the order in which pipeline stages completed and is
    also the order in which documents are written.
    """

    documents: dict[str, str] = field(default_factory=dict)

    def add_document(self, document_type: str, content: str) -> None:
        """Record a document. Re-adding a key replaces it in place."""
        self.documents[document_type] = content

    def get(self, document_type: str) -> str | None:
        return self.documents.get(document_type)

    def keys(self) -> list[str]:
        return list(self.documents)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self.documents.items())

    def __contains__(self, document_type: object) -> bool:
        return document_type in self.documents

    def __len__(self) -> int:
        return len(self.documents)

    def write_all(self, output_dir: Path) -> list[Path]:
        """Write one file per non-blank document into ``output_dir``.

        Returns:
            Paths written, in document order
        """
        written: list[Path] = []
        for document_type, content in self.documents.items():
            path = write_document(output_dir, document_type, content)
            if path is not None:
                written.append(path)
        return written
