"""
File loader for plain-text cookbook documents.

Each `*.txt` file in the documents directory is one source document.
Content is trimmed before hashing, so whitespace-only edits at the
edges of a file do not trigger a re-sync.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "sha256"


@dataclass(frozen=True)
class SourceFile:
    """Loaded document with its content hash."""
    name: str  # file name relative to the documents directory
    content: str  # trimmed text
    hash: str


def compute_content_hash(content: str) -> str:
    """
    Compute the content hash used for change detection.

    Args:
        content: Document text (trimmed before hashing)

    Returns:
        SHA-256 hex digest of the UTF-8 encoded trimmed text
    """
    return hashlib.new(HASH_ALGORITHM, content.strip().encode("utf-8")).hexdigest()


def load_documents(documents_dir: Path | str) -> list[SourceFile]:
    """
    Load all `.txt` documents from a directory.

    Args:
        documents_dir: Directory containing the documents

    Returns:
        SourceFiles sorted by name

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    documents_dir = Path(documents_dir)
    if not documents_dir.is_dir():
        raise FileNotFoundError(f"Documents directory not found: {documents_dir}")

    files = []
    for path in sorted(documents_dir.glob("*.txt")):
        if not path.is_file():
            continue

        content = path.read_text(encoding="utf-8").strip()
        files.append(SourceFile(
            name=path.name,
            content=content,
            hash=compute_content_hash(content),
        ))

    logger.info(f"Found {len(files)} document file(s) in {documents_dir}")

    return files
