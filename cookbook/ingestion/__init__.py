"""Document ingestion: loading source files from disk."""

from cookbook.ingestion.loader import SourceFile, compute_content_hash, load_documents

__all__ = [
    "SourceFile",
    "compute_content_hash",
    "load_documents",
]
