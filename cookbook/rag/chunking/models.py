"""
Data models for parent-child chunking.

Parent chunks are coarse segments of a source file, stored verbatim in
the SQLite parent store and returned as answer context.

Child chunks are fine-grained segments of one parent, embedded and
indexed in the vector store with references back to their parent.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ParentChunkResult:
    """Chunker output: one parent text and the child texts split from it."""

    text: str
    children: list[str] = field(default_factory=list)


@dataclass
class ParentChunk:
    """
    A parent chunk represents one coarse segment of a source file.

    Parent chunks are:
    - Stored in the SQLite parent store (not in the vector store)
    - Identified by an integer id assigned on insert
    - Unique per (source_file, parent_index)
    - Replaced wholesale whenever their source file changes
    """

    source_file: str
    parent_index: int  # 0-indexed position within the file
    content: str
    hash: str  # Content hash of the source file at sync time
    synced_at: int  # Unix epoch seconds
    id: Optional[int] = None  # Assigned by the store

    def to_row(self) -> tuple:
        """Column values for an INSERT, in schema order."""
        return (
            self.source_file,
            self.parent_index,
            self.content,
            self.hash,
            self.synced_at,
        )


@dataclass
class ChildChunk:
    """
    A child chunk is a small searchable unit within a parent chunk.

    Child chunks are:
    - Indexed in the vector store
    - Found only by nearest-neighbour search, never by id
    - Deleted together with their source file's parents
    """

    child_id: str
    text: str
    source_file: str
    parent_id: int
    parent_index: int
    child_index: int  # 0-indexed position within parent
    hash: str
    synced_at: int

    @classmethod
    def generate_id(cls, source_file: str, parent_id: int, child_index: int) -> str:
        """Generate deterministic child_id: chunk:{source_file}:{parent_id}:{child_index}."""
        return f"chunk:{source_file}:{parent_id}:{child_index}"

    @classmethod
    def from_parent(cls, parent: ParentChunk, text: str, child_index: int) -> "ChildChunk":
        """Build a child for a parent that already has a store-assigned id."""
        if parent.id is None:
            raise ValueError("parent must be inserted before its children are built")

        return cls(
            child_id=cls.generate_id(parent.source_file, parent.id, child_index),
            text=text,
            source_file=parent.source_file,
            parent_id=parent.id,
            parent_index=parent.parent_index,
            child_index=child_index,
            hash=parent.hash,
            synced_at=parent.synced_at,
        )

    def to_chroma_metadata(self) -> dict:
        """Convert to ChromaDB metadata format."""
        return {
            "source_file": self.source_file,
            "parent_id": self.parent_id,
            "parent_index": self.parent_index,
            "child_index": self.child_index,
            "hash": self.hash,
            "synced_at": self.synced_at,
        }
