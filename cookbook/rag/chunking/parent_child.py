"""
Parent-child chunking for source documents.

Splits a document twice:
- Parents: large, non-overlapping segments stored verbatim for context
- Children: small, overlapping segments of each parent, embedded for search
"""

import logging
import math
from dataclasses import dataclass

from cookbook.errors import ConfigurationError
from cookbook.rag.chunking.models import ParentChunkResult
from cookbook.rag.chunking.text_splitter import TextSplitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkingConfig:
    """Sizes for parent-child chunking, all in characters."""

    child_chunk_size: int
    child_chunk_overlap_factor: float  # overlap = floor(child_chunk_size * factor)
    parent_chunk_size_factor: float  # parent size = floor(child_chunk_size * factor)

    def __post_init__(self):
        if self.child_chunk_size <= 0:
            raise ConfigurationError("child_chunk_size must be > 0")

        if not 0 < self.child_chunk_overlap_factor < 1:
            raise ConfigurationError("child_chunk_overlap_factor must be > 0 and < 1")

        if self.parent_chunk_size_factor < 1:
            raise ConfigurationError("parent_chunk_size_factor must be >= 1")

    @property
    def child_chunk_overlap(self) -> int:
        return math.floor(self.child_chunk_size * self.child_chunk_overlap_factor)

    @property
    def parent_chunk_size(self) -> int:
        return math.floor(self.child_chunk_size * self.parent_chunk_size_factor)


class ParentChildChunker:
    """
    Two-level chunker built on a TextSplitter.

    Usage:
        chunker = ParentChildChunker(ParagraphSentenceSplitter(), ChunkingConfig(400, 0.2, 4))
        for parent in chunker.chunk(text):
            print(parent.text, parent.children)
    """

    def __init__(self, splitter: TextSplitter, config: ChunkingConfig):
        """
        Initialize the chunker.

        Args:
            splitter: Splitter used at both levels
            config: Validated chunk sizes
        """
        self._splitter = splitter
        self.config = config

    def chunk(self, content: str) -> list[ParentChunkResult]:
        """
        Split content into parents, then each parent into children.

        Args:
            content: Raw document text

        Returns:
            List of ParentChunkResult in document order (empty for blank content)
        """
        if not content or not content.strip():
            return []

        parent_texts = self._splitter.split(content, self.config.parent_chunk_size, 0)

        results = []
        for parent_text in parent_texts:
            children = self._splitter.split(
                parent_text,
                self.config.child_chunk_size,
                self.config.child_chunk_overlap,
            )
            results.append(ParentChunkResult(text=parent_text, children=children))

        logger.debug(
            f"Chunked {len(content)} chars into {len(results)} parents "
            f"and {sum(len(r.children) for r in results)} children"
        )

        return results
