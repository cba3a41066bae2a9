"""
Chunking package for parent-child document splitting.

Provides:
- ParentChunk / ChildChunk data models
- Paragraph/sentence-aware text splitter
- Two-level parent-child chunker
"""

from cookbook.rag.chunking.models import ParentChunk, ChildChunk, ParentChunkResult
from cookbook.rag.chunking.text_splitter import (
    TextSplitter,
    ParagraphSentenceSplitter,
    validate_chunk_params,
)
from cookbook.rag.chunking.parent_child import ChunkingConfig, ParentChildChunker

__all__ = [
    # Data models
    "ParentChunk",
    "ChildChunk",
    "ParentChunkResult",
    # Splitting
    "TextSplitter",
    "ParagraphSentenceSplitter",
    "validate_chunk_params",
    # Parent-child chunking
    "ChunkingConfig",
    "ParentChildChunker",
]
