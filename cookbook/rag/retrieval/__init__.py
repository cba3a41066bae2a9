"""
Retrieval package.

Provides parent-child retrieval: precise child matching merged back
into full parent context.
"""

from cookbook.rag.retrieval.parent_child import (
    ParentChildRetriever,
    RankedContextEntry,
    RetrieverConfig,
)

__all__ = [
    "ParentChildRetriever",
    "RankedContextEntry",
    "RetrieverConfig",
]
