"""
Model providers package.

Provides pluggable embedding backends (OpenAI, Voyage AI) and the
Claude completion backend behind consistent interfaces.
"""

from cookbook.rag.providers.base import CompletionProvider, EmbeddingProvider
from cookbook.rag.providers.anthropic_provider import ClaudeCompletionProvider
from cookbook.rag.providers.openai_provider import OpenAIEmbeddingProvider
from cookbook.rag.providers.voyage_provider import VoyageEmbeddingProvider

__all__ = [
    "EmbeddingProvider",
    "CompletionProvider",
    "ClaudeCompletionProvider",
    "OpenAIEmbeddingProvider",
    "VoyageEmbeddingProvider",
]
