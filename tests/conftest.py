"""
Shared fixtures and fakes for the cookbook test suite.

Fakes implement the provider interfaces without any network access;
token counts use a 4-characters-per-token estimate instead of tiktoken.
"""

import hashlib
from typing import Sequence

import pytest

from cookbook.rag.chunking import ChunkingConfig, ParagraphSentenceSplitter, ParentChildChunker
from cookbook.rag.docstore import SQLiteParentStore
from cookbook.rag.providers.base import CompletionProvider, EmbeddingProvider


class FakeEmbeddingProvider(EmbeddingProvider):
    """Deterministic 8-dimensional embeddings derived from a text digest."""

    def __init__(self):
        self.query_calls: list[str] = []
        self.document_calls: list[list[str]] = []

    @property
    def model_name(self) -> str:
        return "fake-embedding"

    @property
    def dimensions(self) -> int:
        return 8

    @staticmethod
    def vector_for(text: str) -> list[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [b / 255.0 + 0.01 for b in digest[:8]]

    def embed_query(self, text: str) -> list[float]:
        self._validate_texts([text])
        self.query_calls.append(text)
        return self.vector_for(text)

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        self._validate_texts(texts)
        self.document_calls.append(list(texts))
        return [self.vector_for(t) for t in texts]

    def count_tokens(self, text: str) -> int:
        return len(text) // 4

    def estimate_cost(self, texts: Sequence[str]) -> float:
        return sum(self.count_tokens(t) for t in texts) / 1_000_000


class FakeCompletionProvider(CompletionProvider):
    """Returns a canned answer and records every prompt."""

    def __init__(self, answer: str = "Whisk the eggs first."):
        self.answer = answer
        self.prompts: list[str] = []

    @property
    def model_name(self) -> str:
        return "fake-model"

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def embedding_provider():
    return FakeEmbeddingProvider()


@pytest.fixture
def completion_provider():
    return FakeCompletionProvider()


@pytest.fixture
def parent_store():
    """In-memory SQLite parent store."""
    store = SQLiteParentStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def chunker():
    """Small chunk sizes so short test documents produce several chunks."""
    config = ChunkingConfig(
        child_chunk_size=40,
        child_chunk_overlap_factor=0.25,
        parent_chunk_size_factor=3,
    )
    return ParentChildChunker(ParagraphSentenceSplitter(), config)
