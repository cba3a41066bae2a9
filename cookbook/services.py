"""
Explicit wiring of the cookbook components from Settings.

Entry points (API lifespan, sync CLI) call build_services() once and
pass the resulting objects down; components never read settings.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cookbook.config import Settings
from cookbook.rag.chunking import ParagraphSentenceSplitter, ParentChildChunker
from cookbook.rag.docstore import SQLiteParentStore
from cookbook.rag.generator import AnswerComposer
from cookbook.rag.providers import (
    ClaudeCompletionProvider,
    EmbeddingProvider,
    OpenAIEmbeddingProvider,
    VoyageEmbeddingProvider,
)
from cookbook.rag.retrieval import ParentChildRetriever
from cookbook.rag.vectorstore import ChromaVectorStore, create_chroma_client
from cookbook.sync import SyncOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Fully wired components sharing one pair of stores."""

    parent_store: SQLiteParentStore
    vector_store: ChromaVectorStore
    embedding_provider: EmbeddingProvider
    retriever: ParentChildRetriever
    orchestrator: SyncOrchestrator
    composer: Optional[AnswerComposer] = None

    def close(self) -> None:
        self.parent_store.close()


def get_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """
    Create the configured embedding provider.

    Args:
        settings: Application settings

    Returns:
        Voyage or OpenAI provider
    """
    if settings.embedding_provider == "openai":
        return OpenAIEmbeddingProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_embedding_model,
            dimensions=settings.openai_embedding_dimensions,
        )

    return VoyageEmbeddingProvider(
        api_key=settings.voyage_api_key,
        model=settings.voyage_embedding_model,
        dimensions=settings.voyage_embedding_dimensions,
    )


def build_services(settings: Settings, with_composer: bool = True) -> Services:
    """
    Build every component from settings.

    Args:
        settings: Application settings
        with_composer: Also create the Claude-backed answer composer
            (the sync CLI does not need it)

    Returns:
        Services bundle
    """
    parent_store = SQLiteParentStore(settings.sqlite_db_path)

    client = create_chroma_client(
        persist_dir=settings.chroma_persist_dir,
        url=settings.chroma_url,
    )
    vector_store = ChromaVectorStore(client, settings.collection_name)

    embedding_provider = get_embedding_provider(settings)
    logger.info(f"Embedding provider: {embedding_provider.model_name}")

    chunker = ParentChildChunker(ParagraphSentenceSplitter(), settings.chunking_config())

    retriever = ParentChildRetriever(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        parent_store=parent_store,
        config=settings.retriever_config(),
    )

    orchestrator = SyncOrchestrator(
        parent_store=parent_store,
        vector_store=vector_store,
        embedding_provider=embedding_provider,
        chunker=chunker,
    )

    composer = None
    if with_composer:
        completion_provider = ClaudeCompletionProvider(
            api_key=settings.anthropic_api_key,
            model=settings.claude_model,
            max_tokens=settings.max_response_tokens,
        )
        composer = AnswerComposer(retriever, completion_provider)

    return Services(
        parent_store=parent_store,
        vector_store=vector_store,
        embedding_provider=embedding_provider,
        retriever=retriever,
        orchestrator=orchestrator,
        composer=composer,
    )
