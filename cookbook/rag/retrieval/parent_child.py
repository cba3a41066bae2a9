"""
Parent-child retriever.

Implements the parent-child retrieval strategy:
1. Embed the question in query mode
2. Search the vector store for the closest child chunks
3. Drop children below the similarity threshold
4. Merge children into their parents, keeping each parent's best score
5. Load parents from the parent store and rank them

Small children give precise matches; parents give the model enough
surrounding text to answer from.
"""

import logging
from dataclasses import dataclass

from cookbook.errors import ConfigurationError, ValidationError
from cookbook.rag.docstore.sqlite_store import SQLiteParentStore
from cookbook.rag.providers.base import EmbeddingProvider
from cookbook.rag.vectorstore import ChromaVectorStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrieverConfig:
    """Retrieval limits."""

    n_results: int  # children requested from the vector store
    min_similarity: float  # children below this are ignored

    def __post_init__(self):
        if self.n_results <= 0:
            raise ConfigurationError("n_results must be greater than 0")

        if not 0 <= self.min_similarity <= 1:
            raise ConfigurationError("min_similarity must be between 0 and 1")


@dataclass
class RankedContextEntry:
    """A parent chunk selected as context, with its best child similarity."""

    source_file: str
    content: str
    similarity: float
    parent_id: int

    def to_source(self) -> dict:
        return {
            "source_file": self.source_file,
            "similarity": round(self.similarity, 4),
        }


class ParentChildRetriever:
    """
    Retrieves ranked parent chunks for a question.

    Usage:
        retriever = ParentChildRetriever(provider, vector_store, parent_store, config)
        entries = retriever.retrieve("How long do I bake the bread?")
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: ChromaVectorStore,
        parent_store: SQLiteParentStore,
        config: RetrieverConfig,
    ):
        """
        Initialize the parent-child retriever.

        Args:
            embedding_provider: Provider used for the query embedding
            vector_store: Store holding child embeddings
            parent_store: Store holding parent text
            config: Validated retrieval limits
        """
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._parent_store = parent_store
        self.config = config

        logger.info(
            f"Initialized retriever (n_results={config.n_results}, "
            f"min_similarity={config.min_similarity})"
        )

    def retrieve(self, question: str) -> list[RankedContextEntry]:
        """
        Retrieve parent chunks relevant to a question.

        Args:
            question: User question

        Returns:
            Entries ordered by similarity, descending (possibly empty)

        Raises:
            ValidationError: If question is empty or whitespace
        """
        if not question or not question.strip():
            raise ValidationError("question is required and cannot be empty")

        query_embedding = self._embedding_provider.embed_query(question)
        matches = self._vector_store.query(query_embedding, self.config.n_results)

        matches = [m for m in matches if m.similarity >= self.config.min_similarity]
        if not matches:
            return []

        logger.debug(f"Top child match similarity: {matches[0].similarity:.4f}")

        # parent_id -> best similarity, in first-seen order
        best_similarity: dict[int, float] = {}
        for match in matches:
            parent_id = int(match.metadata["parent_id"])
            existing = best_similarity.get(parent_id)
            if existing is None or match.similarity > existing:
                best_similarity[parent_id] = match.similarity

        parent_ids = list(best_similarity)
        parents = self._parent_store.get_parents(parent_ids)

        if not parents:
            logger.warning(
                f"No parents found for {len(parent_ids)} matched parent ids; "
                "parent store and vector store may be out of sync"
            )
            return []

        logger.info(
            f"Found {len(matches)} child matches from {len(parents)} unique parents"
        )

        first_seen = {parent_id: rank for rank, parent_id in enumerate(parent_ids)}
        parents = sorted(
            parents,
            key=lambda p: (-best_similarity[p.id], first_seen[p.id]),
        )

        return [
            RankedContextEntry(
                source_file=parent.source_file,
                content=parent.content,
                similarity=best_similarity[parent.id],
                parent_id=parent.id,
            )
            for parent in parents
        ]
