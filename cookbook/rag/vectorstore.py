"""
ChromaDB vector store operations.

Holds the child chunk embeddings. Handles collection management,
record upserts, metadata-filtered deletes and similarity search.
Similarity thresholds are not applied here: query() returns raw
matches and callers decide what is relevant.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import urlparse

import chromadb
from chromadb.api import ClientAPI
from chromadb.config import Settings as ChromaSettings
from chromadb.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class VectorRecord:
    """A single child chunk ready to be written to the vector store."""
    id: str
    embedding: list[float]
    document: str
    metadata: dict = field(default_factory=dict)


@dataclass
class RetrievedMatch:
    """A child chunk returned by a similarity query."""
    child_id: str
    text: str
    similarity: float  # 1 - cosine distance, clamped to [0, 1]
    metadata: dict = field(default_factory=dict)


@dataclass
class VectorEntryInfo:
    """Lightweight listing entry (no embedding or text)."""
    id: str
    metadata: dict = field(default_factory=dict)


def create_chroma_client(
    persist_dir: Path | str | None = None,
    url: str = "",
) -> ClientAPI:
    """
    Create a ChromaDB client.

    Args:
        persist_dir: Local directory for an embedded persistent client
        url: Chroma server URL; takes precedence over persist_dir

    Returns:
        ChromaDB client instance
    """
    chroma_settings = ChromaSettings(
        anonymized_telemetry=False,
        allow_reset=True,
    )

    if url:
        parsed = urlparse(url)
        client = chromadb.HttpClient(
            host=parsed.hostname or url,
            port=parsed.port or 8000,
            ssl=parsed.scheme == "https",
            settings=chroma_settings,
        )
        logger.info(f"ChromaDB HTTP client initialized for {url}")
        return client

    if persist_dir is None:
        raise ValueError("persist_dir is required when no Chroma URL is set")

    persist_dir = Path(persist_dir)
    persist_dir.mkdir(parents=True, exist_ok=True)

    client = chromadb.PersistentClient(
        path=str(persist_dir),
        settings=chroma_settings,
    )
    logger.info(f"ChromaDB client initialized at {persist_dir}")

    return client


class ChromaVectorStore:
    """
    Vector store for child chunks backed by one Chroma collection.

    The collection uses cosine space, so similarity = 1 - distance.
    """

    BATCH_SIZE = 100

    def __init__(self, client: ClientAPI, collection_name: str):
        """
        Initialize the vector store.

        Args:
            client: ChromaDB client (persistent, HTTP or ephemeral)
            collection_name: Name of the child chunk collection
        """
        self._client = client
        self.collection_name = collection_name
        self._collection = self._get_or_create_collection()

        logger.info(
            f"Collection '{collection_name}' ready with {self._collection.count()} documents"
        )

    def _get_or_create_collection(self) -> chromadb.Collection:
        return self._client.get_or_create_collection(
            name=self.collection_name,
            metadata={
                "description": "Cookbook child chunks",
                "hnsw:space": "cosine",  # Use cosine similarity
            },
        )

    def upsert(self, records: Sequence[VectorRecord]) -> int:
        """
        Upsert records (add or update if exists).

        Args:
            records: Records to write

        Returns:
            Number of records upserted
        """
        total_upserted = 0
        for i in range(0, len(records), self.BATCH_SIZE):
            batch = records[i:i + self.BATCH_SIZE]

            self._collection.upsert(
                ids=[r.id for r in batch],
                embeddings=[r.embedding for r in batch],
                documents=[r.document for r in batch],
                metadatas=[r.metadata for r in batch],
            )
            total_upserted += len(batch)
            logger.debug(f"Upserted batch {i // self.BATCH_SIZE + 1}, total: {total_upserted}")

        return total_upserted

    def delete_by_filter(self, where: dict) -> None:
        """
        Delete all records whose metadata matches a filter.

        Args:
            where: Metadata filter (e.g., {"source_file": "pancakes.txt"})
        """
        self._collection.delete(where=where)
        logger.debug(f"Deleted vectors matching {where}")

    def query(
        self,
        query_embedding: list[float],
        n_results: int,
        where: Optional[dict] = None,
    ) -> list[RetrievedMatch]:
        """
        Search using a pre-computed query embedding.

        Args:
            query_embedding: Query vector
            n_results: Maximum number of matches
            where: Optional metadata filter

        Returns:
            Matches ordered by similarity, descending
        """
        total = self._collection.count()
        if total == 0:
            return []

        results = self._collection.query(
            query_embeddings=[query_embedding],
            n_results=min(n_results, total),
            where=where,
            include=["documents", "metadatas", "distances"],
        )

        # Flatten results (query returns nested lists)
        ids = results["ids"][0] if results["ids"] else []
        documents = results["documents"][0] if results["documents"] else []
        metadatas = results["metadatas"][0] if results["metadatas"] else []
        distances = results["distances"][0] if results["distances"] else []

        matches = []
        for child_id, document, metadata, distance in zip(ids, documents, metadatas, distances):
            similarity = min(1.0, max(0.0, 1.0 - distance))
            matches.append(RetrievedMatch(
                child_id=child_id,
                text=document or "",
                similarity=similarity,
                metadata=dict(metadata or {}),
            ))

        return matches

    def list_all(self) -> list[VectorEntryInfo]:
        """List every record's id and metadata."""
        results = self._collection.get(include=["metadatas"])

        return [
            VectorEntryInfo(id=record_id, metadata=dict(metadata or {}))
            for record_id, metadata in zip(results["ids"], results["metadatas"])
        ]

    def count(self) -> int:
        """Get number of records in the collection."""
        return self._collection.count()

    def reset(self) -> None:
        """Delete the collection and recreate it empty."""
        try:
            self._client.delete_collection(self.collection_name)
        except (ValueError, NotFoundError):
            logger.debug(f"Collection '{self.collection_name}' did not exist")

        self._collection = self._get_or_create_collection()
        logger.warning(f"Reset collection '{self.collection_name}'")
