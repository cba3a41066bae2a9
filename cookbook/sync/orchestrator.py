"""
Sync orchestrator for incremental document indexing.

Coordinates:
1. Hashing of the current source files
2. Comparison with previously synced hashes (parent store tracking)
3. Removal of stale parents and child vectors for changed or deleted files
4. Chunking, parent insertion, child embedding and vector upserts for
   new or changed files

There is no transaction spanning the parent store and the vector
store, so only one sync may run against a pair of stores at a time.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from cookbook.ingestion.loader import SourceFile, compute_content_hash
from cookbook.rag.chunking.models import ChildChunk, ParentChunk
from cookbook.rag.chunking.parent_child import ParentChildChunker
from cookbook.rag.docstore.sqlite_store import SQLiteParentStore
from cookbook.rag.providers.base import EmbeddingProvider
from cookbook.rag.vectorstore import ChromaVectorStore, VectorRecord

logger = logging.getLogger(__name__)

HashFunction = Callable[[str], str]
ProgressCallback = Callable[[int, int, str], None]


@dataclass
class SyncPlan:
    """Classification of current files against previously synced state."""

    to_add: list[SourceFile] = field(default_factory=list)
    to_update: list[SourceFile] = field(default_factory=list)
    to_delete: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.to_add or self.to_update or self.to_delete)

    def __str__(self) -> str:
        return (
            f"to add: {len(self.to_add)}, to update: {len(self.to_update)}, "
            f"to delete: {len(self.to_delete)}, unchanged: {len(self.unchanged)}"
        )


@dataclass
class SyncStats:
    """Statistics from a sync run."""

    added: int = 0
    updated: int = 0
    deleted: int = 0
    unchanged: int = 0
    skipped_empty: int = 0
    parents_created: int = 0
    children_created: int = 0
    child_tokens: int = 0
    embedding_cost_estimate: float = 0.0
    duration_seconds: float = 0.0

    def __str__(self) -> str:
        return (
            f"Files added: {self.added}\n"
            f"Files updated: {self.updated}\n"
            f"Files deleted: {self.deleted}\n"
            f"Files unchanged: {self.unchanged}\n"
            f"Files skipped (empty): {self.skipped_empty}\n"
            f"Parent chunks created: {self.parents_created}\n"
            f"Child chunks created: {self.children_created}\n"
            f"Child tokens embedded: {self.child_tokens:,}\n"
            f"Estimated embedding cost: ${self.embedding_cost_estimate:.4f}\n"
            f"Duration: {self.duration_seconds:.1f}s"
        )


class SyncOrchestrator:
    """
    Keeps the parent store and vector store in step with a set of source files.

    Usage:
        orchestrator = SyncOrchestrator(parent_store, vector_store, provider, chunker)

        # Incremental sync
        stats = orchestrator.sync(load_documents(documents_dir))

        # Preview only
        stats = orchestrator.sync(files, dry_run=True)

        # Rebuild everything
        stats = orchestrator.sync(files, reset=True)
    """

    def __init__(
        self,
        parent_store: SQLiteParentStore,
        vector_store: ChromaVectorStore,
        embedding_provider: EmbeddingProvider,
        chunker: ParentChildChunker,
        hash_fn: HashFunction = compute_content_hash,
    ):
        """
        Initialize the orchestrator.

        Args:
            parent_store: Relational store for parent chunks
            vector_store: Vector store for child chunks
            embedding_provider: Provider used in document mode
            chunker: Parent-child chunker
            hash_fn: Content hash used for change detection
        """
        self.parent_store = parent_store
        self.vector_store = vector_store
        self.embedding_provider = embedding_provider
        self.chunker = chunker
        self.hash_fn = hash_fn

    def plan(self, files: Sequence[SourceFile]) -> SyncPlan:
        """
        Classify files as add / update / unchanged, and find deletions.

        Nothing is written.

        Args:
            files: Current source files (only name and content are read)

        Returns:
            SyncPlan preserving input order, with freshly computed hashes
        """
        previous = dict(self.parent_store.get_all_source_file_hashes())
        logger.info(f"Found {len(previous)} previously synced files")

        plan = SyncPlan()
        for file in files:
            current_hash = self.hash_fn(file.content)
            file = SourceFile(name=file.name, content=file.content, hash=current_hash)

            previous_hash = previous.pop(file.name, None)
            if previous_hash is None:
                plan.to_add.append(file)
            elif previous_hash != current_hash:
                plan.to_update.append(file)
            else:
                plan.unchanged.append(file.name)

        plan.to_delete = list(previous)

        logger.info(f"Sync plan: {plan}")

        return plan

    def sync(
        self,
        files: Sequence[SourceFile],
        reset: bool = False,
        dry_run: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncStats:
        """
        Run an incremental sync.

        Args:
            files: Current source files
            reset: Clear both stores first (everything is re-added)
            dry_run: Plan only, write nothing
            progress_callback: Optional callback(current, total, message)

        Returns:
            SyncStats with results

        Raises:
            Any collaborator exception; the run stops at the failing file,
            whose partial writes are removed. Files already processed stay
            committed and files not yet reached are untouched.
        """
        start = time.monotonic()
        stats = SyncStats()

        try:
            if reset and not dry_run:
                logger.info("Reset requested - clearing vector store and parent store")
                self.vector_store.reset()
                self.parent_store.delete_all()

            plan = self.plan(files)
            stats.unchanged = len(plan.unchanged)

            if dry_run:
                for file in plan.to_add:
                    logger.info(f"[DRY RUN] Would add: {file.name}")
                for file in plan.to_update:
                    logger.info(f"[DRY RUN] Would update: {file.name}")
                for name in plan.to_delete:
                    logger.info(f"[DRY RUN] Would delete: {name}")
                stats.added = len(plan.to_add)
                stats.updated = len(plan.to_update)
                stats.deleted = len(plan.to_delete)
                return stats

            # Removed files
            for name in plan.to_delete:
                self._purge(name)
                stats.deleted += 1

            # New and changed files, in input order; a changed file is purged
            # just before it is reindexed
            to_index = plan.to_add + plan.to_update
            order = {file.name: i for i, file in enumerate(files)}
            to_index.sort(key=lambda f: order[f.name])
            updated_names = {file.name for file in plan.to_update}

            total = len(to_index)
            for i, file in enumerate(to_index):
                if progress_callback:
                    progress_callback(i + 1, total, f"Indexing: {file.name}")

                if file.name in updated_names:
                    self._purge(file.name)

                if not self._index_file(file, stats):
                    continue

                if file.name in updated_names:
                    stats.updated += 1
                else:
                    stats.added += 1

        except Exception:
            logger.exception("Sync aborted")
            raise
        finally:
            stats.duration_seconds = time.monotonic() - start

        logger.info(
            f"Sync complete: {stats.added} added, {stats.updated} updated, "
            f"{stats.deleted} deleted, {stats.unchanged} unchanged"
        )

        return stats

    def _purge(self, source_file: str) -> None:
        """Remove all parents and child vectors of a source file."""
        deleted = self.parent_store.delete_by_source_file(source_file)
        self.vector_store.delete_by_filter({"source_file": source_file})
        logger.info(f"Removed {source_file} ({deleted} parents)")

    def _index_file(self, file: SourceFile, stats: SyncStats) -> bool:
        """
        Chunk, store and embed one file.

        Returns:
            False if the file produced no chunks and was skipped
        """
        chunks = self.chunker.chunk(file.content)
        if not chunks:
            logger.warning(f"Skipping {file.name}: no content to index")
            stats.skipped_empty += 1
            return False

        synced_at = int(time.time())
        parents = [
            ParentChunk(
                source_file=file.name,
                parent_index=parent_index,
                content=chunk.text,
                hash=file.hash,
                synced_at=synced_at,
            )
            for parent_index, chunk in enumerate(chunks)
        ]

        parent_ids = self.parent_store.insert_parents(parents)
        for parent, parent_id in zip(parents, parent_ids):
            parent.id = parent_id

        children = [
            ChildChunk.from_parent(parent, text, child_index)
            for parent, chunk in zip(parents, chunks)
            for child_index, text in enumerate(chunk.children)
        ]
        texts = [child.text for child in children]

        # No parent rows with the new hash may survive a failed embed or upsert
        try:
            embeddings = self.embedding_provider.embed_documents(texts)

            records = [
                VectorRecord(
                    id=child.child_id,
                    embedding=embedding,
                    document=child.text,
                    metadata=child.to_chroma_metadata(),
                )
                for child, embedding in zip(children, embeddings)
            ]
            self.vector_store.upsert(records)
        except Exception:
            logger.error(f"Indexing {file.name} failed - removing its partial writes")
            self._purge(file.name)
            raise

        stats.parents_created += len(parents)
        stats.children_created += len(children)
        stats.child_tokens += sum(self.embedding_provider.count_tokens(t) for t in texts)
        stats.embedding_cost_estimate += self.embedding_provider.estimate_cost(texts)

        logger.info(f"Indexed {file.name}: {len(parents)} parents, {len(children)} children")

        return True
