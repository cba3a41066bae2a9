from unittest.mock import Mock, patch

import pytest

from cookbook.ingestion.loader import SourceFile, compute_content_hash
from cookbook.rag.chunking.models import ParentChunkResult
from cookbook.sync import SyncOrchestrator, SyncStats


def fake_hash(content: str) -> str:
    return f"h-{content}"


def source(name: str, content: str) -> SourceFile:
    return SourceFile(name=name, content=content, hash="")


def call_names(manager: Mock) -> list[str]:
    return [c[0] for c in manager.mock_calls]


@pytest.fixture
def manager():
    """Shared parent for every collaborator mock so call order is recorded."""
    manager = Mock()

    manager.parent_store.get_all_source_file_hashes.return_value = []
    manager.parent_store.insert_parents.return_value = [10]
    manager.parent_store.delete_by_source_file.return_value = 1

    manager.chunker.chunk.return_value = [
        ParentChunkResult(text="Mix flour and water.", children=["Mix flour ", "and water."]),
    ]

    provider = manager.embedding_provider
    provider.embed_documents.side_effect = lambda texts: [[0.1, 0.2, 0.3] for _ in texts]
    provider.count_tokens.return_value = 2
    provider.estimate_cost.return_value = 0.001

    return manager


@pytest.fixture
def orchestrator(manager):
    return SyncOrchestrator(
        parent_store=manager.parent_store,
        vector_store=manager.vector_store,
        embedding_provider=manager.embedding_provider,
        chunker=manager.chunker,
        hash_fn=fake_hash,
    )


class TestSyncPlan:
    """File classification without writes."""

    def test_classifies_files(self, manager, orchestrator):
        """New, changed, unchanged and removed files land in the right buckets."""
        manager.parent_store.get_all_source_file_hashes.return_value = [
            ("same.txt", "h-same"),
            ("changed.txt", "h-old"),
            ("gone.txt", "h-gone"),
        ]

        plan = orchestrator.plan([
            source("new.txt", "new"),
            source("same.txt", "same"),
            source("changed.txt", "fresh"),
        ])

        assert [f.name for f in plan.to_add] == ["new.txt"]
        assert [f.name for f in plan.to_update] == ["changed.txt"]
        assert plan.to_delete == ["gone.txt"]
        assert plan.unchanged == ["same.txt"]
        assert plan.to_update[0].hash == "h-fresh"

    def test_plan_writes_nothing(self, manager, orchestrator):
        """Planning only reads previous hashes."""
        orchestrator.plan([source("new.txt", "new")])

        assert call_names(manager) == ["parent_store.get_all_source_file_hashes"]


class TestSyncAdd:
    """Indexing a new file."""

    def test_new_file_call_order(self, manager, orchestrator):
        """Parents are inserted before children are embedded and upserted."""
        orchestrator.sync([source("recipe.txt", "Mix flour and water.")])

        names = call_names(manager)
        assert names.index("parent_store.get_all_source_file_hashes") < names.index("chunker.chunk")
        assert names.index("chunker.chunk") < names.index("parent_store.insert_parents")
        assert names.index("parent_store.insert_parents") < names.index("embedding_provider.embed_documents")
        assert names.index("embedding_provider.embed_documents") < names.index("vector_store.upsert")
        assert "parent_store.delete_by_source_file" not in names
        assert "vector_store.delete_by_filter" not in names

    def test_child_ids_follow_parent_ids(self, manager, orchestrator):
        """Child ids are chunk:{file}:{parent_id}:{child_index}."""
        orchestrator.sync([source("recipe.txt", "Mix flour and water.")])

        [records] = manager.vector_store.upsert.call_args.args
        assert [r.id for r in records] == ["chunk:recipe.txt:10:0", "chunk:recipe.txt:10:1"]
        assert [r.document for r in records] == ["Mix flour ", "and water."]
        assert records[1].metadata["parent_id"] == 10
        assert records[1].metadata["child_index"] == 1
        assert records[1].metadata["hash"] == "h-Mix flour and water."

    def test_inserted_parent_rows(self, manager, orchestrator):
        """Parent rows carry file name, index, content and hash."""
        orchestrator.sync([source("recipe.txt", "Mix flour and water.")])

        [parents] = manager.parent_store.insert_parents.call_args.args
        assert len(parents) == 1
        assert parents[0].source_file == "recipe.txt"
        assert parents[0].parent_index == 0
        assert parents[0].content == "Mix flour and water."
        assert parents[0].hash == "h-Mix flour and water."

    def test_one_embedding_batch_per_file(self, manager, orchestrator):
        """All children of a file are embedded in a single call."""
        orchestrator.sync([source("recipe.txt", "Mix flour and water.")])

        manager.embedding_provider.embed_documents.assert_called_once_with(
            ["Mix flour ", "and water."]
        )

    def test_stats(self, manager, orchestrator):
        """Stats count files, chunks, tokens and cost."""
        stats = orchestrator.sync([source("recipe.txt", "Mix flour and water.")])

        assert stats.added == 1
        assert stats.updated == 0
        assert stats.parents_created == 1
        assert stats.children_created == 2
        assert stats.child_tokens == 4
        assert stats.embedding_cost_estimate == pytest.approx(0.001)
        assert stats.duration_seconds >= 0


class TestSyncUpdateDelete:
    """Changed and removed files."""

    def test_changed_file_purged_before_reinsert(self, manager, orchestrator):
        """A changed file is deleted from both stores exactly once before reindexing."""
        manager.parent_store.get_all_source_file_hashes.return_value = [("recipe.txt", "h-old")]

        stats = orchestrator.sync([source("recipe.txt", "new text")])

        manager.parent_store.delete_by_source_file.assert_called_once_with("recipe.txt")
        manager.vector_store.delete_by_filter.assert_called_once_with({"source_file": "recipe.txt"})

        names = call_names(manager)
        assert names.index("parent_store.delete_by_source_file") < names.index("vector_store.delete_by_filter")
        assert names.index("vector_store.delete_by_filter") < names.index("parent_store.insert_parents")
        assert stats.updated == 1
        assert stats.added == 0

    def test_removed_file_deleted(self, manager, orchestrator):
        """A previously synced file that disappeared is removed and not reindexed."""
        manager.parent_store.get_all_source_file_hashes.return_value = [("gone.txt", "h-gone")]

        stats = orchestrator.sync([])

        manager.parent_store.delete_by_source_file.assert_called_once_with("gone.txt")
        manager.vector_store.delete_by_filter.assert_called_once_with({"source_file": "gone.txt"})
        manager.chunker.chunk.assert_not_called()
        assert stats.deleted == 1

    def test_unchanged_file_no_store_calls(self, manager, orchestrator):
        """A file with a matching hash triggers no writes, chunking or embedding."""
        manager.parent_store.get_all_source_file_hashes.return_value = [("recipe.txt", "h-same")]

        stats = orchestrator.sync([source("recipe.txt", "same")])

        assert call_names(manager) == ["parent_store.get_all_source_file_hashes"]
        assert stats.unchanged == 1


class TestSyncModes:
    """Reset, dry run, empty files and failures."""

    def test_reset_clears_stores_first(self, manager, orchestrator):
        """Reset empties the vector store, then the parent store, before planning."""
        orchestrator.sync([source("recipe.txt", "text")], reset=True)

        names = call_names(manager)
        assert names[:3] == [
            "vector_store.reset",
            "parent_store.delete_all",
            "parent_store.get_all_source_file_hashes",
        ]

    def test_dry_run_writes_nothing(self, manager, orchestrator):
        """Dry run reports planned counts without touching the stores."""
        manager.parent_store.get_all_source_file_hashes.return_value = [
            ("changed.txt", "h-old"),
            ("gone.txt", "h-gone"),
        ]

        stats = orchestrator.sync(
            [source("new.txt", "new"), source("changed.txt", "fresh")],
            reset=True,
            dry_run=True,
        )

        assert call_names(manager) == ["parent_store.get_all_source_file_hashes"]
        assert (stats.added, stats.updated, stats.deleted) == (1, 1, 1)

    def test_empty_chunk_result_skipped(self, manager, orchestrator):
        """A file that chunks to nothing is skipped without store writes."""
        manager.chunker.chunk.return_value = []

        stats = orchestrator.sync([source("empty.txt", "")])

        manager.parent_store.insert_parents.assert_not_called()
        manager.vector_store.upsert.assert_not_called()
        assert stats.skipped_empty == 1
        assert stats.added == 0

    def test_failure_aborts_run(self, manager, orchestrator):
        """A collaborator error stops the run; later files, changed ones included, are untouched."""
        manager.parent_store.get_all_source_file_hashes.return_value = [("b.txt", "h-old")]
        manager.chunker.chunk.side_effect = RuntimeError("chunker crashed")

        with pytest.raises(RuntimeError, match="chunker crashed"):
            orchestrator.sync([source("a.txt", "first"), source("b.txt", "second")])

        manager.chunker.chunk.assert_called_once_with("first")
        manager.parent_store.delete_by_source_file.assert_not_called()
        manager.vector_store.delete_by_filter.assert_not_called()
        manager.vector_store.upsert.assert_not_called()

    def test_changed_file_purged_just_before_reindex(self, manager, orchestrator):
        """Each changed file is purged right before its own indexing, not up front."""
        manager.parent_store.get_all_source_file_hashes.return_value = [
            ("a.txt", "h-old-a"),
            ("b.txt", "h-old-b"),
        ]

        orchestrator.sync([source("a.txt", "first"), source("b.txt", "second")])

        purge_and_chunk = [
            c for c in manager.mock_calls
            if c[0] in ("parent_store.delete_by_source_file", "chunker.chunk")
        ]
        assert [(c[0], c.args[0]) for c in purge_and_chunk] == [
            ("parent_store.delete_by_source_file", "a.txt"),
            ("chunker.chunk", "first"),
            ("parent_store.delete_by_source_file", "b.txt"),
            ("chunker.chunk", "second"),
        ]

    def test_embedding_failure_removes_partial_writes(self, manager, orchestrator):
        """Parents inserted for a file whose embedding fails are deleted again."""
        manager.embedding_provider.embed_documents.side_effect = RuntimeError("rate limited")

        with pytest.raises(RuntimeError, match="rate limited"):
            orchestrator.sync([source("a.txt", "first"), source("b.txt", "second")])

        names = call_names(manager)
        assert names.index("parent_store.insert_parents") < names.index("parent_store.delete_by_source_file")
        manager.parent_store.delete_by_source_file.assert_called_once_with("a.txt")
        manager.vector_store.delete_by_filter.assert_called_once_with({"source_file": "a.txt"})
        manager.chunker.chunk.assert_called_once_with("first")
        manager.vector_store.upsert.assert_not_called()

    def test_upsert_failure_removes_partial_writes(self, manager, orchestrator):
        """A failed upsert also removes the file from both stores."""
        manager.vector_store.upsert.side_effect = ConnectionError("chroma unavailable")

        with pytest.raises(ConnectionError):
            orchestrator.sync([source("a.txt", "first")])

        manager.parent_store.delete_by_source_file.assert_called_once_with("a.txt")
        manager.vector_store.delete_by_filter.assert_called_once_with({"source_file": "a.txt"})

    def test_progress_callback(self, orchestrator):
        """The callback receives (current, total, message) per indexed file."""
        progress = Mock()

        orchestrator.sync([source("a.txt", "one"), source("b.txt", "two")], progress_callback=progress)

        assert [c.args[:2] for c in progress.call_args_list] == [(1, 2), (2, 2)]


class TestSyncWithSQLite:
    """End-to-end sync against a real parent store."""

    @pytest.fixture
    def sqlite_orchestrator(self, parent_store, embedding_provider, chunker):
        return SyncOrchestrator(
            parent_store=parent_store,
            vector_store=Mock(),
            embedding_provider=embedding_provider,
            chunker=chunker,
        )

    def test_resync_replaces_only_changed_file(self, parent_store, sqlite_orchestrator):
        """Changing one file replaces its parents and leaves the other file alone."""
        pancakes = "Whisk flour and eggs. Fry in butter until golden on both sides."
        bread = "Knead the dough for ten minutes. Let it rise for one hour."

        sqlite_orchestrator.sync([source("bread.txt", bread), source("pancakes.txt", pancakes)])
        bread_before = parent_store.get_parents_by_source_file("bread.txt")

        stats = sqlite_orchestrator.sync([
            source("bread.txt", bread),
            source("pancakes.txt", pancakes + " Serve warm."),
        ])

        assert stats.updated == 1
        assert stats.unchanged == 1
        assert parent_store.get_parents_by_source_file("bread.txt") == bread_before
        assert dict(parent_store.get_all_source_file_hashes()) == {
            "bread.txt": compute_content_hash(bread),
            "pancakes.txt": compute_content_hash(pancakes + " Serve warm."),
        }
        assert "".join(
            p.content for p in parent_store.get_parents_by_source_file("pancakes.txt")
        ) == pancakes + " Serve warm."

    def test_failed_file_indexed_on_next_run(self, parent_store, embedding_provider, sqlite_orchestrator):
        """A file whose embedding failed is not recorded as synced and is added on the next run."""
        files = [source("soup.txt", "Simmer the stock for an hour. Season with salt and pepper.")]

        with patch.object(embedding_provider, "embed_documents", side_effect=RuntimeError("timeout")):
            with pytest.raises(RuntimeError):
                sqlite_orchestrator.sync(files)

        assert dict(parent_store.get_all_source_file_hashes()) == {}

        stats = sqlite_orchestrator.sync(files)

        assert stats.added == 1
        assert stats.unchanged == 0
        assert parent_store.get_parents_by_source_file("soup.txt")
        sqlite_orchestrator.vector_store.upsert.assert_called_once()

    def test_edge_whitespace_does_not_trigger_update(self, sqlite_orchestrator):
        """Untrimmed content hashes the same as its trimmed form."""
        bread = "Knead the dough for ten minutes."
        sqlite_orchestrator.sync([source("bread.txt", bread)])

        stats = sqlite_orchestrator.sync([source("bread.txt", "\n" + bread + "  \n")])

        assert stats.unchanged == 1
        assert stats.updated == 0

    def test_stats_str(self):
        """Stats render as a readable summary."""
        text = str(SyncStats(added=2, deleted=1))

        assert "Files added: 2" in text
        assert "Files deleted: 1" in text
