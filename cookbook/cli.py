"""
Document sync CLI.

Indexes the `.txt` files of the documents directory into the parent
store (SQLite) and the child vector store (ChromaDB), re-processing
only files whose content changed since the last run.

Usage:
    cookbook-sync                      # Incremental sync
    cookbook-sync --reset              # Clear both stores and re-index
    cookbook-sync --dry-run            # Show what would change
    cookbook-sync --stats              # Show store statistics
    cookbook-sync --source-dir ./docs  # Override documents directory
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from cookbook.config import Settings, get_settings
from cookbook.errors import ConfigurationError
from cookbook.ingestion.loader import load_documents
from cookbook.main import configure_logging
from cookbook.rag.docstore import SQLiteParentStore
from cookbook.rag.vectorstore import ChromaVectorStore, create_chroma_client
from cookbook.services import build_services

logger = logging.getLogger(__name__)


def show_stats(settings: Settings, source_dir: Path) -> None:
    """Display document and store statistics."""
    print("\n=== Source Directory ===")
    print(f"Path: {source_dir}")

    try:
        files = load_documents(source_dir)
        print(f"Documents: {len(files)}")
    except FileNotFoundError as e:
        print(f"Error: {e}")

    print("\n=== Vector Store (Children) ===")
    try:
        client = create_chroma_client(settings.chroma_persist_dir, settings.chroma_url)
        vector_store = ChromaVectorStore(client, settings.collection_name)
        print(f"Collection: {settings.collection_name}")
        print(f"Child chunks indexed: {vector_store.count()}")
    except Exception as e:
        print(f"Error: {e}")

    print("\n=== Parent Store ===")
    try:
        parent_store = SQLiteParentStore(settings.sqlite_db_path)
        stats = parent_store.get_stats()
        print(f"Parent chunks: {stats['total_parent_chunks']}")
        print(f"Source files: {stats['unique_source_files']}")
        print(f"Total characters: {stats['total_characters']:,}")
        parent_store.close()
    except Exception as e:
        print(f"Error: {e}")


def progress_callback(current: int, total: int, message: str):
    """Display progress during sync."""
    percent = (current / total * 100) if total > 0 else 0
    bar_width = 40
    filled = int(bar_width * current / total) if total > 0 else 0
    bar = "=" * filled + "-" * (bar_width - filled)
    print(f"\r[{bar}] {percent:5.1f}% ({current}/{total}) {message[:50]:<50}", end="", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sync cookbook documents into the parent and vector stores"
    )
    parser.add_argument("-r", "--reset", action="store_true", help="Clear both stores before syncing")
    parser.add_argument("--dry-run", action="store_true", help="Show planned changes without writing")
    parser.add_argument("--stats", action="store_true", help="Show store statistics")
    parser.add_argument("--source-dir", type=str, help="Override documents directory")
    return parser


def main(argv: Optional[Sequence[str]] = None):
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    source_dir = Path(args.source_dir) if args.source_dir else settings.documents_dir

    if args.stats:
        show_stats(settings, source_dir)
        return

    print("\n=== Starting Document Sync ===")
    print(f"Source: {source_dir}")
    print(f"Reset: {args.reset}")
    print(f"Dry run: {args.dry_run}")
    print(f"Embedding provider: {settings.embedding_provider}")
    print(
        f"Chunk sizes (chars): child {settings.child_chunk_size}, "
        f"parent {settings.chunking_config().parent_chunk_size}"
    )

    services = None
    try:
        files = load_documents(source_dir)
        services = build_services(settings, with_composer=False)

        stats = services.orchestrator.sync(
            files,
            reset=args.reset,
            dry_run=args.dry_run,
            progress_callback=progress_callback,
        )

        print("\n\n=== Document Sync Complete ===")
        print(stats)

    except KeyboardInterrupt:
        print("\n\nSync interrupted by user.")
        sys.exit(1)
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"\n\nError: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"\n\nSync failed: {e}")
        logger.exception("Sync error")
        sys.exit(1)
    finally:
        if services is not None:
            services.close()


if __name__ == "__main__":
    main()
