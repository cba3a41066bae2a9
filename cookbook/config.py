"""
Configuration management using Pydantic Settings.
Loads from environment variables with sensible defaults for development.

Only entry points (the API lifespan, the sync CLI) read settings.
Components receive explicit config objects built from them.
"""

from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cookbook.rag.chunking.parent_child import ChunkingConfig
from cookbook.rag.retrieval.parent_child import RetrieverConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API Keys
    voyage_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Paths
    documents_dir: Path = Path("documents")
    sqlite_db_path: str = "data/parents.sqlite"
    chroma_persist_dir: Path = Path("data/chroma_db")

    # Vector store
    chroma_url: str = ""  # e.g. http://localhost:8000; empty = local persistent store
    collection_name: str = Field("cookbook_children", min_length=1)

    # Embedding settings
    embedding_provider: Literal["voyage", "openai"] = "voyage"
    voyage_embedding_model: str = "voyage-3"
    voyage_embedding_dimensions: int = 1024
    openai_embedding_model: str = "text-embedding-3-small"
    openai_embedding_dimensions: int = 1536

    # LLM settings
    claude_model: str = "claude-sonnet-4-20250514"
    max_response_tokens: int = 1024

    # Retrieval settings
    rag_n_results: int = Field(10, gt=0)  # Child chunks to search
    rag_min_similarity: float = Field(0.5, ge=0.0, le=1.0)

    # Parent-child chunking settings (characters)
    child_chunk_size: int = Field(400, gt=0)
    child_chunk_overlap_factor: float = Field(0.2, gt=0.0, lt=1.0)
    parent_chunk_size_factor: float = Field(4.0, ge=1.0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    def chunking_config(self) -> ChunkingConfig:
        """Chunker configuration derived from settings."""
        return ChunkingConfig(
            child_chunk_size=self.child_chunk_size,
            child_chunk_overlap_factor=self.child_chunk_overlap_factor,
            parent_chunk_size_factor=self.parent_chunk_size_factor,
        )

    def retriever_config(self) -> RetrieverConfig:
        """Retriever configuration derived from settings."""
        return RetrieverConfig(
            n_results=self.rag_n_results,
            min_similarity=self.rag_min_similarity,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
