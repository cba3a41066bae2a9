"""
Voyage AI embedding provider implementation.

Voyage models are asymmetric: queries and indexed documents are
embedded with different input types, which improves retrieval quality
over embedding both sides the same way.
"""

import logging
import time
from typing import Sequence

import voyageai
from tenacity import retry, stop_after_attempt, wait_exponential

from cookbook.errors import ConfigurationError
from cookbook.rag.chunking.tokens import count_tokens
from cookbook.rag.providers.base import EmbeddingProvider

logger = logging.getLogger(__name__)


class VoyageEmbeddingProvider(EmbeddingProvider):
    """
    Voyage AI embedding provider.

    Default model: voyage-3 (1024 dimensions)
    """

    # Pricing: $0.06 per 1M tokens for voyage-3
    COST_PER_MILLION_TOKENS = 0.06

    # Voyage accepts up to 128 texts per request; stay lower for rate limits
    MAX_BATCH_SIZE = 50

    def __init__(
        self,
        api_key: str,
        model: str = "voyage-3",
        dimensions: int = 1024,
        client: voyageai.Client | None = None,
    ):
        """
        Initialize Voyage embedding provider.

        Args:
            api_key: Voyage API key
            model: Model name
            dimensions: Embedding dimensions of the model
            client: Pre-built client (tests)
        """
        if client is None and not api_key:
            raise ConfigurationError(
                "Voyage API key required. Set VOYAGE_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._model = model
        self._dimensions = dimensions
        self._client = client or voyageai.Client(api_key=api_key)

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed_query(self, text: str) -> list[float]:
        """
        Generate embedding for a query.

        Voyage recommends input_type="query" for queries
        and input_type="document" for documents being indexed.
        """
        self._validate_texts([text])
        embeddings = self._embed_single_batch([text], "query")
        self._check_count([text], embeddings)
        return embeddings[0]

    @retry(stop=stop_after_attempt(5), wait=wait_exponential(min=2, max=60))
    def _embed_single_batch(
        self,
        texts: list[str],
        input_type: str,
    ) -> list[list[float]]:
        """Embed a single batch with retry logic."""
        result = self._client.embed(
            texts=texts,
            model=self._model,
            input_type=input_type,
        )
        return result.embeddings

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Generate document embeddings with batching.

        Args:
            texts: Texts to index

        Returns:
            List of embedding vectors
        """
        self._validate_texts(texts)
        all_embeddings = []

        for i in range(0, len(texts), self.MAX_BATCH_SIZE):
            batch = list(texts[i:i + self.MAX_BATCH_SIZE])

            embeddings = self._embed_single_batch(batch, "document")
            self._check_count(batch, embeddings)
            all_embeddings.extend(embeddings)

            # Pause between batches for rate limiting
            if i + self.MAX_BATCH_SIZE < len(texts):
                time.sleep(1.0)

        logger.debug(f"Embedded {len(all_embeddings)} documents with {self._model}")

        return all_embeddings

    def count_tokens(self, text: str) -> int:
        """Count tokens with cl100k_base, a close match to Voyage's tokenizer."""
        return count_tokens(text)

    def estimate_cost(self, texts: Sequence[str]) -> float:
        """
        Estimate cost to embed texts.

        Pricing: $0.06 per 1M tokens for voyage-3
        """
        total_tokens = sum(self.count_tokens(t) for t in texts)
        return (total_tokens / 1_000_000) * self.COST_PER_MILLION_TOKENS
