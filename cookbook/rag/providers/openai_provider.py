"""
OpenAI embedding provider implementation.

text-embedding-3 models are symmetric, so queries and documents go
through the same endpoint.
"""

import logging
import time
from typing import Sequence

from openai import OpenAI
from tenacity import retry, stop_after_attempt, wait_exponential

from cookbook.rag.chunking.tokens import count_tokens
from cookbook.rag.providers.base import EmbeddingProvider

logger = logging.getLogger(__name__)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """
    OpenAI embedding provider using text-embedding-3-small by default.
    """

    # Pricing: $0.02 per 1M tokens for text-embedding-3-small
    COST_PER_MILLION_TOKENS = 0.02

    BATCH_SIZE = 100

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
        client: OpenAI | None = None,
    ):
        """
        Initialize OpenAI embedding provider.

        Args:
            api_key: OpenAI API key
            model: Model name
            dimensions: Embedding dimensions
            client: Pre-built client (tests)
        """
        self._api_key = api_key
        self._model = model
        self._dimensions = dimensions

        # Lazy-initialized client
        self._client: OpenAI | None = client

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_client(self) -> OpenAI:
        """Get or create synchronous client."""
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def embed_query(self, text: str) -> list[float]:
        """Generate embedding for a query (same call as documents)."""
        self._validate_texts([text])
        embeddings = self._embed_batch([text])
        self._check_count([text], embeddings)
        return embeddings[0]

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(min=1, max=10))
    def _embed_batch(self, batch: list[str]) -> list[list[float]]:
        response = self._get_client().embeddings.create(
            model=self._model,
            input=batch,
        )

        # Sort by index to ensure order matches input
        return [
            item.embedding
            for item in sorted(response.data, key=lambda item: item.index)
        ]

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts with batching."""
        self._validate_texts(texts)
        all_embeddings = []

        for i in range(0, len(texts), self.BATCH_SIZE):
            batch = list(texts[i:i + self.BATCH_SIZE])
            embeddings = self._embed_batch(batch)
            self._check_count(batch, embeddings)
            all_embeddings.extend(embeddings)

            # Brief pause between batches for rate limiting
            if i + self.BATCH_SIZE < len(texts):
                time.sleep(0.1)

        return all_embeddings

    def count_tokens(self, text: str) -> int:
        """Count tokens with cl100k_base, the text-embedding-3 tokenizer."""
        return count_tokens(text)

    def estimate_cost(self, texts: Sequence[str]) -> float:
        """
        Estimate cost to embed texts.

        Pricing: $0.02 per 1M tokens for text-embedding-3-small
        """
        total_tokens = sum(self.count_tokens(t) for t in texts)
        return (total_tokens / 1_000_000) * self.COST_PER_MILLION_TOKENS
