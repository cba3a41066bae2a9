"""
Abstract base classes for model providers.

Defines the interfaces that embedding and completion backends must
implement, so the retriever, sync engine and answer composer never
depend on a specific vendor SDK.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from cookbook.errors import EmbeddingError, ValidationError


class EmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    Implementations must provide methods for:
    - Query embedding (question side of retrieval)
    - Document embedding, single and batched (indexing side)
    - Token counting
    - Cost estimation

    Asymmetric models embed queries and documents differently;
    symmetric models may route both to the same call.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier used by this provider."""
        pass

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the embedding dimensions for this model."""
        pass

    @abstractmethod
    def embed_query(self, text: str) -> list[float]:
        """
        Generate embedding for a search query.

        Args:
            text: Question text

        Returns:
            Embedding vector as list of floats

        Raises:
            ValidationError: If text is empty
        """
        pass

    @abstractmethod
    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Generate document embeddings for multiple texts.

        Args:
            texts: Texts to index

        Returns:
            One embedding vector per input text, in input order

        Raises:
            ValidationError: If any text is empty
        """
        pass

    def embed_document(self, text: str) -> list[float]:
        """Generate a document embedding for a single text."""
        return self.embed_documents([text])[0]

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        """
        Count tokens in text.

        Args:
            text: Text to count tokens for

        Returns:
            Token count
        """
        pass

    @abstractmethod
    def estimate_cost(self, texts: Sequence[str]) -> float:
        """
        Estimate cost to embed texts.

        Args:
            texts: List of texts to embed

        Returns:
            Estimated cost in USD
        """
        pass

    @staticmethod
    def _validate_texts(texts: Sequence[str]) -> None:
        """Reject empty or whitespace-only input before calling the API."""
        for i, text in enumerate(texts):
            if not text or not text.strip():
                raise ValidationError(f"Cannot embed empty text (index {i})")

    @staticmethod
    def _check_count(texts: Sequence[str], embeddings: Sequence) -> None:
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got {len(embeddings)}"
            )


class CompletionProvider(ABC):
    """Abstract base class for text completion providers."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier used by this provider."""
        pass

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """
        Send a single prompt and return the model's text.

        Args:
            prompt: Fully assembled prompt

        Returns:
            Model answer text ("" for an empty prompt)

        Raises:
            CompletionError: If the model returned no text
        """
        pass
