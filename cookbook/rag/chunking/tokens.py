"""
Token counting for embedding cost estimates.

Chunk sizes are measured in characters; tokens are only counted to
report how much text was sent to the embedding service.
"""

import tiktoken

# Use cl100k_base encoding (GPT-4, text-embedding-3)
# This is also reasonably close to other model tokenizers
_encoder: tiktoken.Encoding | None = None


def get_encoder() -> tiktoken.Encoding:
    """Get or initialize the tiktoken encoder."""
    global _encoder
    if _encoder is None:
        _encoder = tiktoken.get_encoding("cl100k_base")
    return _encoder


def count_tokens(text: str) -> int:
    """Count tokens in text."""
    return len(get_encoder().encode(text))
