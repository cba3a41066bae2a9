"""
Boundary-aware text splitting.

Splits text into size-bounded chunks, preferring paragraph breaks,
then sentence breaks, and only cutting mid-sentence as a last resort.
Every chunk is a slice of the trimmed input. Separators between units
inside a chunk are kept verbatim; whitespace that falls on a boundary
between two chunks is dropped, so no pre-overlap chunk ever exceeds
chunk_size.
"""

import logging
import re
from abc import ABC, abstractmethod

from cookbook.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Blank line between paragraphs (tolerates trailing spaces on the empty line)
PARAGRAPH_BOUNDARY = re.compile(r"\n\s*\n")

# Sentence-ending punctuation, whitespace, then an uppercase letter
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")

# Tried in order before falling back to fixed-width slices
BOUNDARIES = (PARAGRAPH_BOUNDARY, SENTENCE_BOUNDARY)

Span = tuple[int, int]


def validate_chunk_params(chunk_size: int, chunk_overlap: int) -> None:
    """
    Validate splitter sizes.

    Raises:
        ConfigurationError: If chunk_size <= 0, chunk_overlap < 0,
            or chunk_overlap >= chunk_size
    """
    if chunk_size <= 0:
        raise ConfigurationError("chunk_size must be greater than 0")
    if chunk_overlap < 0:
        raise ConfigurationError("chunk_overlap must be non-negative")
    if chunk_overlap >= chunk_size:
        raise ConfigurationError("chunk_overlap must be less than chunk_size")


def unit_spans(text: str, boundary: re.Pattern, span: Span | None = None) -> list[Span]:
    """
    Find the units of text between boundary matches.

    Args:
        text: Full text
        boundary: Compiled separator pattern
        span: Region of text to search (defaults to all of it)

    Returns:
        (start, end) offsets into text of each non-blank unit, with
        surrounding whitespace excluded
    """
    start, end = span if span is not None else (0, len(text))
    region = text[start:end]

    spans: list[Span] = []
    unit_start = 0
    for match in boundary.finditer(region):
        _add_trimmed_span(spans, region, unit_start, match.start(), start)
        unit_start = match.end()
    _add_trimmed_span(spans, region, unit_start, len(region), start)
    return spans


def _add_trimmed_span(spans: list[Span], region: str, start: int, end: int, offset: int) -> None:
    while start < end and region[start].isspace():
        start += 1
    while end > start and region[end - 1].isspace():
        end -= 1
    if end > start:
        spans.append((offset + start, offset + end))


def hard_split(text: str, chunk_size: int) -> list[str]:
    """Cut text into fixed-width slices of chunk_size characters, skipping blank ones."""
    slices = (text[i:i + chunk_size] for i in range(0, len(text), chunk_size))
    return [piece for piece in slices if piece.strip()]


def apply_overlap(chunks: list[str], chunk_overlap: int) -> list[str]:
    """
    Prefix every chunk after the first with the tail of the chunk before it.

    The tail is taken from the pre-overlap chunk, so overlap never
    compounds across chunks.
    """
    if chunk_overlap <= 0 or len(chunks) < 2:
        return list(chunks)

    overlapped = [chunks[0]]
    for previous, chunk in zip(chunks, chunks[1:]):
        tail = previous[-min(chunk_overlap, len(previous)):]
        overlapped.append(tail + chunk)
    return overlapped


class TextSplitter(ABC):
    """Interface for splitting raw text into chunks."""

    @abstractmethod
    def split(self, text: str, chunk_size: int, chunk_overlap: int) -> list[str]:
        """
        Split text into chunks.

        Args:
            text: Raw text
            chunk_size: Maximum characters per chunk before overlap
            chunk_overlap: Characters carried over from the previous chunk

        Returns:
            List of chunk strings (empty for blank input)
        """
        pass


class ParagraphSentenceSplitter(TextSplitter):
    """
    Recursive splitter: paragraphs, then sentences, then hard slices.

    Paragraphs are packed greedily into chunks of at most chunk_size
    characters, counting the separators between them. A paragraph too
    large for any chunk on its own is split into sentences and packed
    the same way; a sentence still too large is sliced at exactly
    chunk_size characters.
    """

    def split(self, text: str, chunk_size: int, chunk_overlap: int) -> list[str]:
        validate_chunk_params(chunk_size, chunk_overlap)

        trimmed = text.strip()
        if not trimmed:
            return []

        if len(trimmed) <= chunk_size:
            return [trimmed]

        chunks = self._pack(trimmed, (0, len(trimmed)), chunk_size, level=0)

        logger.debug(f"Split {len(trimmed)} chars into {len(chunks)} chunks (size={chunk_size})")

        return apply_overlap(chunks, chunk_overlap)

    def _pack(self, text: str, span: Span, chunk_size: int, level: int) -> list[str]:
        """Greedily pack the units of text[span] found at this boundary level."""
        if level >= len(BOUNDARIES):
            return hard_split(text[span[0]:span[1]], chunk_size)

        chunks: list[str] = []
        current: Span | None = None
        for start, end in unit_spans(text, BOUNDARIES[level], span):
            if end - start > chunk_size:
                if current is not None:
                    chunks.append(text[current[0]:current[1]])
                    current = None
                chunks.extend(self._pack(text, (start, end), chunk_size, level + 1))
            elif current is None:
                current = (start, end)
            elif end - current[0] <= chunk_size:
                current = (current[0], end)
            else:
                chunks.append(text[current[0]:current[1]])
                current = (start, end)

        if current is not None:
            chunks.append(text[current[0]:current[1]])

        return chunks
