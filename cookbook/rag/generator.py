"""
RAG response generation.
Assembles context from retrieved parent chunks and asks the completion
model for a grounded answer.
"""

import logging
import re
from dataclasses import dataclass

from cookbook.rag.providers.base import CompletionProvider
from cookbook.rag.retrieval.parent_child import ParentChildRetriever, RankedContextEntry

logger = logging.getLogger(__name__)


PROMPT_TEMPLATE = """You are a helpful cooking assistant that answers questions based on the provided recipes.

Context from user's cookbook:
{context}

User question: {question}

Instructions:
- Answer the question using only the information provided in the context above
- If the context doesn't contain enough information to answer the question, say so clearly
- Be concise and accurate
- Reference specific documents when applicable

Answer:"""

PLACEHOLDER = re.compile(r"\{(context|question)\}")

NO_RESULTS_MESSAGE = (
    "I could not find any relevant information in the cookbook to answer your question."
)


def build_context(entries: list[RankedContextEntry]) -> str:
    """
    Format ranked entries as numbered context blocks.

    Args:
        entries: Ranked parent chunks

    Returns:
        Context text for the prompt
    """
    context_parts = []
    for i, entry in enumerate(entries):
        context_parts.append(
            f"[Document {i + 1}] Source: {entry.source_file} "
            f"(Best match: {entry.similarity:.2f})\n{entry.content}"
        )

    return "\n\n".join(context_parts)


def build_prompt(template: str, context: str, question: str) -> str:
    """
    Fill the {context} and {question} placeholders of a template.

    Only the template is scanned, so braces (or placeholder text) inside
    documents and questions are inserted verbatim.
    """
    values = {"context": context, "question": question}
    return PLACEHOLDER.sub(lambda m: values[m.group(1)], template)


@dataclass
class GenerationResult:
    """Result from RAG generation."""
    response: str
    sources: list[dict]
    retrieval_count: int
    model_used: str


class AnswerComposer:
    """
    Answers questions from retrieved cookbook context.

    Usage:
        composer = AnswerComposer(retriever, ClaudeCompletionProvider(api_key))
        result = composer.generate("How do I make pancakes fluffy?")
    """

    def __init__(
        self,
        retriever: ParentChildRetriever,
        completion_provider: CompletionProvider,
        no_results_message: str = NO_RESULTS_MESSAGE,
        prompt_template: str = PROMPT_TEMPLATE,
    ):
        self._retriever = retriever
        self._completion_provider = completion_provider
        self.no_results_message = no_results_message
        self.prompt_template = prompt_template

    def generate(self, question: str) -> GenerationResult:
        """
        Generate a response to the user's question using RAG.

        Args:
            question: The user's question

        Returns:
            GenerationResult with response and sources

        Raises:
            ValidationError: If question is empty
        """
        entries = self._retriever.retrieve(question)

        if not entries:
            logger.info(f"No relevant context for query: {question[:50]}...")
            return GenerationResult(
                response=self.no_results_message,
                sources=[],
                retrieval_count=0,
                model_used=self._completion_provider.model_name,
            )

        logger.info(f"Retrieved {len(entries)} parents for query: {question[:50]}...")

        context = build_context(entries)
        prompt = build_prompt(self.prompt_template, context, question)

        response_text = self._completion_provider.complete(prompt)

        return GenerationResult(
            response=response_text,
            sources=[entry.to_source() for entry in entries],
            retrieval_count=len(entries),
            model_used=self._completion_provider.model_name,
        )
