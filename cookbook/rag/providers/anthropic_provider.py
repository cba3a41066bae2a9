"""
Claude completion provider.
"""

import logging

from anthropic import Anthropic
from tenacity import retry, stop_after_attempt, wait_exponential

from cookbook.errors import CompletionError
from cookbook.rag.providers.base import CompletionProvider

logger = logging.getLogger(__name__)


class ClaudeCompletionProvider(CompletionProvider):
    """Single-turn completions through the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 1024,
        client: Anthropic | None = None,
    ):
        self._model = model
        self._max_tokens = max_tokens
        self._client = client or Anthropic(api_key=api_key)

    @property
    def model_name(self) -> str:
        return self._model

    def complete(self, prompt: str) -> str:
        if not prompt:
            return ""

        message = self._create_message(prompt)

        text = "".join(
            block.text for block in message.content
            if getattr(block, "type", None) == "text"
        )
        if not text:
            raise CompletionError(f"{self._model} returned no text")

        return text

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(min=1, max=10))
    def _create_message(self, prompt: str):
        return self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            messages=[
                {"role": "user", "content": prompt}
            ],
        )
