from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class LLMAdapter(ABC):
    """Interface for chat-completion providers."""

    @abstractmethod
    def chat_completion(
        self, messages: list[dict[str, str]], **options: Any
    ) -> dict[str, Any]:
        """Return the provider's completion body as a plain dict."""

    @abstractmethod
    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        """Return the text of the first choice."""
