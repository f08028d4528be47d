from __future__ import annotations

import logging
import os
from typing import Any, Dict

from openai import APIConnectionError, APIStatusError, OpenAI

from study_planner.core.config import GROQ_BASE_URL
from study_planner.llm.adapter import LLMAdapter
from study_planner.services.errors import LLMNotConfiguredError, LLMProviderError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.3-70b-versatile"


class GroqAdapter(LLMAdapter):
    """Groq through its OpenAI-compatible endpoint.

    Requests are made once; there is no retry or backoff.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        base_url: str = GROQ_BASE_URL,
        timeout: float = 30.0,
    ):
        self.api_key = api_key or os.getenv("GROQ_API_KEY")
        self.model = model
        self.client = (
            OpenAI(api_key=self.api_key, base_url=base_url, timeout=timeout, max_retries=0)
            if self.api_key
            else None
        )
        logger.info(
            "Groq configuration: key %s, model %s",
            "present" if self.api_key else "missing",
            model,
        )

    def _require_client(self) -> OpenAI:
        if not self.client:
            logger.error("GROQ_API_KEY is missing")
            raise LLMNotConfiguredError("Groq API key not configured")
        return self.client

    def chat_completion(
        self, messages: list[dict[str, str]], **options: Any
    ) -> Dict[str, Any]:
        client = self._require_client()
        logger.info("Making Groq API request with %d messages", len(messages))
        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=messages,
                **options,
            )
        except APIStatusError as exc:
            logger.error("Groq API error (%s): %s", exc.status_code, exc.message)
            raise LLMProviderError(
                f"Groq API error ({exc.status_code})",
                details=exc.body if exc.body is not None else exc.message,
            ) from exc
        except APIConnectionError as exc:
            logger.error("Groq API unreachable: %s", exc)
            raise LLMProviderError("Groq API unreachable", details=str(exc)) from exc
        logger.info("Groq API response received")
        return completion.model_dump()

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        options: Dict[str, Any] = {"temperature": temperature}
        if max_tokens:
            options["max_tokens"] = max_tokens
        body = self.chat_completion(messages, **options)
        choices = body.get("choices") or []
        if not choices:
            raise LLMProviderError("Groq API returned no choices", details=body)
        choice = choices[0]
        if choice.get("finish_reason") == "length":
            logger.warning("Groq completion stopped at the token limit; output is truncated")
        return (choice.get("message") or {}).get("content") or ""
