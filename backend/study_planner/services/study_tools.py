"""Summary, quiz and chat helpers over uploaded study material."""

from __future__ import annotations

import logging
from typing import Any

from study_planner.llm.adapter import LLMAdapter

logger = logging.getLogger(__name__)

SUMMARY_MAX_WORDS = 8000
QUIZ_MAX_WORDS = 6000
TRUNCATION_MARKER = "... [Content truncated due to length]"

SUMMARY_SYSTEM_PROMPT = "You summarize academic slides for students clearly and concisely."
QUIZ_SYSTEM_PROMPT = (
    "You create multiple-choice quizzes from study materials. Respond ONLY with a single "
    "JSON array containing 5-10 objects, each with: question, options (array), answer (string). "
    "No explanations, no Markdown, no extra text."
)


def truncate_words(text: str | None, max_words: int) -> str:
    if not text:
        return ""
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + TRUNCATION_MARKER


def summarize(adapter: LLMAdapter, text: str) -> dict[str, Any]:
    truncated = truncate_words(text, SUMMARY_MAX_WORDS)
    logger.info(
        "Summary request: %d words, %d after truncation",
        len((text or "").split()),
        len(truncated.split()),
    )
    return adapter.chat_completion(
        [
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {"role": "user", "content": f"Summarize this academic content:\n{truncated}"},
        ]
    )


def build_quiz(adapter: LLMAdapter, text: str) -> dict[str, Any]:
    truncated = truncate_words(text, QUIZ_MAX_WORDS)
    logger.info(
        "Quiz request: %d words, %d after truncation",
        len((text or "").split()),
        len(truncated.split()),
    )
    return adapter.chat_completion(
        [
            {"role": "system", "content": QUIZ_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    f"Create a 5-10 question quiz (with answers) from this:\n{truncated}\n"
                    "Respond ONLY with a single JSON array, no explanations, no Markdown, no extra text."
                ),
            },
        ]
    )


def chat(adapter: LLMAdapter, messages: list[dict[str, str]]) -> dict[str, Any]:
    return adapter.chat_completion(messages)
