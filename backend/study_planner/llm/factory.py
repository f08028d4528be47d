from functools import lru_cache

from study_planner.core.config import get_settings
from study_planner.llm.adapter import LLMAdapter
from study_planner.llm.groq_adapter import GroqAdapter


@lru_cache
def get_llm_adapter() -> LLMAdapter:
    settings = get_settings()
    return GroqAdapter(
        api_key=settings.groq_api_key,
        model=settings.groq_model,
        base_url=settings.groq_base_url,
        timeout=settings.llm_timeout_seconds,
    )
