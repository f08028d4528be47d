from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from study_planner.llm.adapter import LLMAdapter
from study_planner.schemas.plan import GeneratedPlan, PlannedSession, PlanPreferences
from study_planner.services.plan_parser import MAX_RESPONSE_CHARS, ParseStage, parse_plan_response
from study_planner.services.plan_prompt import PlanPrompt, build_plan_prompt

logger = logging.getLogger(__name__)

PLAN_TEMPERATURE = 0.3
PLAN_MAX_TOKENS = 4000


@dataclass
class PlanGenerationResult:
    plan: GeneratedPlan
    stage: ParseStage
    prompt: PlanPrompt

    @property
    def sessions(self) -> list[PlannedSession]:
        return self.plan.flatten()


def generate_study_plan(
    adapter: LLMAdapter,
    preferences: PlanPreferences,
    *,
    start_date: date | None = None,
    max_response_chars: int = MAX_RESPONSE_CHARS,
) -> PlanGenerationResult:
    prompt = build_plan_prompt(preferences, start_date=start_date)
    logger.info(
        "Generating study plan: %d subjects, %d h/week, %d weeks (cap %d)",
        len(preferences.subjects),
        preferences.hours,
        preferences.weeks,
        prompt.week_cap,
    )
    raw = adapter.complete(
        prompt.messages(), temperature=PLAN_TEMPERATURE, max_tokens=PLAN_MAX_TOKENS
    )
    logger.debug("AI response length: %d characters", len(raw))
    parsed = parse_plan_response(raw, max_chars=max_response_chars)

    plan = parsed.plan
    if len(plan.weeks) > prompt.week_cap:
        logger.warning(
            "Model returned %d weeks, keeping the first %d", len(plan.weeks), prompt.week_cap
        )
        plan = GeneratedPlan(weeks=plan.weeks[: prompt.week_cap])

    unknown = {session.subject for session in plan.flatten()} - set(preferences.subjects)
    if unknown:
        logger.warning("Plan mentions subjects that were not requested: %s", sorted(unknown))

    return PlanGenerationResult(plan=plan, stage=parsed.stage, prompt=prompt)
