"""Recovery of a study plan from a possibly malformed model response.

Stages run in order and stop at the first candidate that both parses and
passes schema validation:

1. direct parse of the whole response
2. greedy ``{...}`` span
3. the object that owns the ``"weeks": [...]`` key
4. the ``"weeks"`` array alone, closed after its last complete element

Example braces in surrounding prose can still mislead stages 2 and 3.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import ValidationError

from study_planner.schemas.plan import GeneratedPlan
from study_planner.services.errors import PlanParseError, ResponseTooLongError

logger = logging.getLogger(__name__)

MAX_RESPONSE_CHARS = 10_000
EXCERPT_CHARS = 1000

_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")
_WEEKS_OBJECT = re.compile(r'\{[^{}]*?"weeks"\s*:\s*\[[\s\S]*\]\s*\}')
_WEEKS_ARRAY = re.compile(r'"weeks"\s*:\s*\[')
_CLOSERS = {"]": "[", "}": "{"}


class ParseStage(str, Enum):
    DIRECT = "direct"
    EXTRACTED = "extracted"
    PARTIAL_OBJECT = "partial_object"
    WEEKS_RESCUE = "weeks_rescue"


@dataclass(frozen=True)
class ParsedPlan:
    plan: GeneratedPlan
    stage: ParseStage


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _parse_direct(text: str) -> Any:
    return _loads(text)


def _parse_object_span(text: str) -> Any:
    match = _OBJECT_SPAN.search(text)
    return _loads(match.group(0)) if match else None


def _parse_weeks_object(text: str) -> Any:
    match = _WEEKS_OBJECT.search(text)
    return _loads(match.group(0)) if match else None


def close_truncated_array(text: str, start: int) -> str | None:
    """Return the JSON array opening at ``text[start]``.

    A complete array is returned as is. When the text ends first, the array is
    cut after the last element object that closed and the brackets still open
    at that point are closed, so a half-written trailing element is dropped.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    last_cut: tuple[int, list[str]] | None = None
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "[{":
            stack.append(char)
        elif char in "]}":
            if not stack or stack[-1] != _CLOSERS[char]:
                return None
            stack.pop()
            if not stack:
                return text[start : index + 1]
            if char == "}" and stack[-1] == "[":
                last_cut = (index + 1, list(stack))
    if last_cut is None:
        return None
    end, still_open = last_cut
    closing = "".join("]" if bracket == "[" else "}" for bracket in reversed(still_open))
    return text[start:end] + closing


def _rescue_weeks_array(text: str) -> Any:
    match = _WEEKS_ARRAY.search(text)
    if not match:
        return None
    array = close_truncated_array(text, match.end() - 1)
    if array is None:
        return None
    return _loads('{"weeks": ' + array + "}")


_STAGES: list[tuple[ParseStage, Callable[[str], Any]]] = [
    (ParseStage.DIRECT, _parse_direct),
    (ParseStage.EXTRACTED, _parse_object_span),
    (ParseStage.PARTIAL_OBJECT, _parse_weeks_object),
    (ParseStage.WEEKS_RESCUE, _rescue_weeks_array),
]


def _validate(candidate: Any, stage: ParseStage) -> GeneratedPlan | None:
    if not isinstance(candidate, dict):
        logger.debug("Stage %s produced a non-object candidate", stage.value)
        return None
    try:
        return GeneratedPlan.model_validate(candidate)
    except ValidationError as exc:
        logger.debug(
            "Stage %s candidate rejected by plan schema: %d errors",
            stage.value,
            exc.error_count(),
        )
        return None


def parse_plan_response(raw: str | None, max_chars: int = MAX_RESPONSE_CHARS) -> ParsedPlan:
    raw = raw or ""
    if len(raw) > max_chars:
        logger.error(
            "AI response too long (%d characters, limit %d); skipping recovery",
            len(raw),
            max_chars,
        )
        raise ResponseTooLongError(
            f"AI response too long ({len(raw)} characters); the plan was likely truncated",
            details={"responseLength": len(raw), "limit": max_chars},
        )

    text = raw.strip()
    for stage, extract in _STAGES:
        candidate = extract(text)
        if candidate is None:
            logger.debug("Stage %s found no parseable JSON", stage.value)
            continue
        plan = _validate(candidate, stage)
        if plan is not None:
            if stage is not ParseStage.DIRECT:
                logger.warning("Recovered study plan at stage %s", stage.value)
            return ParsedPlan(plan=plan, stage=stage)

    logger.error(
        "Failed to parse AI response (%d characters). Start: %r End: %r",
        len(raw),
        raw[:EXCERPT_CHARS],
        raw[-EXCERPT_CHARS:],
    )
    raise PlanParseError(
        "Failed to parse AI response as a study plan",
        details={
            "responseLength": len(raw),
            "responseStart": raw[:EXCERPT_CHARS],
            "responseEnd": raw[-EXCERPT_CHARS:],
        },
    )
