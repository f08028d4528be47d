import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from study_planner.api import deps
from study_planner.core.config import Settings, get_settings
from study_planner.llm.adapter import LLMAdapter
from study_planner.llm.factory import get_llm_adapter
from study_planner.models.user import User
from study_planner.schemas.groq import ChatRequest, TextRequest
from study_planner.schemas.plan import PlanPreferences, StudyPlanResponse
from study_planner.services import study_plan as study_plan_service
from study_planner.services import study_tools
from study_planner.services.errors import PlanGenerationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_response(exc: PlanGenerationError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": jsonable_encoder(exc.details)},
    )


@router.post("/studyplan", response_model=StudyPlanResponse)
def generate_study_plan(
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(deps.get_current_user),
    adapter: LLMAdapter = Depends(get_llm_adapter),
    settings: Settings = Depends(get_settings),
):
    try:
        preferences = PlanPreferences.model_validate(payload)
    except ValidationError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid study plan preferences",
                "details": [
                    {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
                    for error in exc.errors()
                ],
            },
        )

    logger.info("Study plan requested by user %s", current_user.id)
    try:
        result = study_plan_service.generate_study_plan(
            adapter, preferences, max_response_chars=settings.max_response_chars
        )
    except PlanGenerationError as exc:
        logger.error("Study plan generation failed: %s", exc.message)
        return _error_response(exc)

    session_count = len(result.sessions)
    return StudyPlanResponse(
        success=True,
        plan=result.plan,
        message=(
            f"Study plan generated with {session_count} sessions "
            f"over {len(result.plan.weeks)} weeks"
        ),
    )


@router.post("/summary")
def summarize_text(
    payload: TextRequest,
    adapter: LLMAdapter = Depends(get_llm_adapter),
):
    try:
        return study_tools.summarize(adapter, payload.text)
    except PlanGenerationError as exc:
        return _error_response(exc)


@router.post("/quiz")
def generate_quiz(
    payload: TextRequest,
    adapter: LLMAdapter = Depends(get_llm_adapter),
):
    try:
        return study_tools.build_quiz(adapter, payload.text)
    except PlanGenerationError as exc:
        return _error_response(exc)


@router.post("/chat")
def chat(
    payload: ChatRequest,
    adapter: LLMAdapter = Depends(get_llm_adapter),
):
    messages = [message.model_dump() for message in payload.messages]
    try:
        return study_tools.chat(adapter, messages)
    except PlanGenerationError as exc:
        return _error_response(exc)
