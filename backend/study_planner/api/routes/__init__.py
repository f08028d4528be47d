from fastapi import APIRouter, Depends

from study_planner.api import deps
from study_planner.api.routes import (
    auth,
    groq,
    notes,
    study_sessions,
)


api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(
    study_sessions.router, prefix="/api/study-sessions", tags=["study-sessions"]
)
api_router.include_router(notes.router, prefix="/api/notes", tags=["notes"])
api_router.include_router(
    groq.router,
    prefix="/api/groq",
    tags=["groq"],
    dependencies=[Depends(deps.get_current_user)],
)
