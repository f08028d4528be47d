from datetime import datetime

from pydantic import Field

from study_planner.models.study_session import SessionStatus
from study_planner.schemas.base import CamelModel


class DocumentSummary(CamelModel):
    id: int
    title: str | None
    file_url: str | None
    type: str


class StudySessionBase(CamelModel):
    subject: str = Field(min_length=1)
    start_time: datetime
    end_time: datetime
    description: str | None = None
    document_id: int | None = None


class StudySessionCreate(StudySessionBase):
    status: SessionStatus = SessionStatus.SCHEDULED
    progress: int = Field(default=0, ge=0, le=100)
    is_ai_generated: bool = Field(default=False, alias="isAIGenerated")
    generation_id: str | None = Field(default=None, max_length=64)


class StudySessionUpdate(StudySessionBase):
    pass


class StudySessionPatch(CamelModel):
    status: SessionStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    description: str | None = None


class StudySessionPublic(CamelModel):
    id: int
    subject: str
    start_time: datetime
    end_time: datetime
    description: str | None
    status: SessionStatus
    progress: int
    is_ai_generated: bool = Field(alias="isAIGenerated")
    document_id: int | None
    generation_id: str | None = None
    documents: list[DocumentSummary] = Field(default_factory=list)


class DummySessionResponse(CamelModel):
    session: StudySessionPublic
    document: DocumentSummary
    message: str
