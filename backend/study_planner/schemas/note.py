import re
from datetime import datetime

from study_planner.schemas.base import CamelModel


def subject_slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


class NotePublic(CamelModel):
    id: int
    subject: str
    title: str
    file_url: str
    public_id: str
    created_at: datetime
    updated_at: datetime


class NoteListResponse(CamelModel):
    success: bool = True
    data: list[NotePublic]


class SubjectSummary(CamelModel):
    id: str
    name: str
    documents_count: int


class SubjectListResponse(CamelModel):
    success: bool = True
    data: list[SubjectSummary]
