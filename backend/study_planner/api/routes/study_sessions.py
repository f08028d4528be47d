import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from study_planner.api import deps
from study_planner.db.session import get_db
from study_planner.models.note import Note
from study_planner.models.study_plan import StudyPlan
from study_planner.models.study_session import SessionStatus, StudySession
from study_planner.models.user import User
from study_planner.schemas.session import (
    DocumentSummary,
    DummySessionResponse,
    StudySessionCreate,
    StudySessionPatch,
    StudySessionPublic,
    StudySessionUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_naive_utc(dt: datetime) -> datetime:
    """Sessions are stored as naive UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _as_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _serialize_document(note: Note) -> DocumentSummary:
    return DocumentSummary(
        id=note.id,
        title=note.title,
        file_url=note.secure_url if note.file_url else None,
        type=note.file_type,
    )


def _serialize_session(
    session: StudySession, documents: list[DocumentSummary] | None = None
) -> StudySessionPublic:
    return StudySessionPublic(
        id=session.id,
        subject=session.subject,
        start_time=_as_aware(session.start_time),
        end_time=_as_aware(session.end_time),
        description=session.description,
        status=session.status,
        progress=session.progress,
        is_ai_generated=session.is_ai_generated,
        document_id=session.document_id,
        generation_id=session.generation_id,
        documents=documents or [],
    )


def _get_or_create_plan(db: Session, user: User) -> StudyPlan:
    plan = db.query(StudyPlan).filter(StudyPlan.user_id == user.id).first()
    if not plan:
        logger.info("Creating study plan for user %s", user.id)
        plan = StudyPlan(user_id=user.id, subjects=[])
        db.add(plan)
        db.commit()
        db.refresh(plan)
    return plan


def _get_plan_or_404(db: Session, user: User) -> StudyPlan:
    plan = db.query(StudyPlan).filter(StudyPlan.user_id == user.id).first()
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Study plan not found"
        )
    return plan


def _get_session_or_404(db: Session, plan: StudyPlan, session_id: int) -> StudySession:
    session = (
        db.query(StudySession)
        .filter(StudySession.id == session_id, StudySession.plan_id == plan.id)
        .first()
    )
    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    return session


def _documents_by_subject(
    db: Session, user: User, subjects: set[str]
) -> dict[str, list[DocumentSummary]]:
    if not subjects:
        return {}
    notes = (
        db.query(Note)
        .filter(Note.user_id == user.id, Note.subject.in_(subjects))
        .order_by(Note.created_at.desc())
        .all()
    )
    grouped: dict[str, list[DocumentSummary]] = defaultdict(list)
    for note in notes:
        grouped[note.subject].append(_serialize_document(note))
    return grouped


def _validate_session_times(start_time: datetime, end_time: datetime) -> None:
    if _as_aware(end_time) <= _as_aware(start_time):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End time must be after start time",
        )


def _resolve_document(
    db: Session, user: User, document_id: int | None, subject: str
) -> Note | None:
    if document_id is None:
        return None
    note = (
        db.query(Note)
        .filter(Note.id == document_id, Note.user_id == user.id, Note.subject == subject)
        .first()
    )
    if not note:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Document not found or does not match subject",
        )
    return note


@router.get("", response_model=list[StudySessionPublic])
def list_sessions(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> list[StudySessionPublic]:
    plan = _get_or_create_plan(db, current_user)
    sessions = plan.sessions
    documents = _documents_by_subject(db, current_user, {s.subject for s in sessions})
    return [_serialize_session(s, documents.get(s.subject)) for s in sessions]


@router.post("/create-dummy", response_model=DummySessionResponse, status_code=status.HTTP_201_CREATED)
def create_dummy_session(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> DummySessionResponse:
    """Create a one-hour session starting in an hour for the first subject with notes."""
    note = (
        db.query(Note)
        .filter(Note.user_id == current_user.id)
        .order_by(Note.created_at.asc())
        .first()
    )
    if not note:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No subjects available. Please add documents in the Notebook first.",
        )
    plan = _get_or_create_plan(db, current_user)
    start_time = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=1)
    session = StudySession(
        plan_id=plan.id,
        subject=note.subject,
        start_time=start_time,
        end_time=start_time + timedelta(hours=1),
        description=f"Dummy study session for testing with {note.subject}",
        status=SessionStatus.SCHEDULED,
        document_id=note.id,
    )
    plan.add_subject(note.subject)
    db.add(session)
    db.commit()
    db.refresh(session)
    document = _serialize_document(note)
    return DummySessionResponse(
        session=_serialize_session(session, [document]),
        document=document,
        message=f"Dummy session created with subject: {note.subject}",
    )


@router.get("/{session_id}", response_model=StudySessionPublic)
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> StudySessionPublic:
    plan = _get_plan_or_404(db, current_user)
    session = _get_session_or_404(db, plan, session_id)
    documents = _documents_by_subject(db, current_user, {session.subject})
    return _serialize_session(session, documents.get(session.subject))


@router.post("", response_model=StudySessionPublic, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: StudySessionCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> StudySessionPublic:
    _validate_session_times(payload.start_time, payload.end_time)
    document = _resolve_document(db, current_user, payload.document_id, payload.subject)
    plan = _get_or_create_plan(db, current_user)
    start_time = _to_naive_utc(payload.start_time)

    if payload.generation_id:
        existing = (
            db.query(StudySession)
            .filter(
                StudySession.plan_id == plan.id,
                StudySession.generation_id == payload.generation_id,
                StudySession.subject == payload.subject,
                StudySession.start_time == start_time,
            )
            .first()
        )
        if existing:
            logger.info(
                "Session for generation %s already exists (%s)",
                payload.generation_id,
                existing.id,
            )
            response.status_code = status.HTTP_200_OK
            return _serialize_session(existing)

    session = StudySession(
        plan_id=plan.id,
        subject=payload.subject,
        start_time=start_time,
        end_time=_to_naive_utc(payload.end_time),
        description=payload.description,
        status=payload.status,
        progress=payload.progress,
        is_ai_generated=payload.is_ai_generated,
        document_id=document.id if document else None,
        generation_id=payload.generation_id,
    )
    plan.add_subject(payload.subject)
    db.add(session)
    db.commit()
    db.refresh(session)
    return _serialize_session(session, [_serialize_document(document)] if document else None)


@router.put("/{session_id}", response_model=StudySessionPublic)
def update_session(
    session_id: int,
    payload: StudySessionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> StudySessionPublic:
    _validate_session_times(payload.start_time, payload.end_time)
    document = _resolve_document(db, current_user, payload.document_id, payload.subject)
    plan = _get_plan_or_404(db, current_user)
    session = _get_session_or_404(db, plan, session_id)

    session.subject = payload.subject
    session.start_time = _to_naive_utc(payload.start_time)
    session.end_time = _to_naive_utc(payload.end_time)
    session.description = payload.description
    if document:
        session.document_id = document.id
    plan.add_subject(payload.subject)
    db.add(session)
    db.commit()
    db.refresh(session)
    return _serialize_session(session)


@router.patch("/{session_id}", response_model=StudySessionPublic)
def patch_session(
    session_id: int,
    payload: StudySessionPatch,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> StudySessionPublic:
    plan = _get_plan_or_404(db, current_user)
    session = _get_session_or_404(db, plan, session_id)

    if payload.description is not None:
        session.description = payload.description
    if payload.progress is not None:
        session.progress = payload.progress
    # Reaching 100% and being marked completed are the same event
    if payload.status is not None:
        session.status = payload.status
    elif payload.progress == 100:
        session.status = SessionStatus.COMPLETED
    if payload.status == SessionStatus.COMPLETED:
        session.progress = 100

    db.add(session)
    db.commit()
    db.refresh(session)
    return _serialize_session(session)


@router.delete("/{session_id}")
def delete_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> dict[str, str]:
    plan = _get_plan_or_404(db, current_user)
    session = _get_session_or_404(db, plan, session_id)
    db.delete(session)
    db.commit()
    return {"message": "Session deleted successfully"}
