import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from study_planner.api import deps
from study_planner.core.config import Settings, get_settings
from study_planner.db.session import get_db
from study_planner.models.note import Note
from study_planner.models.study_session import StudySession
from study_planner.models.user import User
from study_planner.schemas.note import (
    NoteListResponse,
    NotePublic,
    SubjectListResponse,
    SubjectSummary,
    subject_slug,
)
from study_planner.storage.base import FileStorage, StorageError
from study_planner.storage.factory import get_file_storage

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_CONTENT_TYPES = {"application/pdf"}
UPLOAD_FOLDER = "pdf-notes"


def _serialize_note(note: Note) -> NotePublic:
    return NotePublic(
        id=note.id,
        subject=note.subject,
        title=note.title,
        file_url=note.secure_url,
        public_id=note.public_id,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def _get_note_or_404(db: Session, note_id: int, user: User) -> Note:
    note = db.query(Note).filter(Note.id == note_id, Note.user_id == user.id).first()
    if not note:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return note


@router.post("/upload", response_model=NotePublic, status_code=status.HTTP_201_CREATED)
def upload_note(
    note: UploadFile | None = File(default=None),
    subject: str | None = Form(default=None),
    title: str | None = Form(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
    storage: FileStorage = Depends(get_file_storage),
    settings: Settings = Depends(get_settings),
) -> NotePublic:
    if note is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if not subject or not subject.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Subject is required")
    if note.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Only PDF files are allowed"
        )
    data = note.file.read()
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large"
        )

    filename = note.filename or "note.pdf"
    logger.info(
        "Upload from user %s: %s (%d bytes) for %s",
        current_user.id,
        filename,
        len(data),
        subject,
    )
    try:
        stored = storage.upload(
            data, filename=filename, folder=UPLOAD_FOLDER, content_type=note.content_type
        )
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    record = Note(
        user_id=current_user.id,
        subject=subject.strip(),
        title=(title or "").strip() or filename,
        file_url=stored.url,
        public_id=stored.public_id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return _serialize_note(record)


@router.get("", response_model=NoteListResponse)
def list_notes(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> NoteListResponse:
    notes = (
        db.query(Note)
        .filter(Note.user_id == current_user.id)
        .order_by(Note.created_at.desc(), Note.id.desc())
        .all()
    )
    return NoteListResponse(data=[_serialize_note(note) for note in notes])


@router.get("/subjects", response_model=SubjectListResponse)
def list_subjects(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> SubjectListResponse:
    counts: dict[str, int] = {}
    for note in db.query(Note).filter(Note.user_id == current_user.id).order_by(Note.id):
        counts[note.subject] = counts.get(note.subject, 0) + 1
    return SubjectListResponse(
        data=[
            SubjectSummary(id=subject_slug(name), name=name, documents_count=count)
            for name, count in counts.items()
        ]
    )


@router.get("/view/{note_id}")
def view_note(
    note_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
    storage: FileStorage = Depends(get_file_storage),
) -> Response:
    note = _get_note_or_404(db, note_id, current_user)
    try:
        content = storage.read(note.public_id)
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{note.title}.pdf"'},
    )


@router.delete("/clear-all")
def clear_notes(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
    storage: FileStorage = Depends(get_file_storage),
) -> dict[str, object]:
    notes = db.query(Note).filter(Note.user_id == current_user.id).all()
    for note in notes:
        try:
            storage.delete(note.public_id)
        except StorageError:
            # metadata goes regardless
            logger.warning("Could not delete stored file %s", note.public_id)
    note_ids = [note.id for note in notes]
    if note_ids:
        db.query(StudySession).filter(StudySession.document_id.in_(note_ids)).update(
            {StudySession.document_id: None}, synchronize_session=False
        )
    for note in notes:
        db.delete(note)
    db.commit()
    return {
        "success": True,
        "message": f"Successfully deleted {len(notes)} notes and their associated files",
    }


@router.get("/{note_id}", response_model=NotePublic)
def get_note(
    note_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> NotePublic:
    return _serialize_note(_get_note_or_404(db, note_id, current_user))


@router.delete("/{note_id}")
def delete_note(
    note_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
    storage: FileStorage = Depends(get_file_storage),
) -> dict[str, str]:
    note = _get_note_or_404(db, note_id, current_user)
    try:
        storage.delete(note.public_id)
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    db.query(StudySession).filter(StudySession.document_id == note.id).update(
        {StudySession.document_id: None}, synchronize_session=False
    )
    db.delete(note)
    db.commit()
    logger.info("Deleted note %s", note_id)
    return {"message": "Note deleted successfully"}
