from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from study_planner.db.base import Base


class SessionStatus(str, PyEnum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    MISSED = "missed"
    DELETED = "deleted"


class StudySession(Base):
    __tablename__ = "study_sessions"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_study_sessions_time_order"),
        CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_study_sessions_progress"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(
        Integer, ForeignKey("study_plans.id", ondelete="CASCADE"), nullable=False
    )
    subject = Column(String(255), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(SessionStatus), nullable=False, default=SessionStatus.SCHEDULED
    )
    progress = Column(Integer, nullable=False, default=0)
    is_ai_generated = Column(Boolean, nullable=False, default=False)
    document_id = Column(
        Integer, ForeignKey("notes.id", ondelete="SET NULL"), nullable=True
    )
    # Shared by every session created from one plan generation request
    generation_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    plan = relationship("StudyPlan", back_populates="sessions")
    document = relationship("Note")
