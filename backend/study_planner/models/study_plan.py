from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from study_planner.db.base import Base

DEFAULT_PLAN_TITLE = "My Study Plan"
DEFAULT_PLAN_DESCRIPTION = "Weekly study schedule"
DEFAULT_WEEKLY_GOAL = 20


class StudyPlan(Base):
    __tablename__ = "study_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    title = Column(String(255), nullable=False, default=DEFAULT_PLAN_TITLE)
    description = Column(String(1024), nullable=True, default=DEFAULT_PLAN_DESCRIPTION)
    weekly_goal = Column(Integer, nullable=False, default=DEFAULT_WEEKLY_GOAL)
    subjects = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    user = relationship("User", back_populates="study_plan")
    sessions = relationship(
        "StudySession",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="StudySession.start_time",
    )

    def add_subject(self, subject: str) -> None:
        # JSON columns only track reassignment, not in-place mutation
        if subject not in (self.subjects or []):
            self.subjects = [*(self.subjects or []), subject]
