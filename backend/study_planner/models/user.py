from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from study_planner.db.base import Base

CASCADE_ALL_DELETE_ORPHAN = "all, delete-orphan"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)
    # Null for accounts created through an external identity provider
    hashed_password = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    study_plan = relationship(
        "StudyPlan",
        back_populates="user",
        uselist=False,
        cascade=CASCADE_ALL_DELETE_ORPHAN,
    )
    notes = relationship(
        "Note", back_populates="user", cascade=CASCADE_ALL_DELETE_ORPHAN
    )
