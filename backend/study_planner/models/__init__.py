from study_planner.models.user import User
from study_planner.models.note import Note
from study_planner.models.study_plan import StudyPlan
from study_planner.models.study_session import StudySession

__all__ = [
    "User",
    "Note",
    "StudyPlan",
    "StudySession",
]
