from datetime import datetime, timezone
from enum import Enum

from pydantic import Field, field_validator, model_validator

from study_planner.schemas.base import CamelModel


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimePreference(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    FLEXIBLE = "flexible"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class PlanPreferences(CamelModel):
    """What the student asks the planner for."""

    subjects: list[str] = Field(min_length=1)
    hours: int = Field(ge=1, le=40)
    weeks: int = Field(default=4, ge=1, le=52)
    preference: TimePreference = TimePreference.MORNING
    goals: str | None = None
    session_length: int = Field(default=60, ge=5, le=480)
    break_length: int = Field(default=15, ge=0, le=120)
    preferred_days: list[Weekday] = Field(
        default_factory=lambda: [Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY]
    )
    focus_areas: list[str] = Field(default_factory=list)
    exam_dates: str | None = None

    @field_validator("subjects")
    @classmethod
    def _clean_subjects(cls, value: list[str]) -> list[str]:
        cleaned: list[str] = []
        for subject in value:
            subject = subject.strip()
            if subject and subject not in cleaned:
                cleaned.append(subject)
        if not cleaned:
            raise ValueError("At least one subject is required")
        return cleaned

    @field_validator("preferred_days", mode="before")
    @classmethod
    def _lowercase_days(cls, value):
        if isinstance(value, list):
            return [day.strip().lower() if isinstance(day, str) else day for day in value]
        return value

    @field_validator("focus_areas")
    @classmethod
    def _clean_focus_areas(cls, value: list[str]) -> list[str]:
        return [area.strip() for area in value if area and area.strip()]


class PlannedSession(CamelModel):
    subject: str = Field(min_length=1)
    start_time: datetime
    end_time: datetime
    description: str = ""
    learning_style: str = "balanced"

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalise_timezone(cls, value: datetime) -> datetime:
        # naive model output is read as UTC
        return _as_utc(value)

    @model_validator(mode="after")
    def _check_time_order(self) -> "PlannedSession":
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class PlanWeek(CamelModel):
    week_number: int = Field(ge=1)
    sessions: list[PlannedSession]


class GeneratedPlan(CamelModel):
    weeks: list[PlanWeek] = Field(min_length=1)

    def flatten(self) -> list[PlannedSession]:
        return [session for week in self.weeks for session in week.sessions]


class StudyPlanResponse(CamelModel):
    success: bool = True
    plan: GeneratedPlan
    message: str
