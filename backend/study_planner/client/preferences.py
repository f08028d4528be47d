from __future__ import annotations

from typing import Iterable, Sequence

from study_planner.schemas.plan import PlanPreferences


class PreferenceError(ValueError):
    pass


def collect_preferences(
    subjects: Sequence[str],
    hours: int,
    *,
    weeks: int = 4,
    preference: str = "morning",
    preferred_days: Sequence[str] = ("monday", "wednesday", "friday"),
    session_length: int = 60,
    break_length: int = 15,
    goals: str | None = None,
    focus_areas: Iterable[str] = (),
    exam_dates: str | None = None,
    available_subjects: Iterable[str] | None = None,
) -> PlanPreferences:
    """Check the form input before anything is sent to the planner."""
    chosen = [subject.strip() for subject in subjects if subject and subject.strip()]
    if not chosen:
        raise PreferenceError("Please select at least one subject")
    if not preferred_days:
        raise PreferenceError("Please select at least one preferred day")
    if available_subjects is not None:
        known = {name.lower() for name in available_subjects}
        unknown = [subject for subject in chosen if subject.lower() not in known]
        if unknown:
            raise PreferenceError(f"Unknown subjects: {', '.join(unknown)}")

    return PlanPreferences(
        subjects=chosen,
        hours=hours,
        weeks=weeks,
        preference=preference,
        preferred_days=list(preferred_days),
        session_length=session_length,
        break_length=break_length,
        goals=goals or None,
        focus_areas=list(focus_areas),
        exam_dates=exam_dates or None,
    )
