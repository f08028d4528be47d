"""Prompt construction for AI study plan generation.

The model is asked for a single JSON object and nothing else. Output size is
bounded by capping the number of weeks and the description length, since the
provider cuts off oversized completions mid-structure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from study_planner.schemas.plan import PlanPreferences, TimePreference

MAX_PLAN_WEEKS = 8
MAX_DESCRIPTION_CHARS = 100

TIME_WINDOWS = {
    TimePreference.MORNING: "Morning (6 AM - 12 PM)",
    TimePreference.AFTERNOON: "Afternoon (12 PM - 5 PM)",
    TimePreference.EVENING: "Evening (5 PM - 9 PM)",
    TimePreference.NIGHT: "Late Night (9 PM - 1 AM)",
    TimePreference.FLEXIBLE: "Flexible / Anytime (8 AM - 9 PM)",
}

PLAN_SCHEMA_EXAMPLE = (
    '{"weeks":[{"weekNumber":1,"sessions":[{"subject":"<subject>",'
    '"startTime":"YYYY-MM-DDTHH:MM:SS.000Z","endTime":"YYYY-MM-DDTHH:MM:SS.000Z",'
    '"description":"<short description>","learningStyle":"<style>"}]}]}'
)

SYSTEM_PROMPT = (
    "You are an academic planning assistant that builds realistic weekly study schedules.\n"
    "You respond ONLY with a single JSON object. No Markdown, no code fences, no explanations, "
    "no text before or after the JSON.\n"
    "The JSON object must match exactly this structure:\n"
    f"{PLAN_SCHEMA_EXAMPLE}\n"
    "Every session must have subject, startTime, endTime, description and learningStyle. "
    "Times are ISO 8601 in UTC and endTime is always after startTime.\n"
    f"Keep every description under {MAX_DESCRIPTION_CHARS} characters."
)


@dataclass(frozen=True)
class PlanPrompt:
    system: str
    user: str
    week_cap: int

    def messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


def week_cap_for(weeks: int) -> int:
    return min(weeks, MAX_PLAN_WEEKS)


def _sessions_per_week(preferences: PlanPreferences) -> int:
    minutes = preferences.hours * 60
    return max(1, round(minutes / preferences.session_length))


def build_plan_prompt(
    preferences: PlanPreferences, start_date: date | None = None
) -> PlanPrompt:
    start_date = start_date or date.today()
    week_cap = week_cap_for(preferences.weeks)
    days = ", ".join(day.value.capitalize() for day in preferences.preferred_days)
    subjects = ", ".join(f'"{subject}"' for subject in preferences.subjects)

    lines = [
        f"Create a study plan for exactly {week_cap} weeks starting on {start_date.isoformat()}.",
        f"Subjects (use these names exactly, character for character): {subjects}.",
        f"Weekly study time: {preferences.hours} hours "
        f"(about {_sessions_per_week(preferences)} sessions per week).",
        f"Preferred time of day: {TIME_WINDOWS[preferences.preference]}.",
        f"Each session lasts {preferences.session_length} minutes.",
        f"Leave {preferences.break_length} minutes of break between consecutive sessions."
        if preferences.break_length
        else "Sessions may run back to back without breaks.",
        f"Only schedule sessions on: {days}.",
    ]
    if preferences.focus_areas:
        lines.append("Give extra time to these focus areas: " + ", ".join(preferences.focus_areas) + ".")
    if preferences.exam_dates:
        lines.append(f"Upcoming exams: {preferences.exam_dates}. Increase review sessions before them.")
    if preferences.goals:
        lines.append(f"Student goals: {preferences.goals}")
    lines.extend(
        [
            "Balance the subjects across each week and interleave them rather than grouping one subject per day.",
            f"Do not include more than {week_cap} weeks. Number the weeks from 1 to {week_cap}.",
            f"Descriptions must be short (under {MAX_DESCRIPTION_CHARS} characters).",
            "learningStyle is one of: reading, practice, review, active-recall, balanced.",
            "Respond ONLY with the JSON object.",
        ]
    )
    return PlanPrompt(system=SYSTEM_PROMPT, user="\n".join(lines), week_cap=week_cap)
