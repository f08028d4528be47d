from datetime import date

import pytest
from pydantic import ValidationError

from study_planner.schemas.plan import PlanPreferences, Weekday
from study_planner.services.plan_prompt import build_plan_prompt, week_cap_for


@pytest.mark.parametrize("weeks, expected", [(1, 1), (4, 4), (8, 8), (12, 8), (52, 8)])
def test_week_cap(weeks, expected):
    assert week_cap_for(weeks) == expected


def test_prompt_caps_weeks_and_names_subjects_exactly():
    preferences = PlanPreferences(subjects=["Linear Algebra", "Chemistry"], hours=10, weeks=12)

    prompt = build_plan_prompt(preferences, start_date=date(2026, 11, 2))

    assert prompt.week_cap == 8
    assert "exactly 8 weeks starting on 2026-11-02" in prompt.user
    assert '"Linear Algebra", "Chemistry"' in prompt.user
    assert "Monday, Wednesday, Friday" in prompt.user
    assert "JSON" in prompt.system
    assert [message["role"] for message in prompt.messages()] == ["system", "user"]


def test_optional_sections_only_when_provided():
    bare = build_plan_prompt(PlanPreferences(subjects=["Math"], hours=5))
    assert "focus areas" not in bare.user
    assert "Upcoming exams" not in bare.user
    assert "Student goals" not in bare.user

    full = build_plan_prompt(
        PlanPreferences(
            subjects=["Math"],
            hours=5,
            goals="Pass the final",
            focusAreas=["integrals"],
            examDates="Dec 12",
        )
    )
    assert "integrals" in full.user
    assert "Upcoming exams: Dec 12" in full.user
    assert "Student goals: Pass the final" in full.user


def test_preferences_accept_camel_case_and_normalise():
    preferences = PlanPreferences.model_validate(
        {
            "subjects": [" Math ", "Math", "", "Physics"],
            "hours": 6,
            "preferredDays": ["Tuesday", "SATURDAY"],
            "sessionLength": 45,
            "breakLength": 10,
        }
    )

    assert preferences.subjects == ["Math", "Physics"]
    assert preferences.preferred_days == [Weekday.TUESDAY, Weekday.SATURDAY]
    assert preferences.session_length == 45


@pytest.mark.parametrize(
    "payload",
    [
        {"subjects": [], "hours": 5},
        {"subjects": ["  "], "hours": 5},
        {"subjects": ["Math"], "hours": 0},
        {"subjects": ["Math"], "hours": 5, "preference": "midnight"},
        {"subjects": ["Math"], "hours": 5, "preferredDays": ["someday"]},
    ],
)
def test_invalid_preferences(payload):
    with pytest.raises(ValidationError):
        PlanPreferences.model_validate(payload)
