import json
import logging
from datetime import datetime, timezone

import pytest

from study_planner.services import plan_parser
from study_planner.services.errors import PlanParseError, ResponseTooLongError
from study_planner.services.plan_parser import (
    ParseStage,
    close_truncated_array,
    parse_plan_response,
)


def _session(subject, day, hour=9):
    return {
        "subject": subject,
        "startTime": f"2026-11-{day:02d}T{hour:02d}:00:00Z",
        "endTime": f"2026-11-{day:02d}T{hour + 1:02d}:00:00Z",
        "description": "Practice problems",
        "learningStyle": "practice",
    }


def test_direct_parse(plan_json):
    parsed = parse_plan_response(plan_json(weeks=2, sessions_per_week=3))

    assert parsed.stage is ParseStage.DIRECT
    assert [week.week_number for week in parsed.plan.weeks] == [1, 2]
    assert len(parsed.plan.flatten()) == 6


def test_markdown_fence_is_extracted(plan_json):
    raw = "Here is your plan:\n```json\n" + plan_json(weeks=1) + "\n```\nGood luck!"

    parsed = parse_plan_response(raw)

    assert parsed.stage is ParseStage.EXTRACTED
    assert len(parsed.plan.weeks) == 1


def test_example_braces_fall_through_to_weeks_object(plan_json):
    raw = 'Format used: {"note": "example"}\n' + plan_json(weeks=1) + "\nThat is all."

    parsed = parse_plan_response(raw)

    assert parsed.stage is ParseStage.PARTIAL_OBJECT
    assert parsed.plan.weeks[0].sessions[0].subject == "Math"


def test_truncated_response_keeps_complete_sessions_only():
    week_one = {"weekNumber": 1, "sessions": [_session("Math", 2), _session("Physics", 4)]}
    complete_week_two_session = json.dumps(_session("Math", 9))
    raw = (
        '{"weeks": ['
        + json.dumps(week_one)
        + ', {"weekNumber": 2, "sessions": ['
        + complete_week_two_session
        + ', {"subject": "Physics", "startTime": "2026-11-11T09:0'
    )

    parsed = parse_plan_response(raw)

    assert parsed.stage is ParseStage.WEEKS_RESCUE
    assert [len(week.sessions) for week in parsed.plan.weeks] == [2, 1]
    assert parsed.plan.weeks[1].sessions[0].subject == "Math"


def test_session_missing_start_time_is_rejected():
    session = _session("Math", 2)
    del session["startTime"]
    raw = json.dumps({"weeks": [{"weekNumber": 1, "sessions": [session]}]})

    with pytest.raises(PlanParseError) as excinfo:
        parse_plan_response(raw)

    assert excinfo.value.details["responseLength"] == len(raw)
    assert excinfo.value.details["responseStart"] == raw[:1000]


def test_session_ending_before_it_starts_is_rejected():
    session = _session("Math", 2)
    session["endTime"] = "2026-11-02T08:00:00Z"
    raw = json.dumps({"weeks": [{"weekNumber": 1, "sessions": [session]}]})

    with pytest.raises(PlanParseError):
        parse_plan_response(raw)


def test_prose_only_response_reports_excerpts():
    raw = "I'm sorry, I can't help with that. " * 60

    with pytest.raises(PlanParseError) as excinfo:
        parse_plan_response(raw)

    details = excinfo.value.details
    assert details["responseStart"] == raw[:1000]
    assert details["responseEnd"] == raw[-1000:]


def test_empty_response_fails_to_parse():
    with pytest.raises(PlanParseError):
        parse_plan_response(None)


def test_over_length_response_is_refused_even_when_valid(make_plan, monkeypatch, caplog):
    raw = json.dumps(make_plan(weeks=8, sessions_per_week=12))
    assert len(raw) > 10_000
    attempted = []
    monkeypatch.setattr(
        plan_parser,
        "_STAGES",
        [(stage, lambda text, stage=stage: attempted.append(stage)) for stage, _ in plan_parser._STAGES],
    )
    caplog.set_level(logging.DEBUG, logger=plan_parser.__name__)

    with pytest.raises(ResponseTooLongError) as excinfo:
        parse_plan_response(raw)

    assert "truncated" in excinfo.value.message
    assert excinfo.value.details == {"responseLength": len(raw), "limit": 10_000}
    assert attempted == []
    assert not [r for r in caplog.records if r.getMessage().startswith("Stage")]


def test_limit_is_configurable(plan_json):
    raw = plan_json(weeks=1, sessions_per_week=1)

    with pytest.raises(ResponseTooLongError):
        parse_plan_response(raw, max_chars=len(raw) - 1)
    assert parse_plan_response(raw, max_chars=len(raw)).stage is ParseStage.DIRECT


def test_close_truncated_array_returns_complete_array_unchanged():
    text = '"weeks": [{"a": "]"}, {"b": [1, 2]}] trailing'
    start = text.index("[")

    assert close_truncated_array(text, start) == '[{"a": "]"}, {"b": [1, 2]}]'


def test_close_truncated_array_ignores_brackets_inside_strings():
    text = '[{"a": "} ] {"}, {"b": "unterminated'

    assert close_truncated_array(text, 0) == '[{"a": "} ] {"}]'


def test_close_truncated_array_without_complete_element():
    assert close_truncated_array('[{"subject": "Ma', 0) is None


def test_times_without_offset_are_read_as_utc():
    raw = json.dumps(
        {
            "weeks": [
                {
                    "weekNumber": 1,
                    "sessions": [
                        {
                            "subject": "Math",
                            "startTime": "2026-11-03T09:00:00",
                            "endTime": "2026-11-03T10:00:00",
                        }
                    ],
                }
            ]
        }
    )

    (session,) = parse_plan_response(raw).plan.flatten()

    assert session.start_time == datetime(2026, 11, 3, 9, tzinfo=timezone.utc)
    assert session.end_time.tzinfo is not None
