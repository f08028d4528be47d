from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from study_planner.client.store import CalendarEvent
from study_planner.schemas.note import subject_slug

PALETTE = (
    "#4F46E5",
    "#0EA5E9",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#14B8A6",
)


@dataclass
class Subject:
    id: str
    name: str
    color: str
    documents_count: int = 0
    progress: int = 0


def derive_subjects(
    subject_counts: Mapping[str, int], events: Iterable[CalendarEvent] = ()
) -> list[Subject]:
    """Merge per-subject note counts with the sessions in the calendar.

    Progress is the average session progress for that subject, rounded.
    """
    progress: dict[str, list[int]] = {}
    for event in events:
        progress.setdefault(event.subject, []).append(event.progress)

    names = list(subject_counts)
    names.extend(name for name in progress if name not in subject_counts)

    subjects = []
    for index, name in enumerate(names):
        values = progress.get(name, [])
        subjects.append(
            Subject(
                id=subject_slug(name),
                name=name,
                color=PALETTE[index % len(PALETTE)],
                documents_count=subject_counts.get(name, 0),
                progress=round(sum(values) / len(values)) if values else 0,
            )
        )
    return subjects
