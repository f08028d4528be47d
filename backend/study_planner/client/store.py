"""Client-side calendar state.

Local writes land here immediately; ``reconcile`` then lays the server's list
over them. A session whose create request failed stays visible as local-only
until the server reports a session with the same subject and start time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable


def parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class CalendarEvent:
    subject: str
    start_time: datetime
    end_time: datetime
    description: str = ""
    status: str = "scheduled"
    progress: int = 0
    is_ai_generated: bool = False
    id: int | None = None
    local_only: bool = False

    def __post_init__(self) -> None:
        self.start_time = parse_timestamp(self.start_time)
        self.end_time = parse_timestamp(self.end_time)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CalendarEvent":
        return cls(
            id=data["id"],
            subject=data["subject"],
            start_time=parse_timestamp(data["startTime"]),
            end_time=parse_timestamp(data["endTime"]),
            description=data.get("description") or "",
            status=data.get("status", "scheduled"),
            progress=data.get("progress", 0),
            is_ai_generated=data.get("isAIGenerated", False),
        )

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.subject, self.start_time)


@dataclass
class ReconcileResult:
    confirmed: int
    local_only: int


@dataclass
class SessionStore:
    _events: list[CalendarEvent] = field(default_factory=list)

    @property
    def events(self) -> list[CalendarEvent]:
        return sorted(self._events, key=lambda event: event.start_time)

    @property
    def local_only(self) -> list[CalendarEvent]:
        return [event for event in self.events if event.local_only]

    def add(self, event: CalendarEvent) -> None:
        self._events.append(event)

    def remove(self, event: CalendarEvent) -> None:
        self._events = [existing for existing in self._events if existing is not event]

    def future(self, now: datetime | None = None) -> list[CalendarEvent]:
        """Events starting today (from local midnight) or later."""
        now = now or datetime.now().astimezone()
        if now.tzinfo is None:
            now = now.astimezone()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return [event for event in self.events if event.start_time >= midnight]

    def reconcile(self, server_events: Iterable[CalendarEvent]) -> ReconcileResult:
        confirmed = list(server_events)
        server_keys = {event.key for event in confirmed}
        pending = [
            event
            for event in self._events
            if event.local_only and event.key not in server_keys
        ]
        self._events = confirmed + pending
        return ReconcileResult(confirmed=len(confirmed), local_only=len(pending))
