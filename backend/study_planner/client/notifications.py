from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class Level(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    title: str
    message: str = ""


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


@dataclass
class RecordingNotifier:
    notifications: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)


_HINTS = (
    (("truncated", "too long"), "Try fewer subjects or fewer weeks so the plan fits in one response."),
    (("api key",), "The AI service is not configured on the server. Check GROQ_API_KEY."),
    (("rate limit", "429"), "The AI service is busy. Wait a minute and try again."),
    (("parse",), "The AI returned an unreadable plan. Generating again usually works."),
    (("unreachable", "timed out", "timeout"), "The AI service did not answer in time. Try again shortly."),
)

DEFAULT_HINT = "Please try again."


def error_hint(message: str) -> str:
    lowered = message.lower()
    for needles, hint in _HINTS:
        if any(needle in lowered for needle in needles):
            return hint
    return DEFAULT_HINT
