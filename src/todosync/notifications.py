from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List


class Level(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A user-visible, non-fatal message (what a UI would show as a toast)."""

    level: Level
    message: str


Notifier = Callable[[Notification], None]


class NotificationLog:
    """Notifier that keeps every notification it receives, oldest first."""

    def __init__(self) -> None:
        self.items: List[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.items.append(notification)

    def of_level(self, level: Level) -> List[Notification]:
        return [n for n in self.items if n.level == level]

    def clear(self) -> None:
        self.items.clear()
