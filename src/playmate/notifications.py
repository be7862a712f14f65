"""Reminder scheduling.

Delivery belongs to the host platform. The session manager only needs
something that can schedule a reminder and cancel pending ones.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

BREAK_REMINDER_ID = "break_reminder"


class Notifier(Protocol):
    def schedule(self, identifier: str, title: str, body: str, after_seconds: float) -> None: ...

    def cancel_all(self) -> None: ...


@dataclass(frozen=True)
class ScheduledReminder:
    identifier: str
    title: str
    body: str
    after_seconds: float


class LoggingNotifier:
    """Notifier that only logs what it would deliver."""

    def schedule(self, identifier: str, title: str, body: str, after_seconds: float) -> None:
        logger.info("Reminder %s in %.0fs: %s - %s", identifier, after_seconds, title, body)

    def cancel_all(self) -> None:
        logger.info("Cancelled all pending reminders")


class RecordingNotifier:
    """Keeps pending reminders in memory."""

    def __init__(self):
        self.pending: list[ScheduledReminder] = []
        self.cancel_count = 0

    def schedule(self, identifier: str, title: str, body: str, after_seconds: float) -> None:
        self.pending.append(ScheduledReminder(identifier, title, body, after_seconds))

    def cancel_all(self) -> None:
        self.pending.clear()
        self.cancel_count += 1
