"""Local account models: users, preferences, search history and play sessions."""

import secrets
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

MAX_RECENT_SEARCHES = 5


def _ensure_naive_datetime(dt: datetime) -> datetime:
    """Ensure datetime is naive (no timezone info)."""
    if dt.tzinfo is not None:
        # Convert to UTC then strip timezone
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


class UserPreferences(BaseModel):
    """Per-account settings."""

    notifications_enabled: bool = True
    break_reminder_minutes: int = 45


class UserAccount(BaseModel):
    """An account in the local roster.

    ``steam_id`` stays empty until the Steam identity has been verified.
    Once set it identifies at most one account in the roster.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    steam_id: str = ""
    username: str
    email: str = ""
    password_hash: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    last_login: datetime = Field(default_factory=datetime.now)
    email_verified: bool = False
    verification_token: str = Field(default_factory=lambda: secrets.token_urlsafe(16))
    avatar_url: str | None = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    @field_validator("created_at", "last_login", mode="after")
    @classmethod
    def ensure_naive_datetime(cls, v: datetime) -> datetime:
        return _ensure_naive_datetime(v)

    @property
    def is_verified(self) -> bool:
        return bool(self.steam_id)


class RecentSearchList(BaseModel):
    """Most-recent-first list of searched identifiers, without duplicates."""

    items: list[str] = Field(default_factory=list)
    max_items: int = MAX_RECENT_SEARCHES

    def add(self, identifier: str) -> None:
        """Insert at the front, moving an existing entry, and trim."""
        if identifier in self.items:
            self.items.remove(identifier)
        self.items.insert(0, identifier)
        if len(self.items) > self.max_items:
            self.items = self.items[: self.max_items]

    def clear(self) -> None:
        self.items = []

    def __len__(self) -> int:
        return len(self.items)


class GamingSession(BaseModel):
    """A single play session with break tracking."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    game_type: str
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: datetime | None = None
    break_count: int = 0
    last_break_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.ended_at is None

    @property
    def duration_seconds(self) -> float:
        end = self.ended_at or datetime.now()
        return (end - self.started_at).total_seconds()
