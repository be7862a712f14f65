"""Published application state.

The session manager is the only writer. Every change replaces the whole
``AppState`` snapshot, and subscribers receive the new snapshot, so a
reader never sees half of an update.
"""

import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from playmate.models import (
    FetchPhase,
    GameEntry,
    GamingSession,
    MatchRecord,
    PlatformProfile,
    PlaytimeWarning,
    ServerStatus,
    StatsSnapshot,
    UserAccount,
)

logger = logging.getLogger(__name__)

Subscriber = Callable[["AppState"], None]


class AppState(BaseModel):
    """Immutable snapshot of everything the UI renders."""

    model_config = ConfigDict(frozen=True)

    current_user: UserAccount | None = None
    users: tuple[UserAccount, ...] = ()
    profile: PlatformProfile | None = None
    recent_games: tuple[GameEntry, ...] = ()
    stats: StatsSnapshot | None = None
    matches: tuple[MatchRecord, ...] = ()
    playtime_warnings: tuple[PlaytimeWarning, ...] = ()
    recent_searches: tuple[str, ...] = ()
    last_searched_id: str = ""
    error: str | None = None
    is_loading: bool = False
    phase: FetchPhase = FetchPhase.IDLE
    server_status: ServerStatus = ServerStatus.UNKNOWN
    is_sample_data: bool = False
    gaming_session: GamingSession | None = None

    @property
    def has_active_warnings(self) -> bool:
        return bool(self.playtime_warnings)

    @property
    def is_signed_in(self) -> bool:
        return self.current_user is not None


class StateStore:
    """Holds the current snapshot and notifies subscribers on change."""

    def __init__(self, initial: AppState | None = None):
        self._state = initial or AppState()
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> AppState:
        return self._state

    def update(self, **changes) -> AppState:
        """Replace the snapshot with a copy carrying ``changes``."""
        # model_copy skips validation, so coerce lists to the tuple fields here
        changes = {k: tuple(v) if isinstance(v, list) else v for k, v in changes.items()}
        self._state = self._state.model_copy(update=changes)
        self._notify()
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self._state
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("State subscriber %r failed", callback)
