"""Data models for PlayMate."""

from playmate.models.account import (
    MAX_RECENT_SEARCHES,
    GamingSession,
    RecentSearchList,
    UserAccount,
    UserPreferences,
)
from playmate.models.steam import (
    PLAYTIME_WARNING_THRESHOLD,
    FetchPhase,
    GameEntry,
    MatchRecord,
    PlatformProfile,
    PlaytimeWarning,
    ServerStatus,
    StatsSnapshot,
)

__all__ = [
    # Local accounts
    "MAX_RECENT_SEARCHES",
    "GamingSession",
    "RecentSearchList",
    "UserAccount",
    "UserPreferences",
    # Steam data
    "PLAYTIME_WARNING_THRESHOLD",
    "FetchPhase",
    "GameEntry",
    "MatchRecord",
    "PlatformProfile",
    "PlaytimeWarning",
    "ServerStatus",
    "StatsSnapshot",
]
