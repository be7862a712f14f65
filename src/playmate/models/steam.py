"""Steam-side data models: profiles, games, stats and match records."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

STEAM_CDN_BASE = "https://media.steampowered.com/steamcommunity/public/images/apps"

# Recent playtime above this (minutes over the trailing two weeks) raises a warning
PLAYTIME_WARNING_THRESHOLD = 900


class ServerStatus(str, Enum):
    """Reachability of the Steam Web API."""

    ONLINE = "online"
    OFFLINE = "offline"
    ISSUES = "issues"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return {
            ServerStatus.ONLINE: "Steam servers are online and running smoothly",
            ServerStatus.OFFLINE: "Steam servers are currently offline",
            ServerStatus.ISSUES: "Steam servers are experiencing issues",
            ServerStatus.UNKNOWN: "Checking Steam server status...",
        }[self]


class FetchPhase(str, Enum):
    """Where a single fetch cycle currently is."""

    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING_PROFILE = "fetching_profile"
    FETCHING_DEPENDENTS = "fetching_dependents"
    FALLBACK = "fallback"


# =============================================================================
# Profile
# =============================================================================


class PlatformProfile(BaseModel):
    """A Steam player summary, decoded from GetPlayerSummaries."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    steam_id: str = Field(alias="steamid")
    persona_name: str = Field(alias="personaname")
    profile_url: str = Field(default="", alias="profileurl")

    # Three avatar resolutions (32px, 64px, 184px)
    avatar: str = ""
    avatar_medium: str = Field(default="", alias="avatarmedium")
    avatar_full: str = Field(default="", alias="avatarfull")

    persona_state: int = Field(default=0, alias="personastate")
    community_visibility_state: int = Field(default=1, alias="communityvisibilitystate")
    profile_state: int = Field(default=0, alias="profilestate")
    last_logoff: int = Field(default=0, alias="lastlogoff")
    comment_permission: int | None = Field(default=None, alias="commentpermission")

    real_name: str | None = Field(default=None, alias="realname")
    primary_clan_id: str | None = Field(default=None, alias="primaryclanid")
    time_created: int | None = Field(default=None, alias="timecreated")

    # Currently-played game, only present while in game
    game_id: str | None = Field(default=None, alias="gameid")
    game_server_ip: str | None = Field(default=None, alias="gameserverip")
    game_extra_info: str | None = Field(default=None, alias="gameextrainfo")

    loc_country_code: str | None = Field(default=None, alias="loccountrycode")
    loc_state_code: str | None = Field(default=None, alias="locstatecode")
    loc_city_id: int | None = Field(default=None, alias="loccityid")

    @property
    def is_public(self) -> bool:
        """Steam reports 3 for public profiles."""
        return self.community_visibility_state == 3

    @property
    def is_in_game(self) -> bool:
        return self.game_id is not None


# =============================================================================
# Games
# =============================================================================


class GameEntry(BaseModel):
    """A game from the recently-played or owned-games lists.

    Two entries are the same game when their app ids match, regardless of
    playtime or naming differences between the two Steam endpoints.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    app_id: int = Field(validation_alias=AliasChoices("app_id", "appid"))
    name: str = "Unknown Game"
    playtime_forever: int = 0  # Lifetime minutes
    playtime_2weeks: int | None = None  # Minutes over the last two weeks
    img_icon_url: str = ""
    img_logo_url: str | None = None
    last_played: int | None = Field(
        default=None,
        validation_alias=AliasChoices("last_played", "rtime_last_played"),
    )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameEntry):
            return NotImplemented
        return self.app_id == other.app_id

    def __hash__(self) -> int:
        return hash(self.app_id)

    @property
    def icon_url(self) -> str | None:
        """Full CDN URL for the game icon, if Steam gave us a hash."""
        if not self.img_icon_url:
            return None
        return f"{STEAM_CDN_BASE}/{self.app_id}/{self.img_icon_url}.jpg"

    @property
    def header_image_url(self) -> str:
        return f"https://steamcdn-a.akamaihd.net/steam/apps/{self.app_id}/header.jpg"

    @property
    def last_played_at(self) -> datetime | None:
        if not self.last_played:
            return None
        return datetime.fromtimestamp(self.last_played)


class StatsSnapshot(BaseModel):
    """Per-title statistics merged from achievements, stats and playtime calls."""

    model_config = ConfigDict(frozen=True)

    total_playtime: int = 0
    recent_playtime: int = 0
    achievement_count: int = 0
    total_achievements: int = 0
    last_played: int = 0

    @property
    def completion_percent(self) -> float:
        """Calculate achievement completion percentage."""
        if self.total_achievements == 0:
            return 0.0
        return round(self.achievement_count / self.total_achievements * 100, 1)

    @property
    def display_summary(self) -> str:
        """Human-readable summary for display. E.g., '25/100 achievements (25.0%)'"""
        return (
            f"{self.achievement_count}/{self.total_achievements} achievements "
            f"({self.completion_percent}%)"
        )


class MatchRecord(BaseModel):
    """A single competitive match from the match-history endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    match_id: str
    timestamp: int
    map_name: str
    score: str
    result: str
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    headshots: int = 0
    damage: int = 0
    mvp: bool = False

    @property
    def kd_ratio(self) -> float:
        if self.deaths == 0:
            return float(self.kills)
        return round(self.kills / self.deaths, 2)

    @property
    def played_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp)


class PlaytimeWarning(BaseModel):
    """Raised when a game's two-week playtime crosses the threshold."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    game_name: str
    recent_playtime: int
    threshold: int = PLAYTIME_WARNING_THRESHOLD
    raised_at: datetime = Field(default_factory=datetime.now)
