"""Sample data shown when live Steam data is unavailable.

Everything here is deterministic for a given identifier and does no I/O,
so it can be called from any failure path without failing itself.
"""

import time
from dataclasses import dataclass

from playmate.models import GameEntry, MatchRecord, PlatformProfile, StatsSnapshot, UserAccount
from playmate.steam.client import CS2_APP_ID

SAMPLE_PERSONA_NAME = "Sample User"
SAMPLE_AVATAR_URL = (
    "https://avatars.steamstatic.com/fef49e7fa7e1997310d705b2a6158ff8dc1cdfeb"
)
SAMPLE_GAME_NAME = "Counter-Strike 2"
SAMPLE_LIFETIME_MINUTES = 3600
SAMPLE_RECENT_MINUTES = 1200
SAMPLE_ACHIEVEMENTS_COMPLETED = 25
SAMPLE_ACHIEVEMENTS_TOTAL = 100


@dataclass(frozen=True)
class SampleData:
    """Everything needed to populate the UI without the network."""

    profile: PlatformProfile
    games: list[GameEntry]
    stats: StatsSnapshot
    user: UserAccount


def sample_profile(identifier: str) -> PlatformProfile:
    return PlatformProfile(
        steam_id=identifier,
        persona_name=SAMPLE_PERSONA_NAME,
        profile_url=f"https://steamcommunity.com/profiles/{identifier}",
        avatar=f"{SAMPLE_AVATAR_URL}.jpg",
        avatar_medium=f"{SAMPLE_AVATAR_URL}_medium.jpg",
        avatar_full=f"{SAMPLE_AVATAR_URL}_full.jpg",
        persona_state=1,
        community_visibility_state=3,
        profile_state=1,
    )


def sample_games() -> list[GameEntry]:
    return [
        GameEntry(
            app_id=CS2_APP_ID,
            name=SAMPLE_GAME_NAME,
            playtime_forever=SAMPLE_LIFETIME_MINUTES,
            playtime_2weeks=SAMPLE_RECENT_MINUTES,
            img_icon_url="8dbc71957312bbd3baea65848b545be9eae2a355",
        )
    ]


def sample_stats(now: int | None = None) -> StatsSnapshot:
    return StatsSnapshot(
        total_playtime=SAMPLE_LIFETIME_MINUTES,
        recent_playtime=SAMPLE_RECENT_MINUTES,
        achievement_count=SAMPLE_ACHIEVEMENTS_COMPLETED,
        total_achievements=SAMPLE_ACHIEVEMENTS_TOTAL,
        last_played=now if now is not None else int(time.time()),
    )


def sample_matches(now: int | None = None) -> list[MatchRecord]:
    """The two fixed matches shown when match history cannot be loaded."""
    now = now if now is not None else int(time.time())
    return [
        MatchRecord(
            id="1",
            match_id="sample1",
            timestamp=now,
            map_name="Nuke",
            score="16-14",
            result="Victory",
            kills=25,
            deaths=18,
            assists=5,
            headshots=12,
            damage=3200,
            mvp=True,
        ),
        MatchRecord(
            id="2",
            match_id="sample2",
            timestamp=now - 3600,
            map_name="Inferno",
            score="13-16",
            result="Defeat",
            kills=20,
            deaths=22,
            assists=3,
            headshots=8,
            damage=2800,
            mvp=False,
        ),
    ]


def generate_sample(identifier: str) -> SampleData:
    """Build sample profile, games, stats and a candidate account for ``identifier``."""
    profile = sample_profile(identifier)
    return SampleData(
        profile=profile,
        games=sample_games(),
        stats=sample_stats(),
        user=UserAccount(
            steam_id=identifier,
            username=SAMPLE_PERSONA_NAME,
            avatar_url=profile.avatar_full,
        ),
    )
