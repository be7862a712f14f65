"""
Shared test fixtures and utilities.

The Steam Web API is replaced with an ``httpx.MockTransport`` routing on
the endpoint name, so every test runs offline.
"""

import asyncio
import inspect

import httpx
import pytest

from playmate.config import Settings
from playmate.notifications import RecordingNotifier
from playmate.session import SessionManager
from playmate.steam import SteamClient
from playmate.storage import Storage

TEST_STEAM_ID = "76561197960435530"

PROFILE_PAYLOAD = {
    "steamid": TEST_STEAM_ID,
    "personaname": "Robin",
    "profileurl": f"https://steamcommunity.com/profiles/{TEST_STEAM_ID}/",
    "avatar": "https://avatars.steamstatic.com/abc.jpg",
    "avatarmedium": "https://avatars.steamstatic.com/abc_medium.jpg",
    "avatarfull": "https://avatars.steamstatic.com/abc_full.jpg",
    "personastate": 1,
    "communityvisibilitystate": 3,
    "profilestate": 1,
    "lastlogoff": 1700000000,
    "realname": "Robin Walker",
    "timecreated": 1063407589,
    "loccountrycode": "US",
}

RECENT_GAMES = [
    {
        "appid": 730,
        "name": "Counter-Strike 2",
        "playtime_2weeks": 901,
        "playtime_forever": 5000,
        "img_icon_url": "8dbc71957312bbd3baea65848b545be9eae2a355",
    },
    {
        "appid": 570,
        "name": "Dota 2",
        "playtime_2weeks": 60,
        "playtime_forever": 12000,
        "img_icon_url": "0bbb630d63262dd66d2fdd0f7d37e8661a410075",
    },
]

OWNED_GAMES = [
    {"appid": 1000 + i, "name": f"Owned Game {i}", "playtime_forever": i * 100}
    for i in range(10)
]


def api_response(status_code: int = 200, json=None, content: bytes | None = None):
    """Build a handler returning a fresh canned response per request."""

    def handler(request: httpx.Request) -> httpx.Response:
        if json is not None:
            return httpx.Response(status_code, json=json)
        return httpx.Response(status_code, content=content or b"")

    return handler


class FakeSteamAPI:
    """Routes requests by endpoint name to canned responses or handlers."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.calls: list[httpx.Request] = []

    def set(self, endpoint: str, handler) -> None:
        """Register a (possibly async) handler for an endpoint."""
        self.routes[endpoint] = handler

    def calls_to(self, endpoint: str) -> list[httpx.Request]:
        return [r for r in self.calls if endpoint in r.url.path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        for endpoint, handler in self.routes.items():
            if endpoint not in request.url.path:
                continue
            result = handler(request)
            if inspect.isawaitable(result):
                result = await result
            return result
        return httpx.Response(404)


async def stall(request: httpx.Request) -> httpx.Response:
    """Handler that never answers within any test timeout."""
    await asyncio.sleep(3600)
    return httpx.Response(200)


@pytest.fixture
def fake_steam():
    """Fake Steam API answering every endpoint successfully."""
    fake = FakeSteamAPI()
    fake.set("GetPlayerSummaries", api_response(json={"response": {"players": [PROFILE_PAYLOAD]}}))
    fake.set("GetRecentlyPlayedGames", api_response(json={"response": {"total_count": 2, "games": RECENT_GAMES}}))
    fake.set("GetOwnedGames", api_response(json={"response": {"game_count": 10, "games": OWNED_GAMES}}))
    fake.set(
        "GetPlayerAchievements",
        api_response(
            json={
                "playerstats": {
                    "steamID": TEST_STEAM_ID,
                    "gameName": "Counter-Strike 2",
                    "achievements": [
                        {"apiname": "WIN_BOMB_PLANT", "achieved": 1, "unlocktime": 1600000000},
                        {"apiname": "WIN_ROUNDS_LOW", "achieved": 1, "unlocktime": 1600000100},
                        {"apiname": "KILL_ENEMY_KNIFE", "achieved": 0, "unlocktime": 0},
                    ],
                    "success": True,
                }
            }
        ),
    )
    fake.set(
        "GetUserStatsForGame",
        api_response(
            json={
                "playerstats": {
                    "steamID": TEST_STEAM_ID,
                    "gameName": "ValveTestApp260",
                    "stats": [
                        {"name": "total_time_played", "value": 7200},
                        {"name": "time_played_2weeks", "value": 0},
                        {"name": "last_played", "value": 1710000000},
                        {"name": "total_kills", "value": 1500},
                    ],
                }
            }
        ),
    )
    fake.set(
        "GetMatchHistory",
        api_response(
            json={
                "success": True,
                "matches": [
                    {
                        "id": "m1",
                        "match_id": "3001",
                        "timestamp": 1710000000,
                        "map_name": "Ancient",
                        "score": "13-9",
                        "result": "Victory",
                        "kills": 21,
                        "deaths": 14,
                        "assists": 6,
                        "headshots": 11,
                        "damage": 2400,
                        "mvp": True,
                    }
                ],
            }
        ),
    )
    return fake


@pytest.fixture
def client(fake_steam):
    """Steam client wired to the fake API."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_steam))
    return SteamClient(api_key="test-key", http_client=http_client)


@pytest.fixture
def storage(tmp_path):
    return Storage(tmp_path / "data")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def settings():
    """Short budgets so timeout tests finish quickly."""
    return Settings(
        steam_api_key="test-key",
        profile_timeout=0.2,
        games_timeout=0.2,
        stats_timeout=0.2,
        matches_timeout=0.2,
        auth_timeout=0.5,
    )


@pytest.fixture
def manager(client, storage, notifier, settings):
    return SessionManager(client, storage, notifier=notifier, settings=settings)
