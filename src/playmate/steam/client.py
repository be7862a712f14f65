"""Async Steam Web API client.

To get a Steam API key:
1. Go to https://steamcommunity.com/dev/apikey
2. Log in with your Steam account
3. Enter a domain name (can be "localhost" for personal use)
4. Copy the API key

Set it as an environment variable:
    export STEAM_API_KEY="your_api_key"

Every call issues exactly one GET and classifies the outcome. Anything that
is not an HTTP 200 with a usable JSON body raises a ``SteamAPIError``
subclass; callers decide whether to fall back to sample data. Nothing here
retries.
"""

import logging
import os
from typing import Any

import httpx
from pydantic import ValidationError

from playmate.models import GameEntry, MatchRecord, PlatformProfile, ServerStatus

logger = logging.getLogger(__name__)

STEAM_API_BASE = "https://api.steampowered.com"

# Gabe Newell's public profile, used to probe API availability
STATUS_PROBE_STEAM_ID = "76561197960435530"

CS2_APP_ID = 730


class SteamAPIError(Exception):
    """Error from Steam API."""

    pass


class SteamAuthError(SteamAPIError):
    """HTTP 403: the API key is invalid or we are being rate limited."""

    def __init__(self, message: str = "Invalid Steam API key or rate limited"):
        super().__init__(message)


class SteamHTTPError(SteamAPIError):
    """Any other non-200 status."""

    def __init__(self, status_code: int, resource: str):
        self.status_code = status_code
        super().__init__(f"Steam API returned status {status_code} for {resource}")


class SteamEmptyResponseError(SteamAPIError):
    """The server answered 200 with nothing in the body."""


class SteamDecodeError(SteamAPIError):
    """The body was not the JSON shape we expected."""


class SteamNetworkError(SteamAPIError):
    """Transport failure: no connectivity, bad URL, server unreachable."""


class FetchTimeoutError(SteamAPIError):
    """A bounded wait expired before the call finished."""


class InvalidSteamIdError(SteamAPIError):
    """Identifier cannot be used as a numeric Steam ID."""

    def __init__(self, message: str = "Invalid Steam ID format. Please enter a valid Steam ID"):
        super().__init__(message)


class ProfileNotFoundError(SteamAPIError):
    """Steam returned no player for the id. Private profiles land here too."""

    def __init__(self, message: str = "Profile not found or is private"):
        super().__init__(message)


def _as_list(value: Any, resource: str) -> list:
    """Steam sends null or omits the key for empty lists."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise SteamDecodeError(f"Malformed {resource} response: expected a list")
    return value


class SteamClient:
    """Client for the Steam Web API endpoints PlayMate consumes."""

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = STEAM_API_BASE,
    ):
        self.api_key = api_key or os.getenv("STEAM_API_KEY")
        if not self.api_key:
            raise SteamAPIError(
                "Steam API key not provided. Set STEAM_API_KEY environment variable "
                "or pass api_key parameter. Get your key at: "
                "https://steamcommunity.com/dev/apikey"
            )

        self.base_url = base_url.rstrip("/")
        self._http_client = http_client or httpx.AsyncClient(timeout=30.0)

    async def _get_json(self, path: str, params: dict[str, Any], resource: str) -> dict:
        """GET ``path`` and return the decoded JSON object, or raise."""
        url = f"{self.base_url}/{path}"
        try:
            response = await self._http_client.get(url, params=params)
        except httpx.InvalidURL as e:
            raise SteamNetworkError(f"Invalid URL for {resource}: {e}") from e
        except httpx.TimeoutException as e:
            raise SteamNetworkError(f"Request timed out fetching {resource}") from e
        except httpx.TransportError as e:
            raise SteamNetworkError(f"Network error fetching {resource}: {e}") from e

        logger.debug("%s responded with status %s", resource, response.status_code)

        if response.status_code == 403:
            raise SteamAuthError()
        if response.status_code != 200:
            raise SteamHTTPError(response.status_code, resource)
        if not response.content.strip():
            raise SteamEmptyResponseError(f"Empty response body for {resource}")

        try:
            data = response.json()
        except ValueError as e:
            raise SteamDecodeError(f"Could not decode {resource} response: {e}") from e

        if not isinstance(data, dict):
            raise SteamDecodeError(f"Unexpected {resource} payload type: {type(data).__name__}")
        return data

    async def get_player_summary(self, steam_id: str) -> PlatformProfile:
        """Fetch the public profile summary for a SteamID64.

        Raises:
            ProfileNotFoundError: If Steam returns no player for the id.
        """
        data = await self._get_json(
            "ISteamUser/GetPlayerSummaries/v0002/",
            {"key": self.api_key, "steamids": steam_id},
            "profile",
        )

        try:
            players = data["response"]["players"]
        except (KeyError, TypeError) as e:
            raise SteamDecodeError(f"Malformed profile response: missing {e}") from e

        if not _as_list(players, "profile"):
            raise ProfileNotFoundError()

        try:
            return PlatformProfile.model_validate(players[0])
        except ValidationError as e:
            raise SteamDecodeError(f"Malformed player summary: {e}") from e

    async def get_recently_played(self, steam_id: str, count: int | None = 5) -> list[GameEntry]:
        """Fetch games played in the last two weeks.

        Args:
            steam_id: SteamID64 to fetch games for.
            count: Maximum number of games Steam should return. None returns all.

        Returns:
            List of GameEntry objects, most recently played first.
        """
        params: dict[str, Any] = {"key": self.api_key, "steamid": steam_id}
        if count is not None:
            params["count"] = count

        data = await self._get_json(
            "IPlayerService/GetRecentlyPlayedGames/v0001/", params, "recent games"
        )
        return self._decode_games(data, "recent games")

    async def get_owned_games(self, steam_id: str) -> list[GameEntry]:
        """Fetch every game the user owns, including free-to-play titles."""
        data = await self._get_json(
            "IPlayerService/GetOwnedGames/v0001/",
            {
                "key": self.api_key,
                "steamid": steam_id,
                "include_appinfo": 1,
                "include_played_free_games": 1,
            },
            "owned games",
        )
        return self._decode_games(data, "owned games")

    async def get_player_achievements(self, steam_id: str, app_id: int = CS2_APP_ID) -> tuple[int, int]:
        """Fetch achievement progress for one game.

        Returns:
            ``(completed, total)`` achievement counts.
        """
        data = await self._get_json(
            "ISteamUserStats/GetPlayerAchievements/v1/",
            {"appid": app_id, "key": self.api_key, "steamid": steam_id},
            "achievements",
        )

        player_stats = data.get("playerstats")
        if not isinstance(player_stats, dict) or "achievements" not in player_stats:
            raise SteamDecodeError("Achievements response has no achievement list")

        achievements = _as_list(player_stats["achievements"], "achievements")
        if not all(isinstance(a, dict) for a in achievements):
            raise SteamDecodeError("Malformed achievement list")
        completed = sum(1 for ach in achievements if ach.get("achieved", 0) == 1)
        return completed, len(achievements)

    async def get_user_stats_for_game(self, steam_id: str, app_id: int = CS2_APP_ID) -> dict[str, int]:
        """Fetch the loosely-typed per-game stat list as a name -> value mapping.

        Only integer stats are kept; known keys include ``total_time_played``,
        ``time_played_2weeks`` and ``last_played``.
        """
        data = await self._get_json(
            "ISteamUserStats/GetUserStatsForGame/v2/",
            {"appid": app_id, "key": self.api_key, "steamid": steam_id},
            "game stats",
        )

        player_stats = data.get("playerstats")
        if not isinstance(player_stats, dict):
            raise SteamDecodeError("Game stats response has no playerstats")

        entries = _as_list(player_stats.get("stats"), "game stats")
        if not all(isinstance(s, dict) for s in entries):
            raise SteamDecodeError("Malformed game stats list")

        stats = {}
        for stat in entries:
            name = stat.get("name")
            value = stat.get("value")
            if name and isinstance(value, int) and not isinstance(value, bool):
                stats[name] = value
        return stats

    async def get_match_history(
        self, steam_id: str, mode: str | None = "competitive", limit: int = 8
    ) -> list[MatchRecord]:
        """Fetch recent CS2 matches."""
        params: dict[str, Any] = {"key": self.api_key, "steamid": steam_id, "limit": limit}
        if mode:
            params["mode"] = mode

        data = await self._get_json("ICSGOServers_730/GetMatchHistory/v1/", params, "match history")

        if not data.get("success", False):
            raise SteamAPIError("Match history request was not successful")

        try:
            return [MatchRecord.model_validate(m) for m in _as_list(data.get("matches"), "match history")]
        except ValidationError as e:
            raise SteamDecodeError(f"Malformed match history: {e}") from e

    async def check_status(self) -> ServerStatus:
        """Probe the API with a known public profile."""
        url = f"{self.base_url}/ISteamUser/GetPlayerSummaries/v0002/"
        params = {"key": self.api_key, "steamids": STATUS_PROBE_STEAM_ID}
        try:
            response = await self._http_client.get(url, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Steam status probe failed: %s", e)
            return ServerStatus.ISSUES

        if response.status_code == 200:
            return ServerStatus.ONLINE
        if response.status_code == 403:
            return ServerStatus.ISSUES
        return ServerStatus.OFFLINE

    def _decode_games(self, data: dict, resource: str) -> list[GameEntry]:
        response = data.get("response")
        if not isinstance(response, dict):
            raise SteamDecodeError(f"Malformed {resource} response: missing 'response'")

        try:
            return [GameEntry.model_validate(g) for g in _as_list(response.get("games"), resource)]
        except ValidationError as e:
            raise SteamDecodeError(f"Malformed {resource} entry: {e}") from e

    async def close(self):
        """Close the HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
