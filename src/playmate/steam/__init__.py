"""Steam Web API integration."""

from playmate.steam.client import (
    CS2_APP_ID,
    FetchTimeoutError,
    InvalidSteamIdError,
    ProfileNotFoundError,
    SteamAPIError,
    SteamAuthError,
    SteamClient,
    SteamDecodeError,
    SteamEmptyResponseError,
    SteamHTTPError,
    SteamNetworkError,
)
from playmate.steam.ids import STEAM_ID64_BASE, is_numeric_steam_id, normalize_steam_id

__all__ = [
    "CS2_APP_ID",
    "FetchTimeoutError",
    "InvalidSteamIdError",
    "ProfileNotFoundError",
    "STEAM_ID64_BASE",
    "SteamAPIError",
    "SteamAuthError",
    "SteamClient",
    "SteamDecodeError",
    "SteamEmptyResponseError",
    "SteamHTTPError",
    "SteamNetworkError",
    "is_numeric_steam_id",
    "normalize_steam_id",
]
