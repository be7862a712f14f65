"""Steam identifier normalization.

Users paste all sorts of things into the search box: profile URLs
(``https://steamcommunity.com/profiles/76561198000000000``), legacy
``STEAM_0:1:12345`` ids, or the 17-digit SteamID64 itself. Everything is
turned into the SteamID64 where possible.
"""

import re

# SteamID64 of account number 0 in the public universe
STEAM_ID64_BASE = 76561197960265728

_LEGACY_ID_RE = re.compile(r"^STEAM_(\d+):(\d+):(\d+)$", re.IGNORECASE)


def normalize_steam_id(raw: str) -> str:
    """Best-effort conversion of user input to a SteamID64 string.

    Never raises. Vanity names and other unrecognized input come back
    unchanged so the caller can validate them.
    """
    if "/" in raw:
        return raw.rsplit("/", 1)[-1]

    match = _LEGACY_ID_RE.match(raw)
    if match:
        # STEAM_X:Y:Z, only X and Z feed the 64-bit form
        x, _, z = (int(part) for part in match.groups())
        return str(z * 2 + x + STEAM_ID64_BASE)

    return raw


def is_numeric_steam_id(value: str) -> bool:
    """True when ``value`` can be used directly as a numeric lookup key."""
    return bool(value) and value.isascii() and value.isdigit()
