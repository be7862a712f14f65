"""Runtime settings, read from environment variables.

The CLI loads ``.env`` files with python-dotenv before calling
``Settings.from_env()``, so values can live in either place.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

from playmate.storage import DEFAULT_DATA_DIR

# Shown when nothing has been searched yet
DEFAULT_STEAM_ID = "76561197960435530"


def load_env_files() -> None:
    """Load .env from the current directory, then from the data directory.

    The data directory honours a ``PLAYMATE_DATA_DIR`` set by the first file.
    """
    load_dotenv(Path.cwd() / ".env")
    data_dir = Path(os.getenv("PLAYMATE_DATA_DIR") or DEFAULT_DATA_DIR)
    load_dotenv(data_dir / ".env")


class Settings(BaseModel):
    """Timeouts, paths and defaults for a PlayMate session."""

    steam_api_key: str | None = None
    default_steam_id: str = DEFAULT_STEAM_ID
    data_dir: Path = DEFAULT_DATA_DIR

    # Bounded-wait budgets in seconds
    profile_timeout: float = 15.0
    games_timeout: float = 15.0
    stats_timeout: float = 15.0
    matches_timeout: float = 15.0
    auth_timeout: float = 30.0

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        values = {
            "steam_api_key": os.getenv("STEAM_API_KEY"),
            "default_steam_id": os.getenv("STEAM_ID"),
            "data_dir": os.getenv("PLAYMATE_DATA_DIR"),
            "profile_timeout": os.getenv("PLAYMATE_PROFILE_TIMEOUT"),
            "games_timeout": os.getenv("PLAYMATE_GAMES_TIMEOUT"),
            "stats_timeout": os.getenv("PLAYMATE_STATS_TIMEOUT"),
            "matches_timeout": os.getenv("PLAYMATE_MATCHES_TIMEOUT"),
            "auth_timeout": os.getenv("PLAYMATE_AUTH_TIMEOUT"),
            "log_level": os.getenv("LOG_LEVEL"),
        }
        # Unset variables keep the model defaults
        return cls.model_validate({k: v for k, v in values.items() if v})
