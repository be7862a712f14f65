"""Local file-based key-value store for accounts and search history."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from playmate.models import RecentSearchList, UserAccount

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".playmate"

CURRENT_USER_KEY = "current_user"
USERS_KEY = "users"
RECENT_SEARCHES_KEY = "recent_searches"
LAST_SEARCHED_ID_KEY = "last_searched_id"


class Storage:
    """Flat JSON preference store.

    All keys live in a single ``preferences.json`` file. Each setter writes
    the whole file back, so what is on disk always matches the last
    mutation.
    """

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.preferences_path = self.data_dir / "preferences.json"
        self._values = self._read()

    def _read(self) -> dict[str, Any]:
        if not self.preferences_path.exists():
            return {}
        try:
            with open(self.preferences_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.preferences_path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file with unexpected layout")
            return {}
        return data

    def _write(self) -> None:
        # Write to a temp file first so a crash never leaves half a file behind
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".preferences-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._values, f, indent=2, default=str)
            os.replace(tmp_path, self.preferences_path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._write()

    def remove(self, key: str) -> None:
        if key in self._values:
            del self._values[key]
            self._write()

    # =========================================================================
    # Accounts
    # =========================================================================

    def load_current_user(self) -> UserAccount | None:
        data = self.get(CURRENT_USER_KEY)
        if not data:
            return None
        try:
            return UserAccount.model_validate(data)
        except ValidationError as e:
            logger.warning("Discarding unreadable current user record: %s", e)
            return None

    def save_current_user(self, user: UserAccount | None) -> None:
        if user is None:
            self.remove(CURRENT_USER_KEY)
        else:
            self.set(CURRENT_USER_KEY, user.model_dump(mode="json"))

    def load_users(self) -> list[UserAccount]:
        """Load the roster, skipping entries that no longer validate."""
        users = []
        for entry in self.get(USERS_KEY) or []:
            try:
                users.append(UserAccount.model_validate(entry))
            except ValidationError as e:
                logger.warning("Skipping unreadable roster entry: %s", e)
        return users

    def save_users(self, users: list[UserAccount]) -> None:
        self.set(USERS_KEY, [u.model_dump(mode="json") for u in users])

    # =========================================================================
    # Search history
    # =========================================================================

    def load_recent_searches(self) -> RecentSearchList:
        items = [i for i in (self.get(RECENT_SEARCHES_KEY) or []) if isinstance(i, str)]
        searches = RecentSearchList()
        # Oldest first so the stored order is preserved after trimming
        for identifier in reversed(items):
            searches.add(identifier)
        return searches

    def save_recent_searches(self, searches: RecentSearchList) -> None:
        self.set(RECENT_SEARCHES_KEY, list(searches.items))

    def load_last_searched_id(self) -> str:
        value = self.get(LAST_SEARCHED_ID_KEY, "")
        return value if isinstance(value, str) else ""

    def save_last_searched_id(self, identifier: str) -> None:
        self.set(LAST_SEARCHED_ID_KEY, identifier)

    def clear_all(self) -> None:
        """Clear all stored data."""
        self._values = {}
        if self.preferences_path.exists():
            self.preferences_path.unlink()
