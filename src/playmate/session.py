"""Session orchestration: identity, profile fetch chain, accounts and state.

One ``SessionManager`` is built at startup and handed to whatever renders
the state. It is the only writer of the published ``AppState`` and of the
local store. Read operations never dead-end: any Steam failure is turned
into an error message plus sample data.
"""

import logging
import time
from datetime import datetime

from playmate.auth import (
    AccountValidationError,
    DuplicateAccountError,
    InvalidEmailError,
    VerificationError,
    WeakPasswordError,
    hash_password,
    is_valid_email,
    is_valid_password,
    verify_password,
)
from playmate.config import Settings
from playmate.fallback import generate_sample, sample_games, sample_matches, sample_stats
from playmate.models import (
    PLAYTIME_WARNING_THRESHOLD,
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
from playmate.notifications import BREAK_REMINDER_ID, LoggingNotifier, Notifier
from playmate.state import AppState, StateStore
from playmate.steam import (
    CS2_APP_ID,
    FetchTimeoutError,
    InvalidSteamIdError,
    SteamAPIError,
    SteamClient,
    is_numeric_steam_id,
    normalize_steam_id,
)
from playmate.storage import Storage
from playmate.timeouts import bounded

logger = logging.getLogger(__name__)

RECENT_GAMES_LIMIT = 5


def merge_recent_games(
    recent: list[GameEntry], owned: list[GameEntry], limit: int = RECENT_GAMES_LIMIT
) -> list[GameEntry]:
    """Fill the recently-played list up to ``limit`` with the most-played owned games."""
    games = list(recent[:limit])
    if len(games) >= limit:
        return games

    seen = {g.app_id for g in games}
    backfill = sorted(
        (g for g in owned if g.app_id not in seen),
        key=lambda g: g.playtime_forever,
        reverse=True,
    )
    for game in backfill:
        if len(games) >= limit:
            break
        if game.app_id in seen:
            continue
        seen.add(game.app_id)
        games.append(game)
    return games


def merge_stats(
    achievements: tuple[int, int],
    detailed: dict[str, int],
    recent_game: GameEntry | None,
    now: int | None = None,
) -> StatsSnapshot:
    """Combine the three stats sources.

    Detailed per-game stats win; a field they leave at zero takes the value
    from the recently-played entry instead.
    """
    completed, total = achievements

    total_playtime = detailed.get("total_time_played", 0)
    if not total_playtime and recent_game is not None:
        total_playtime = recent_game.playtime_forever

    recent_playtime = detailed.get("time_played_2weeks", 0)
    if not recent_playtime and recent_game is not None:
        recent_playtime = recent_game.playtime_2weeks or 0

    last_played = detailed.get("last_played", 0)
    if not last_played and recent_game is not None:
        last_played = recent_game.last_played or 0
    if not last_played:
        last_played = now if now is not None else int(time.time())

    return StatsSnapshot(
        total_playtime=total_playtime,
        recent_playtime=recent_playtime,
        achievement_count=completed,
        total_achievements=total,
        last_played=last_played,
    )


class SessionManager:
    """Coordinates Steam lookups, the local roster and the published state."""

    def __init__(
        self,
        client: SteamClient,
        storage: Storage,
        notifier: Notifier | None = None,
        settings: Settings | None = None,
        store: StateStore | None = None,
    ):
        self.client = client
        self.storage = storage
        self.notifier = notifier or LoggingNotifier()
        self.settings = settings or Settings()
        self.store = store or StateStore()

        self._users = storage.load_users()
        self._recent_searches = storage.load_recent_searches()
        self.store.update(
            current_user=storage.load_current_user(),
            users=self._users,
            recent_searches=self._recent_searches.items,
            last_searched_id=storage.load_last_searched_id(),
        )

    @property
    def state(self) -> AppState:
        return self.store.state

    # =========================================================================
    # Fetch chain
    # =========================================================================

    async def authenticate(self) -> bool:
        """Sign in with the last searched Steam ID, or the default one.

        Returns False when sample data had to be used instead.
        """
        steam_id = normalize_steam_id(self.state.last_searched_id or self.settings.default_steam_id)
        self.store.update(is_loading=True, error=None, phase=FetchPhase.RESOLVING)

        try:
            await bounded(self._authenticate_flow(steam_id), self.settings.auth_timeout, "authentication")
        except SteamAPIError as e:
            self._apply_fallback(steam_id, str(e))
            return False
        except Exception as e:
            logger.exception("Unexpected error while authenticating %s", steam_id)
            self._apply_fallback(steam_id, f"Unexpected error: {e}")
            return False
        return True

    async def _authenticate_flow(self, steam_id: str) -> None:
        profile = await self._load_profile(steam_id)

        existing = self._find_user_by_steam_id(profile.steam_id)
        if existing is not None:
            user = existing.model_copy(
                update={"last_login": datetime.now(), "avatar_url": profile.avatar_full}
            )
            logger.info("Signed in existing account %s", user.username)
        else:
            user = UserAccount(
                steam_id=profile.steam_id,
                username=profile.persona_name,
                avatar_url=profile.avatar_full,
            )
            logger.info("Created account for %s", user.username)

        self._upsert_user(user)
        self._set_current_user(user)
        await self._load_dependents(steam_id, profile)

    async def fetch_profile(self, identifier: str) -> bool:
        """Look up a profile by id, URL or legacy id and load its games and stats.

        Returns True if live data was loaded, False if the input was empty or
        sample data was substituted.
        """
        identifier = identifier.strip()
        if not identifier:
            self.store.update(error="Please enter a Steam ID", is_loading=False)
            return False

        self.store.update(is_loading=True, error=None, phase=FetchPhase.RESOLVING)
        steam_id = normalize_steam_id(identifier)
        self._record_last_searched(steam_id)

        try:
            profile = await self._load_profile(steam_id)
        except SteamAPIError as e:
            self._apply_fallback(steam_id, str(e))
            return False
        except Exception as e:
            logger.exception("Unexpected error while fetching profile %s", steam_id)
            self._apply_fallback(steam_id, f"Unexpected error: {e}")
            return False

        self._add_recent_search(steam_id)
        try:
            await self._load_dependents(steam_id, profile)
        except Exception as e:
            logger.exception("Unexpected error while loading games and stats for %s", steam_id)
            self._apply_fallback(steam_id, f"Unexpected error: {e}")
            return False
        return True

    async def _load_profile(self, steam_id: str) -> PlatformProfile:
        if not is_numeric_steam_id(steam_id):
            raise InvalidSteamIdError()

        self.store.update(phase=FetchPhase.FETCHING_PROFILE)
        profile = await bounded(
            self.client.get_player_summary(steam_id), self.settings.profile_timeout, "profile fetch"
        )
        logger.info("Loaded profile for %s", profile.persona_name)
        return profile

    async def _load_dependents(self, steam_id: str, profile: PlatformProfile) -> None:
        self.store.update(profile=profile, is_sample_data=False, phase=FetchPhase.FETCHING_DEPENDENTS)
        await self.fetch_games(steam_id)
        await self.fetch_stats(steam_id)
        self.store.update(is_loading=False, phase=FetchPhase.IDLE)

    async def fetch_games(self, steam_id: str) -> list[GameEntry]:
        """Load up to five recent games, topped up from the owned-games list."""
        try:
            games = await bounded(
                self._collect_recent_games(steam_id), self.settings.games_timeout, "recent games"
            )
        except SteamAPIError as e:
            logger.warning("Using sample games for %s: %s", steam_id, e)
            games = sample_games()
            self.store.update(
                recent_games=games, error=f"Error fetching games: {e}", is_sample_data=True
            )
            return games

        changes = {"recent_games": games}
        if not games:
            changes["error"] = "No games found"
        self.store.update(**changes)
        self.check_playtime_warnings()
        return games

    async def _collect_recent_games(self, steam_id: str) -> list[GameEntry]:
        recent = await self.client.get_recently_played(steam_id, count=RECENT_GAMES_LIMIT)
        if len(recent) >= RECENT_GAMES_LIMIT:
            return recent[:RECENT_GAMES_LIMIT]
        owned = await self.client.get_owned_games(steam_id)
        return merge_recent_games(recent, owned)

    async def fetch_stats(self, steam_id: str, app_id: int = CS2_APP_ID) -> StatsSnapshot:
        """Build the stats snapshot for one title, falling back to sample stats."""
        try:
            stats = await bounded(
                self._collect_stats(steam_id, app_id), self.settings.stats_timeout, "stats"
            )
        except SteamAPIError as e:
            logger.warning("Using sample stats for %s: %s", steam_id, e)
            stats = sample_stats()
            self.store.update(stats=stats, error=f"Error fetching stats: {e}")
            return stats

        self.store.update(stats=stats)
        return stats

    async def _collect_stats(self, steam_id: str, app_id: int) -> StatsSnapshot:
        achievements = await self.client.get_player_achievements(steam_id, app_id)

        try:
            detailed = await self.client.get_user_stats_for_game(steam_id, app_id)
        except SteamAPIError as e:
            # Playtime fields can still come from the recently-played call
            logger.info("Detailed stats unavailable for %s: %s", steam_id, e)
            detailed = {}

        recent = await self.client.get_recently_played(steam_id, count=None)
        recent_game = next((g for g in recent if g.app_id == app_id), None)
        return merge_stats(achievements, detailed, recent_game)

    async def fetch_matches(self, steam_id: str | None = None) -> list[MatchRecord]:
        """Load competitive match history, or the fixed sample matches on failure."""
        steam_id = steam_id or self._active_steam_id()
        try:
            matches = await bounded(
                self.client.get_match_history(steam_id), self.settings.matches_timeout, "match history"
            )
        except SteamAPIError as e:
            logger.warning("Using sample matches for %s: %s", steam_id, e)
            matches = sample_matches()

        self.store.update(matches=matches)
        return matches

    async def check_server_status(self) -> ServerStatus:
        try:
            status = await bounded(
                self.client.check_status(), self.settings.profile_timeout, "status check"
            )
        except FetchTimeoutError:
            status = ServerStatus.ISSUES
        self.store.update(server_status=status)
        return status

    def _apply_fallback(self, steam_id: str, message: str) -> None:
        logger.warning("Falling back to sample data for %s: %s", steam_id, message)
        self.store.update(phase=FetchPhase.FALLBACK)
        sample = generate_sample(steam_id)

        if self._find_user_by_steam_id(steam_id) is None:
            self._upsert_user(sample.user)
            self._set_current_user(sample.user)

        self.store.update(
            profile=sample.profile,
            recent_games=sample.games,
            stats=sample.stats,
            error=message,
            is_loading=False,
            is_sample_data=True,
            phase=FetchPhase.IDLE,
        )

    def _active_steam_id(self) -> str:
        state = self.state
        if state.profile is not None:
            return state.profile.steam_id
        if state.current_user is not None and state.current_user.steam_id:
            return state.current_user.steam_id
        return state.last_searched_id or self.settings.default_steam_id

    # =========================================================================
    # Playtime warnings
    # =========================================================================

    def check_playtime_warnings(self) -> list[PlaytimeWarning]:
        """Raise one warning per game whose two-week playtime is over the threshold.

        Returns only the warnings raised by this call.
        """
        warnings = list(self.state.playtime_warnings)
        warned = {w.game_name for w in warnings}
        raised = []

        for game in self.state.recent_games:
            recent_playtime = game.playtime_2weeks or 0
            if recent_playtime <= PLAYTIME_WARNING_THRESHOLD or game.name in warned:
                continue

            warning = PlaytimeWarning(game_name=game.name, recent_playtime=recent_playtime)
            warnings.append(warning)
            warned.add(game.name)
            raised.append(warning)
            self._schedule_reminder(
                warning.id,
                "High Playtime Warning",
                f"You've played {game.name} for over 15 hours in the past two weeks. "
                "Consider taking a break!",
                after_seconds=1,
            )

        if raised:
            self.store.update(playtime_warnings=warnings)
        return raised

    def _schedule_reminder(self, identifier: str, title: str, body: str, after_seconds: float) -> None:
        user = self.state.current_user
        if user is not None and not user.preferences.notifications_enabled:
            return
        self.notifier.schedule(identifier, title, body, after_seconds)

    # =========================================================================
    # Accounts
    # =========================================================================

    async def sign_up(self, username: str, email: str, identifier: str, password: str) -> UserAccount:
        """Create an account and verify its Steam ID.

        Validation problems raise ``AccountValidationError`` subclasses and
        leave the roster untouched. If the Steam ID cannot be verified the
        provisional account is removed again and ``VerificationError`` is
        raised.
        """
        username = username.strip()
        email = email.strip()
        steam_id = normalize_steam_id(identifier.strip())

        try:
            self._validate_sign_up(username, email, steam_id, password)
        except AccountValidationError as e:
            self.store.update(error=str(e))
            raise

        provisional = UserAccount(
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
        roster_before = list(self._users)
        self._save_roster(roster_before + [provisional])

        self.store.update(is_loading=True, error=None, phase=FetchPhase.RESOLVING)
        self._record_last_searched(steam_id)

        try:
            profile = await self._load_profile(steam_id)
        except SteamAPIError as e:
            self._save_roster(roster_before)
            self.store.update(error=str(e), is_loading=False, phase=FetchPhase.IDLE)
            raise VerificationError(f"Could not verify Steam ID: {e}") from e
        except BaseException:
            self._save_roster(roster_before)
            self.store.update(is_loading=False, phase=FetchPhase.IDLE)
            raise

        user = provisional.model_copy(
            update={
                "steam_id": profile.steam_id,
                "avatar_url": profile.avatar_full,
                "last_login": datetime.now(),
            }
        )
        self._upsert_user(user)
        self._set_current_user(user)
        self._add_recent_search(steam_id)
        logger.info("Signed up %s with Steam ID %s", user.username, user.steam_id)

        try:
            await self._load_dependents(steam_id, profile)
        except Exception as e:
            logger.exception("Unexpected error while loading games and stats for %s", steam_id)
            self._apply_fallback(steam_id, f"Unexpected error: {e}")
        return user

    def _validate_sign_up(self, username: str, email: str, steam_id: str, password: str) -> None:
        if not username:
            raise AccountValidationError("Please enter a username")
        if not is_valid_email(email):
            raise InvalidEmailError()
        if not is_valid_password(password):
            raise WeakPasswordError()
        if any(u.username.lower() == username.lower() for u in self._users):
            raise DuplicateAccountError("Username is already taken")
        if any(u.email and u.email.lower() == email.lower() for u in self._users):
            raise DuplicateAccountError("An account with this email already exists")
        if steam_id and self._find_user_by_steam_id(steam_id) is not None:
            raise DuplicateAccountError("This Steam account is already linked to another user")

    def login(self, username: str, password: str) -> bool:
        """Sign in with local credentials. Failure gives no detail beyond False.

        Usernames match ignoring case, the same way sign-up checks duplicates.
        """
        username = username.strip()
        for user in self._users:
            if user.username.lower() != username.lower() or not user.password_hash:
                continue
            if verify_password(password, user.password_hash):
                user = user.model_copy(update={"last_login": datetime.now()})
                self._upsert_user(user)
                self._set_current_user(user)
                self.store.update(error=None)
                return True

        self.store.update(error="Invalid username or password")
        return False

    def verify_email(self, token: str) -> bool:
        """Mark the current user's email as verified if ``token`` matches."""
        user = self.state.current_user
        if user is None or not token or token != user.verification_token:
            return False
        user = user.model_copy(update={"email_verified": True})
        self._upsert_user(user)
        self._set_current_user(user)
        return True

    def sign_out(self) -> None:
        """Forget the current user and everything loaded for them.

        The roster and search history stay on disk.
        """
        self.storage.save_current_user(None)
        self.notifier.cancel_all()
        self.store.update(
            current_user=None,
            profile=None,
            recent_games=[],
            stats=None,
            matches=[],
            playtime_warnings=[],
            gaming_session=None,
            error=None,
            is_loading=False,
            is_sample_data=False,
            phase=FetchPhase.IDLE,
        )

    # =========================================================================
    # Search history
    # =========================================================================

    def clear_recent_searches(self) -> None:
        self._recent_searches.clear()
        self.storage.save_recent_searches(self._recent_searches)
        self.store.update(recent_searches=[])

    def _add_recent_search(self, steam_id: str) -> None:
        self._recent_searches.add(steam_id)
        self.storage.save_recent_searches(self._recent_searches)
        self.store.update(recent_searches=self._recent_searches.items)

    def _record_last_searched(self, steam_id: str) -> None:
        self.storage.save_last_searched_id(steam_id)
        self.store.update(last_searched_id=steam_id)

    # =========================================================================
    # Gaming sessions
    # =========================================================================

    def start_gaming_session(self, game_type: str = "CS2") -> GamingSession:
        """Start tracking play time and schedule the first break reminder."""
        active = self.state.gaming_session
        if active is not None and active.is_active:
            return active

        user = self.state.current_user
        session = GamingSession(user_id=user.id if user else "", game_type=game_type)
        self.store.update(gaming_session=session)
        self._schedule_break_reminder()
        return session

    def take_break(self) -> GamingSession | None:
        session = self.state.gaming_session
        if session is None:
            return None
        session = session.model_copy(
            update={"break_count": session.break_count + 1, "last_break_at": datetime.now()}
        )
        self.store.update(gaming_session=session)
        self._schedule_break_reminder()
        return session

    def end_gaming_session(self) -> GamingSession | None:
        session = self.state.gaming_session
        if session is None:
            return None
        ended = session.model_copy(update={"ended_at": datetime.now()})
        self.notifier.cancel_all()
        self.store.update(gaming_session=None)
        return ended

    def _schedule_break_reminder(self) -> None:
        user = self.state.current_user
        minutes = user.preferences.break_reminder_minutes if user else 45
        self._schedule_reminder(
            BREAK_REMINDER_ID,
            "Time for a Break!",
            "You've been playing for a while. Take a short break to stay fresh and focused.",
            after_seconds=minutes * 60,
        )

    # =========================================================================
    # Roster
    # =========================================================================

    def _find_user_by_steam_id(self, steam_id: str) -> UserAccount | None:
        if not steam_id:
            return None
        return next((u for u in self._users if u.steam_id == steam_id), None)

    def _upsert_user(self, user: UserAccount) -> None:
        users = [u for u in self._users if u.id != user.id]
        index = next((i for i, u in enumerate(self._users) if u.id == user.id), len(users))
        users.insert(index, user)
        self._save_roster(users)

    def _save_roster(self, users: list[UserAccount]) -> None:
        self.storage.save_users(users)
        self._users = list(users)
        self.store.update(users=self._users)

    def _set_current_user(self, user: UserAccount) -> None:
        self.storage.save_current_user(user)
        self.store.update(current_user=user)
