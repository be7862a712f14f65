"""CLI interface for PlayMate."""

import asyncio
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from playmate.auth import AuthError
from playmate.config import Settings, load_env_files
from playmate.logging_setup import setup_logging
from playmate.models import FetchPhase
from playmate.session import SessionManager
from playmate.state import AppState
from playmate.steam import SteamAPIError, SteamClient
from playmate.storage import Storage

app = typer.Typer(
    name="playmate",
    help="Your Steam profile, games and CS2 stats in the terminal",
    no_args_is_help=True,
)
console = Console()


@asynccontextmanager
async def _session(settings: Settings):
    """Build a session manager around a fresh Steam client."""
    try:
        client = SteamClient(api_key=settings.steam_api_key)
    except SteamAPIError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    async with client:
        yield SessionManager(client, Storage(settings.data_dir), settings=settings)


def _settings() -> Settings:
    load_env_files()
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    return settings


PHASE_MESSAGES = {
    FetchPhase.RESOLVING: "Resolving Steam ID...",
    FetchPhase.FETCHING_PROFILE: "Fetching profile...",
    FetchPhase.FETCHING_DEPENDENTS: "Fetching games and stats...",
    FetchPhase.FALLBACK: "Loading sample data...",
}


@contextmanager
def _progress(manager: SessionManager, message: str):
    """Show a spinner whose text follows the fetch phase."""
    with console.status(f"[dim]{message}[/dim]") as status:

        def on_change(state: AppState):
            text = PHASE_MESSAGES.get(state.phase)
            if text:
                status.update(f"[dim]{text}[/dim]")

        unsubscribe = manager.store.subscribe(on_change)
        try:
            yield
        finally:
            unsubscribe()


def _format_playtime(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours else f"{mins}m"


def _show_state(state: AppState):
    """Print profile, games and stats from a state snapshot."""
    if state.error:
        console.print(f"[bold yellow]Warning:[/bold yellow] {state.error}")
    if state.is_sample_data:
        console.print("[dim]Showing sample data.[/dim]")

    if state.profile:
        profile = state.profile
        lines = [f"[bold]{profile.persona_name}[/bold]", f"Steam ID: {profile.steam_id}"]
        if profile.real_name:
            lines.append(f"Name: {profile.real_name}")
        if profile.game_extra_info:
            lines.append(f"Playing: {profile.game_extra_info}")
        lines.append(profile.profile_url)
        console.print(Panel("\n".join(lines), style="blue"))

    if state.recent_games:
        table = Table(title="Recent games")
        table.add_column("Game")
        table.add_column("Last 2 weeks", justify="right")
        table.add_column("Total", justify="right")
        for game in state.recent_games:
            recent = _format_playtime(game.playtime_2weeks) if game.playtime_2weeks else "-"
            table.add_row(game.name, recent, _format_playtime(game.playtime_forever))
        console.print(table)

    if state.stats:
        stats = state.stats
        console.print(
            f"[bold]CS2:[/bold] {_format_playtime(stats.total_playtime)} total, "
            f"{_format_playtime(stats.recent_playtime)} recently, {stats.display_summary}"
        )

    for warning in state.playtime_warnings:
        console.print(
            f"[bold red]High playtime:[/bold red] {warning.game_name} "
            f"({_format_playtime(warning.recent_playtime)} in the last two weeks)"
        )


@app.command()
def lookup(identifier: str = typer.Argument(..., help="SteamID64, profile URL or STEAM_X:Y:Z id")):
    """Look up a Steam profile with its recent games and CS2 stats."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            with _progress(manager, "Fetching profile..."):
                await manager.fetch_profile(identifier)
            _show_state(manager.state)

    asyncio.run(run())


@app.command()
def signin():
    """Continue with the last searched Steam account."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            with _progress(manager, "Signing in..."):
                ok = await manager.authenticate()
            user = manager.state.current_user
            if ok and user:
                console.print(f"[bold green]Signed in as {user.username}[/bold green]")
            _show_state(manager.state)

    asyncio.run(run())


@app.command()
def signup(
    username: str = typer.Option(..., prompt=True),
    email: str = typer.Option(..., prompt=True),
    steam_id: str = typer.Option(..., "--steam-id", prompt="Steam ID"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create a local account linked to a Steam ID."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            try:
                with _progress(manager, "Verifying Steam ID..."):
                    user = await manager.sign_up(username, email, steam_id, password)
            except AuthError as e:
                console.print(f"[bold red]Error:[/bold red] {e}")
                raise typer.Exit(1)
            console.print(f"[bold green]Welcome, {user.username}![/bold green]")
            _show_state(manager.state)

    asyncio.run(run())


@app.command()
def login(
    username: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Sign in with a local username and password."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            if not manager.login(username, password):
                console.print("[bold red]Invalid username or password[/bold red]")
                raise typer.Exit(1)
            console.print(f"[bold green]Signed in as {username}[/bold green]")

    asyncio.run(run())


@app.command()
def signout():
    """Sign out. Saved accounts and search history are kept."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            manager.sign_out()
            console.print("[green]Signed out.[/green]")

    asyncio.run(run())


@app.command()
def matches():
    """Show recent competitive CS2 matches."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            with console.status("[dim]Fetching matches...[/dim]"):
                records = await manager.fetch_matches()

            table = Table(title="Recent matches")
            for column in ("Date", "Map", "Score", "Result", "K/D/A", "HS", "Damage", "MVP"):
                table.add_column(column)
            for match in records:
                table.add_row(
                    match.played_at.strftime("%Y-%m-%d %H:%M"),
                    match.map_name,
                    match.score,
                    match.result,
                    f"{match.kills}/{match.deaths}/{match.assists}",
                    str(match.headshots),
                    str(match.damage),
                    "yes" if match.mvp else "",
                )
            console.print(table)

    asyncio.run(run())


@app.command()
def recent(clear: bool = typer.Option(False, "--clear", help="Forget recent searches")):
    """List recently searched Steam IDs."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            if clear:
                manager.clear_recent_searches()
                console.print("[green]Recent searches cleared.[/green]")
                return
            searches = manager.state.recent_searches
            if not searches:
                console.print("[dim]No recent searches.[/dim]")
            for i, steam_id in enumerate(searches, 1):
                console.print(f"  {i}. {steam_id}")

    asyncio.run(run())


@app.command()
def status():
    """Show Steam server status and the signed-in account."""
    settings = _settings()

    async def run():
        async with _session(settings) as manager:
            server_status = await manager.check_server_status()
            state = manager.state

            console.print(Panel("[bold]PlayMate Status[/bold]", style="blue"))
            console.print(server_status.description)
            if state.current_user:
                user = state.current_user
                console.print(f"Signed in as: {user.username} ({user.steam_id or 'unverified'})")
                console.print(f"Last login: {user.last_login:%Y-%m-%d %H:%M}")
            else:
                console.print("Account: [yellow]Not signed in[/yellow]")
            console.print(f"Saved accounts: {len(state.users)}")
            console.print(f"Last searched: {state.last_searched_id or '-'}")
            console.print(f"Checked at {datetime.now():%H:%M:%S}")

    asyncio.run(run())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
