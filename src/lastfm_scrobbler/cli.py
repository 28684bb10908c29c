# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Command line interface for the Last.fm scrobbler."""

from __future__ import annotations

import json
import logging
import os
from contextlib import suppress
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Literal

import keyring
import rich
import typer
from keyring.errors import KeyringError
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .client import ApiClient, PylastClient
from .exceptions import InvalidScrobble, ScrobblerError
from .models import Scrobble, ScrobbleBatch, ScrobbleResult
from .scrobbler import Scrobbler
from .utils import custom_print, setup_logging

# Create Typer app instance
app = typer.Typer(
    name="lastfm-scrobbler",
    help="Scrobble plays and now-playing updates to Last.fm",
    add_completion=False,
    no_args_is_help=True,  # Show help when no command is provided
)

# Constants
APP_NAME = "lastfm-scrobbler"
CONFIG_DIR = Path.home() / ".lastfm_scrobbler"
CREDENTIAL_KEYS = ["username", "password", "api_key", "api_secret"]
SENSITIVE_KEYS = {"password", "api_secret", "session_key"}

# Storage options
StorageType = Literal["env_file", "keyring"]

# Create a simple file-based storage
CREDENTIALS_FILE = CONFIG_DIR / ".env"


def save_to_env_file(credentials: dict[str, str], merge: bool = True) -> None:
    """Save credentials to .env file in config directory.

    Args:
        credentials: Dictionary of credentials to save
        merge: Whether to merge with existing file content before writing
    """
    try:
        merged_credentials = load_from_env_file() if merge else {}
        merged_credentials.update(credentials)
        CREDENTIALS_FILE.parent.mkdir(parents=True, exist_ok=True)
        with CREDENTIALS_FILE.open("w", encoding="utf-8") as f:
            for key, value in merged_credentials.items():
                f.write(f"LASTFM_{key.upper()}={value}\n")
        rich.print(f"[green]✓[/green] Credentials saved to {CREDENTIALS_FILE}")
    except OSError as exc:
        error_message = (
            "[red]Error:[/red] Could not save credentials to "
            f"{CREDENTIALS_FILE}: {exc}"
        )
        rich.print(error_message)


def load_from_env_file() -> dict[str, str]:
    """Load credentials from .env file.

    Returns:
        Dictionary of credentials
    """
    credentials: dict[str, str] = {}
    if not CREDENTIALS_FILE.exists():
        return credentials

    try:
        with CREDENTIALS_FILE.open(encoding="utf-8") as file_handle:
            for line in file_handle:
                if "=" not in line:
                    continue
                env_key, value = line.strip().split("=", 1)
                if env_key.startswith("LASTFM_"):
                    credentials[env_key[7:].lower()] = value
    except OSError:
        return credentials

    return credentials


def get_stored_credential(key: str) -> str | None:
    """Get a credential from available storage methods.

    Args:
        key: The key to retrieve

    Returns:
        The stored credential or None if not found
    """
    # First try environment variable
    env_key = f"LASTFM_{key.upper()}"
    if value := os.getenv(env_key):
        return value

    # Then try keyring
    try:
        if value := keyring.get_password(APP_NAME, key):
            return value
    except KeyringError:
        pass

    # Finally try config env file
    return load_from_env_file().get(key)


def store_credential(
    key: str, value: str, storage_type: StorageType | None = None,
) -> None:
    """Store a credential using the specified or available storage method.

    Args:
        key: The key to store
        value: The value to store
        storage_type: Where to store the credential (if None, will use available method)
    """
    if storage_type == "keyring":
        keyring.set_password(APP_NAME, key, value)
        return
    if storage_type == "env_file":
        save_to_env_file({key: value})
        return

    # Otherwise try keyring first
    try:
        keyring.set_password(APP_NAME, key, value)
    except KeyringError as exc:
        rich.print(f"[yellow]Warning:[/yellow] Could not store in keyring: {exc}")
    else:
        return

    # Fall back to env file
    save_to_env_file({key: value})


def delete_credential(key: str) -> None:
    """Delete a credential from all storage locations.

    Args:
        key: The key to delete
    """
    with suppress(KeyringError):
        keyring.delete_password(APP_NAME, key)

    # Remove from env file
    if CREDENTIALS_FILE.exists():
        credentials = load_from_env_file()
        if key in credentials:
            del credentials[key]
            save_to_env_file(credentials, merge=False)


def build_client(api_key: str, api_secret: str) -> ApiClient:
    return PylastClient(api_key, api_secret)


def get_scrobbler(authenticate: bool = True) -> Scrobbler:
    """Create a scrobbler from stored credentials.

    Args:
        authenticate: Restore the stored session key, or log in with the
            stored password when there is none

    Returns:
        The scrobbler, authenticated unless ``authenticate`` is False

    Raises:
        typer.Exit: If required credentials are missing
        ScrobblerError: If logging in with the stored password fails
    """
    api_key = get_stored_credential("api_key")
    api_secret = get_stored_credential("api_secret")
    if not api_key or not api_secret:
        rich.print(
            "[red]Error:[/red] Missing API key or secret. Please run "
            "'lastfm-scrobbler setup' to configure.",
        )
        raise typer.Exit(1)

    scrobbler = Scrobbler(build_client(api_key, api_secret))
    if not authenticate:
        return scrobbler

    if session_key := get_stored_credential("session_key"):
        scrobbler.authenticate_with_session_key(session_key)
        return scrobbler

    username = get_stored_credential("username")
    password = get_stored_credential("password")
    if not username or not password:
        rich.print(
            "[red]Error:[/red] No session key or password stored. Please run "
            "'lastfm-scrobbler auth' first.",
        )
        raise typer.Exit(1)

    scrobbler.authenticate_with_password(username, password)
    return scrobbler


def build_scrobble(  # noqa: PLR0913, PLR0917
    artist: str,
    track: str,
    album: str,
    album_artist: str | None = None,
    track_number: int | None = None,
    duration: int | None = None,
    mbid: str | None = None,
    timestamp: int | None = None,
) -> Scrobble:
    """Build a scrobble from command line values.

    Raises:
        typer.Exit: If artist, track or album is empty
    """
    try:
        scrobble = Scrobble(artist, track, album)
    except InvalidScrobble as exc:
        rich.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    if album_artist:
        scrobble.with_album_artist(album_artist)
    if track_number is not None:
        scrobble.with_track_number(track_number)
    if duration is not None:
        scrobble.with_duration(duration)
    if mbid:
        scrobble.with_mbid(mbid)
    if timestamp is not None:
        scrobble.with_timestamp(timestamp)
    return scrobble


def load_batch(path: Path) -> ScrobbleBatch:
    """Read a JSON array of scrobble records.

    Raises:
        typer.Exit: If the file cannot be read or holds invalid records
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        rich.print(f"[red]Error:[/red] Could not read {path}: {exc}")
        raise typer.Exit(1) from exc

    if not isinstance(data, list) or not all(isinstance(i, dict) for i in data):
        rich.print(f"[red]Error:[/red] {path} must contain a JSON array of objects")
        raise typer.Exit(1)

    try:
        return ScrobbleBatch.of(Scrobble.from_map(item) for item in data)
    except InvalidScrobble as exc:
        rich.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


def results_table(results: tuple[ScrobbleResult, ...], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", style="dim")
    table.add_column("Artist", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Album", style="blue")
    table.add_column("Played At", style="magenta")
    table.add_column("Status")

    for idx, result in enumerate(results, 1):
        played_at = datetime.fromtimestamp(result.timestamp, tz=timezone.utc)
        status = (
            "[green]accepted[/green]"
            if result.accepted
            else f"[red]ignored ({result.ignored_code})[/red]"
        )
        table.add_row(
            str(idx),
            result.artist.text,
            result.track.text,
            result.album.text or "—",  # Show dash if no album
            played_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
            status,
        )
    return table


def interactive_setup() -> None:
    """Run interactive setup to configure credentials.

    Raises:
        typer.Exit: If persisting the credentials fails.
    """
    rich.print("\n[bold]Welcome to Last.fm Scrobbler Setup![/bold]\n")

    # Explain storage options
    rich.print("[bold]Available credential storage options:[/bold]")
    options: list[tuple[StorageType, str]] = [
        ("keyring", "System keyring (most secure)"),
        ("env_file", f"Config file ({CREDENTIALS_FILE})"),
    ]
    for index, (_storage_key, desc) in enumerate(options, 1):
        rich.print(f"{index}. {desc}")

    choice = Prompt.ask(
        "\nWhere would you like to store your credentials?",
        choices=[str(i) for i in range(1, len(options) + 1)],
        default="1",
    )
    storage_type = options[int(choice) - 1][0]

    rich.print("\nPlease enter your Last.fm credentials:")
    username = Prompt.ask("Username")
    password = Prompt.ask("Password", password=True)
    api_key = Prompt.ask("API Key")
    api_secret = Prompt.ask("API Secret", password=True)

    # Store credentials using chosen method
    try:
        for key, value in [
            ("username", username),
            ("password", password),
            ("api_key", api_key),
            ("api_secret", api_secret),
        ]:
            store_credential(key, value, storage_type)

        rich.print(f"\n[green]✓[/green] Credentials stored using {storage_type}!")
    except (KeyringError, OSError) as exc:
        rich.print(f"\n[red]Error:[/red] Failed to store credentials: {exc}")
        raise typer.Exit(1) from exc


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Scrobble plays and now-playing updates to Last.fm."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@app.command(name="setup")
def setup_credentials() -> None:
    """Configure Last.fm credentials (removes existing if any)."""
    has_credentials = any(get_stored_credential(key) for key in CREDENTIAL_KEYS)

    if has_credentials:
        if not Confirm.ask(
            "\nExisting credentials found. Do you want to reconfigure them?",
        ):
            rich.print("Operation cancelled.")
            return

        for key in [*CREDENTIAL_KEYS, "session_key"]:
            delete_credential(key)

        rich.print("[green]✓[/green] Existing credentials removed.")

    interactive_setup()


@app.command(name="show")
def show_credentials() -> None:
    """Show stored Last.fm credentials (passwords/secrets masked)."""
    console = Console()
    table = Table(title="Stored Credentials")

    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for key in [*CREDENTIAL_KEYS, "session_key"]:
        value = get_stored_credential(key)
        if value:
            display_value = "********" if key in SENSITIVE_KEYS else value
            table.add_row(key, display_value)
        else:
            table.add_row(key, "[red]not set[/red]")

    console.print(table)


@app.command(name="reset")
def reset_credentials() -> None:
    """Remove all stored Last.fm credentials."""
    if not Confirm.ask("\nAre you sure you want to remove all stored credentials?"):
        rich.print("Operation cancelled.")
        return

    for key in [*CREDENTIAL_KEYS, "session_key"]:
        delete_credential(key)

    rich.print("\n[green]✓[/green] All credentials removed successfully!")


@app.command(name="auth")
def authenticate(
    token: str | None = typer.Option(
        None,
        "--token",
        "-t",
        help="Pre-issued Last.fm auth token (password login if omitted)",
    ),
) -> None:
    """Obtain a session key and store it for later commands.

    Raises:
        typer.Exit: If credentials are missing or authentication fails.
    """
    scrobbler = get_scrobbler(authenticate=False)

    try:
        if token:
            session = scrobbler.authenticate_with_token(token)
        else:
            username = get_stored_credential("username")
            password = get_stored_credential("password")
            if not username or not password:
                rich.print(
                    "[red]Error:[/red] Missing username or password. Please run "
                    "'lastfm-scrobbler setup' or pass --token.",
                )
                raise typer.Exit(1)
            session = scrobbler.authenticate_with_password(username, password)
    except ScrobblerError as exc:
        rich.print(f"[red]Error:[/red] Authentication failed: {exc}")
        raise typer.Exit(1) from exc

    custom_print(f"Authenticated as {session.name}")
    rich.print(f"Session key: {session.key}")
    store_credential("session_key", session.key)


@app.command(name="now-playing")
def now_playing(  # noqa: PLR0913, PLR0917
    artist: Annotated[str, typer.Argument(help="Track artist")],
    track: Annotated[str, typer.Argument(help="Track title")],
    album: Annotated[str, typer.Argument(help="Album title")],
    album_artist: str | None = typer.Option(None, "--album-artist", "-a"),
    track_number: int | None = typer.Option(None, "--track-number", "-n"),
    duration: int | None = typer.Option(
        None, "--duration", "-d", help="Track length in seconds",
    ),
    mbid: str | None = typer.Option(None, "--mbid", help="MusicBrainz track id"),
) -> None:
    """Update the "now playing" status of the authenticated user.

    Raises:
        typer.Exit: If the update fails.
    """
    scrobble = build_scrobble(
        artist, track, album, album_artist, track_number, duration, mbid,
    )
    try:
        response = get_scrobbler().now_playing(scrobble)
    except ScrobblerError as exc:
        rich.print(f"[red]Error:[/red] Now playing update failed: {exc}")
        raise typer.Exit(1) from exc

    if response.ignored_code:
        custom_print(
            "Last.fm ignored the update: "
            f"{response.ignored_message or response.ignored_code}",
            "WARNING",
        )
        return
    rich.print(
        f"[green]✓[/green] Now playing: {response.artist.text} - "
        f"{response.track.text}",
    )


@app.command(name="scrobble")
def scrobble(  # noqa: PLR0913, PLR0917
    artist: Annotated[str, typer.Argument(help="Track artist")],
    track: Annotated[str, typer.Argument(help="Track title")],
    album: Annotated[str, typer.Argument(help="Album title")],
    timestamp: int | None = typer.Option(
        None,
        "--timestamp",
        help="Unix time the track started playing (defaults to now)",
    ),
    album_artist: str | None = typer.Option(None, "--album-artist", "-a"),
    track_number: int | None = typer.Option(None, "--track-number", "-n"),
    duration: int | None = typer.Option(
        None, "--duration", "-d", help="Track length in seconds",
    ),
    mbid: str | None = typer.Option(None, "--mbid", help="MusicBrainz track id"),
) -> None:
    """Scrobble a single play.

    Raises:
        typer.Exit: If the scrobble fails.
    """
    record = build_scrobble(
        artist, track, album, album_artist, track_number, duration, mbid, timestamp,
    )
    try:
        response = get_scrobbler().scrobble(record)
    except ScrobblerError as exc:
        rich.print(f"[red]Error:[/red] Scrobble failed: {exc}")
        raise typer.Exit(1) from exc

    Console().print(results_table((response.result,), "Scrobbled Track"))


@app.command(name="batch")
def scrobble_batch(
    path: Annotated[
        Path,
        typer.Argument(help="JSON file holding an array of scrobble records"),
    ],
) -> None:
    """Scrobble up to 50 plays from a JSON file in one request.

    Raises:
        typer.Exit: If the file is invalid or the submission fails.
    """
    batch = load_batch(path)
    try:
        response = get_scrobbler().scrobble_batch(batch)
    except ScrobblerError as exc:
        rich.print(f"[red]Error:[/red] Batch scrobble failed: {exc}")
        raise typer.Exit(1) from exc

    console = Console()
    console.print(
        f"[green]✓[/green] Accepted {response.accepted}, "
        f"ignored {response.ignored}",
    )
    if response.results:
        console.print(results_table(response.results, "Scrobbled Tracks"))


def main() -> None:
    """Entry point for the CLI."""
    app()
