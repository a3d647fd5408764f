"""Scout notes CLI application.

Usage:
    scoutnotes team create 254 --number 254 --name "The Cheesy Poofs"
    scoutnotes team show 254
    scoutnotes notes lock 254
    scoutnotes notes edit 254 --token <token> --strategy "Defend the far zone"
    scoutnotes notes release 254 --token <token>
    scoutnotes notes force-unlock 254
    scoutnotes record upgrade old-record.json
"""

from pathlib import Path
from typing import NoReturn

import typer
from dotenv import load_dotenv

# Load .env before settings are read
load_dotenv()
from rich.console import Console
from rich.table import Table
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from scoutnotes.codec import decode_envelope, encode
from scoutnotes.config import get_settings
from scoutnotes.errors import (
    AlreadyLockedError,
    CasConflictError,
    MigrationError,
    ScoutNotesError,
)
from scoutnotes.logging import configure_logging, get_logger
from scoutnotes.schema import LATEST_VERSION, Locked, Team, TeamData, TeamMember
from scoutnotes.services import TeamNotesService

console = Console()
logger = get_logger(__name__)

app = typer.Typer(
    name="scoutnotes",
    help="Shared scouting notes for teams",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Shared scouting notes for teams."""
    configure_logging()


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def get_service() -> TeamNotesService:
    """Build the service over the configured store."""
    try:
        return TeamNotesService()
    except RuntimeError as e:
        # Missing Supabase credentials
        _fail(str(e))


def _retrying_cas(fn, *args, **kwargs):
    """Call ``fn``, re-running it from a fresh read when a CAS race is lost."""
    retrying = Retrying(
        stop=stop_after_attempt(get_settings().cas_retry_attempts),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        retry=retry_if_exception_type(CasConflictError),
        reraise=True,
    )
    return retrying(fn, *args, **kwargs)


def _print_team(team: Team) -> None:
    data, notes = team.data, team.notes

    table = Table(title=f"Team {data.number}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("ID", str(data.id))
    table.add_row("Name", data.name or "-")
    table.add_row("Organization", data.organization or "-")
    table.add_row("City", data.location.city or "-")
    table.add_row("Country", data.location.country or "-")
    table.add_row("Lock", str(notes.lock))
    table.add_row("Driving", notes.driving or "-")
    table.add_row("Strategy", notes.strategy or "-")
    table.add_row("Notes", notes.notes or "-")
    console.print(table)

    if notes.members:
        members = Table(title="Members")
        members.add_column("Name", style="cyan")
        members.add_column("Role")
        for member in notes.members:
            members.add_row(member.name, member.role)
        console.print(members)

    if notes.robots:
        robots = Table(title="Robots")
        robots.add_column("#", style="dim")
        robots.add_column("Status")
        robots.add_column("Features")
        robots.add_column("Images", justify="right")
        robots.add_column("Autons", justify="right")
        for i, robot in enumerate(notes.robots, start=1):
            robots.add_row(
                str(i),
                robot.status.value,
                robot.features,
                str(len(robot.images)),
                str(len(robot.autons)),
            )
        console.print(robots)


def _parse_member(value: str) -> TeamMember:
    name, sep, role = value.partition(":")
    if not sep or not name.strip():
        raise typer.BadParameter(f"Expected NAME:ROLE, got '{value}'")
    return TeamMember(name=name.strip(), role=role.strip())


# =============================================================================
# TEAM COMMANDS
# =============================================================================

team_app = typer.Typer(help="Team records", no_args_is_help=True)
app.add_typer(team_app, name="team")


@team_app.command("create")
def team_create(
    team_id: int = typer.Argument(..., help="Team id"),
    number: str = typer.Option(..., "--number", "-n", help="Team number"),
    name: str = typer.Option("", "--name", help="Team name"),
    organization: str = typer.Option(None, "--organization", "-o", help="Organization"),
):
    """Register a team with empty notes."""
    data = TeamData(id=team_id, number=number, name=name, organization=organization)
    try:
        team = get_service().create_team(data)
    except ScoutNotesError as e:
        _fail(str(e))

    console.print(f"[green]Created team {team.data.number}[/green]")


@team_app.command("show")
def team_show(team_id: int = typer.Argument(..., help="Team id")):
    """Show a team's record."""
    try:
        team = get_service().get_team(team_id)
    except ScoutNotesError as e:
        _fail(str(e))

    _print_team(team)


# =============================================================================
# NOTES COMMANDS
# =============================================================================

notes_app = typer.Typer(help="Edit team notes under the lock", no_args_is_help=True)
app.add_typer(notes_app, name="notes")


@notes_app.command("lock")
def notes_lock(
    team_id: int = typer.Argument(..., help="Team id"),
    token: str = typer.Option(None, "--token", "-t", help="Token to lock with (generated if omitted)"),
):
    """Lock a team's notes for editing and print the token."""
    try:
        token = _retrying_cas(get_service().acquire_lock, team_id, token)
    except AlreadyLockedError:
        _fail("Notes are locked by someone else. Try again once they are done.")
    except ScoutNotesError as e:
        _fail(str(e))

    console.print(f"[green]Locked.[/green] Token: [bold]{token}[/bold]")


@notes_app.command("edit")
def notes_edit(
    team_id: int = typer.Argument(..., help="Team id"),
    token: str = typer.Option(..., "--token", "-t", help="Token returned by 'notes lock'"),
    driving: str = typer.Option(None, "--driving", help="Replace the driving notes"),
    strategy: str = typer.Option(None, "--strategy", help="Replace the strategy notes"),
    notes: str = typer.Option(None, "--notes", help="Replace the general notes"),
    member: list[str] = typer.Option(None, "--member", "-m", help="Add a member as NAME:ROLE"),
):
    """Submit an edit to the notes; this also releases the lock."""
    new_members = [_parse_member(m) for m in member or []]
    service = get_service()

    def edit() -> Team:
        current = service.get_team(team_id).notes
        updates = {"members": [*current.members, *new_members]}
        if driving is not None:
            updates["driving"] = driving
        if strategy is not None:
            updates["strategy"] = strategy
        if notes is not None:
            updates["notes"] = notes
        return service.submit_edit(team_id, token, current.model_copy(update=updates))

    try:
        _retrying_cas(edit)
    except ScoutNotesError as e:
        _fail(str(e))

    console.print("[green]Saved and unlocked.[/green]")


@notes_app.command("release")
def notes_release(
    team_id: int = typer.Argument(..., help="Team id"),
    token: str = typer.Option(..., "--token", "-t", help="Token returned by 'notes lock'"),
):
    """Release the lock without editing."""
    try:
        _retrying_cas(get_service().release_lock, team_id, token)
    except ScoutNotesError as e:
        _fail(str(e))

    console.print("[green]Unlocked.[/green]")


@notes_app.command("force-unlock")
def notes_force_unlock(
    team_id: int = typer.Argument(..., help="Team id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Clear an abandoned lock (admin)."""
    service = get_service()
    try:
        current = service.get_team(team_id).notes.lock
    except ScoutNotesError as e:
        _fail(str(e))

    if not isinstance(current, Locked):
        console.print("[yellow]Notes are not locked[/yellow]")
        return
    if not yes:
        typer.confirm("Discard the current lock holder's right to commit?", abort=True)

    try:
        _retrying_cas(service.force_unlock, team_id)
    except ScoutNotesError as e:
        _fail(str(e))

    console.print("[green]Lock cleared.[/green]")


# =============================================================================
# RECORD COMMANDS
# =============================================================================

record_app = typer.Typer(help="Serialized record tools", no_args_is_help=True)
app.add_typer(record_app, name="record")


@record_app.command("upgrade")
def record_upgrade(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Serialized record"),
    output: Path = typer.Option(None, "--output", "-o", help="Write here instead of stdout"),
):
    """Migrate a serialized record to the current schema version."""
    try:
        stored = decode_envelope(path.read_bytes())
        upgraded = stored.upgrade(LATEST_VERSION)
    except MigrationError as e:
        _fail(str(e))

    raw = encode(upgraded)
    logger.info("record_upgraded", path=str(path), from_version=stored.version)
    if output is None:
        typer.echo(raw.decode("utf-8"))
    else:
        output.write_bytes(raw)
        console.print(
            f"[green]Upgraded version {stored.version} -> {LATEST_VERSION}:[/green] {output}"
        )


if __name__ == "__main__":
    app()
