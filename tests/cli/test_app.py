"""Tests for the scoutnotes CLI."""

import json

import pytest
from typer.testing import CliRunner

import scoutnotes.dao
import scoutnotes.dao.base
from scoutnotes.cli import app as cli_app
from scoutnotes.codec import decode_envelope
from scoutnotes.config import Settings, StorageBackend
from scoutnotes.dao import InMemoryTeamStore, SupabaseClient
from scoutnotes.schema import LATEST_VERSION, Locked, TeamData, Unlocked
from scoutnotes.services import TeamNotesService

runner = CliRunner()

# The real factory, before the autouse fixture below replaces it
build_service = cli_app.get_service


@pytest.fixture(autouse=True)
def cli_service(service, monkeypatch):
    """Point the CLI at the in-memory service."""
    monkeypatch.setattr(cli_app, "get_service", lambda: service)
    return service


@pytest.fixture
def team(service):
    return service.create_team(TeamData(id=7, number="7", name="Sevens"))


class TestTeamCommands:
    """Tests for 'team' commands."""

    def test_create_and_show(self, service):
        result = runner.invoke(cli_app.app, ["team", "create", "7", "--number", "7", "--name", "Sevens"])
        assert result.exit_code == 0, result.output
        assert "Created team 7" in result.output

        result = runner.invoke(cli_app.app, ["team", "show", "7"])
        assert result.exit_code == 0, result.output
        assert "Sevens" in result.output
        assert "Unlocked" in result.output

    def test_create_duplicate(self, team):
        result = runner.invoke(cli_app.app, ["team", "create", "7", "--number", "7"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_show_missing(self):
        result = runner.invoke(cli_app.app, ["team", "show", "99"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestNotesCommands:
    """Tests for 'notes' commands."""

    def test_lock_edit_flow(self, service, team):
        result = runner.invoke(cli_app.app, ["notes", "lock", "7", "--token", "abc"])
        assert result.exit_code == 0, result.output
        assert "abc" in result.output

        result = runner.invoke(cli_app.app, ["notes", "lock", "7"])
        assert result.exit_code == 1
        assert "locked by someone else" in result.output

        result = runner.invoke(
            cli_app.app,
            [
                "notes", "edit", "7",
                "--token", "abc",
                "--strategy", "Defend",
                "--member", "Ada:Driver",
            ],
        )
        assert result.exit_code == 0, result.output

        notes = service.get_team(7).notes
        assert notes.strategy == "Defend"
        assert [(m.name, m.role) for m in notes.members] == [("Ada", "Driver")]
        assert notes.lock == Unlocked()

    def test_edit_wrong_token(self, service, team):
        service.acquire_lock(7, "abc")

        result = runner.invoke(cli_app.app, ["notes", "edit", "7", "--token", "ABC", "--notes", "x"])

        assert result.exit_code == 1
        assert service.get_team(7).notes.notes == ""

    def test_bad_member(self, service, team):
        service.acquire_lock(7, "abc")

        result = runner.invoke(cli_app.app, ["notes", "edit", "7", "--token", "abc", "--member", "Ada"])

        assert result.exit_code != 0
        assert service.get_team(7).notes.lock == Locked(u="abc")

    def test_release(self, service, team):
        service.acquire_lock(7, "abc")

        result = runner.invoke(cli_app.app, ["notes", "release", "7", "--token", "abc"])

        assert result.exit_code == 0, result.output
        assert service.get_team(7).notes.lock == Unlocked()

    def test_force_unlock(self, service, team):
        service.acquire_lock(7, "abandoned")

        result = runner.invoke(cli_app.app, ["notes", "force-unlock", "7", "--yes"])

        assert result.exit_code == 0, result.output
        assert service.get_team(7).notes.lock == Unlocked()

    def test_force_unlock_when_unlocked(self, team):
        result = runner.invoke(cli_app.app, ["notes", "force-unlock", "7", "--yes"])

        assert result.exit_code == 0
        assert "not locked" in result.output


class TestRecordCommands:
    """Tests for 'record upgrade'."""

    def test_upgrade_to_file(self, tmp_path):
        source = tmp_path / "old.json"
        source.write_text(
            json.dumps(
                {
                    "version": 2,
                    "payload": {
                        "data": {"id": 3, "number": "3", "organization": "Acme"},
                        "notes": {"robots": [{"images": "foo.png"}]},
                    },
                }
            )
        )
        target = tmp_path / "new.json"

        result = runner.invoke(cli_app.app, ["record", "upgrade", str(source), "--output", str(target)])

        assert result.exit_code == 0, result.output
        stored = decode_envelope(target.read_bytes())
        assert stored.version == LATEST_VERSION
        assert stored.payload["data"]["organization"] == "Acme"
        assert stored.payload["notes"]["robots"][0]["images"] == ["foo.png"]

    def test_upgrade_invalid(self, tmp_path):
        source = tmp_path / "bad.json"
        source.write_text('{"version": 2, "payload": {"data": {}}}')

        result = runner.invoke(cli_app.app, ["record", "upgrade", str(source)])

        assert result.exit_code == 1
        assert "version 2" in result.output


class ConflictingStore(InMemoryTeamStore):
    """Store whose next ``conflicts`` updates lose the compare-and-swap."""

    def __init__(self, conflicts: int) -> None:
        super().__init__()
        self.conflicts = conflicts
        self.updates = 0

    def compare_and_swap(self, team_id, expected, new):
        if expected is not None:
            self.updates += 1
            if self.conflicts > 0:
                self.conflicts -= 1
                return False
        return super().compare_and_swap(team_id, expected, new)


class TestCasRetry:
    """Caller-side retry of lost compare-and-swaps."""

    @pytest.fixture
    def conflicting(self, monkeypatch):
        """Serve the CLI from a ConflictingStore, retrying at most twice."""

        def use(conflicts: int) -> ConflictingStore:
            store = ConflictingStore(conflicts)
            service = TeamNotesService(store)
            service.create_team(TeamData(id=7, number="7"))
            monkeypatch.setattr(cli_app, "get_service", lambda: service)
            return store

        settings = Settings(storage_backend=StorageBackend.MEMORY, cas_retry_attempts=2)
        monkeypatch.setattr(cli_app, "get_settings", lambda: settings)
        return use

    def test_lock_succeeds_after_lost_race(self, conflicting):
        store = conflicting(1)

        result = runner.invoke(cli_app.app, ["notes", "lock", "7", "--token", "abc"])

        assert result.exit_code == 0, result.output
        assert store.updates == 2
        assert TeamNotesService(store).get_team(7).notes.lock == Locked(u="abc")

    def test_edit_succeeds_after_lost_race(self, conflicting):
        store = conflicting(0)
        TeamNotesService(store).acquire_lock(7, "abc")
        store.conflicts = 1

        result = runner.invoke(cli_app.app, ["notes", "edit", "7", "--token", "abc", "--notes", "x"])

        assert result.exit_code == 0, result.output
        notes = TeamNotesService(store).get_team(7).notes
        assert notes.notes == "x"
        assert notes.lock == Unlocked()

    def test_gives_up_after_configured_attempts(self, conflicting):
        """Once every attempt has lost the race the command fails cleanly."""
        store = conflicting(5)

        result = runner.invoke(cli_app.app, ["notes", "lock", "7", "--token", "abc"])

        assert result.exit_code == 1
        assert "changed since it was read" in result.output
        assert isinstance(result.exception, SystemExit)
        assert store.updates == 2
        assert TeamNotesService(store).get_team(7).notes.lock == Unlocked()


class TestErrorReporting:
    """Failures outside the lock protocol still end in a one-line error."""

    def test_empty_token_is_rejected(self, team):
        result = runner.invoke(cli_app.app, ["notes", "lock", "7", "--token", ""])

        assert result.exit_code == 1
        assert "Error: Lock token must not be empty" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_missing_supabase_credentials(self, monkeypatch):
        settings = Settings(
            storage_backend=StorageBackend.SUPABASE, supabase_url=None, supabase_key=None
        )
        monkeypatch.setattr(scoutnotes.dao, "get_settings", lambda: settings)
        monkeypatch.setattr(scoutnotes.dao.base, "get_settings", lambda: settings)
        monkeypatch.setattr(cli_app, "get_service", build_service)
        SupabaseClient.reset()

        try:
            result = runner.invoke(cli_app.app, ["team", "show", "7"])
        finally:
            SupabaseClient.reset()

        assert result.exit_code == 1
        assert "Error: SUPABASE_URL and SUPABASE_KEY" in result.output
        assert isinstance(result.exception, SystemExit)
