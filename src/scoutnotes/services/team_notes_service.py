"""Client-facing operations on team records.

Every operation reads the stored record, upgrades it to the current schema,
applies one lock-protocol step, and writes the result back with a single
compare-and-swap against the bytes it read. A lost race surfaces as
CasConflictError; retrying is up to the caller.
"""

from scoutnotes import lock
from scoutnotes.codec import VersionedRecord, encode
from scoutnotes.dao import TeamStore, get_team_store
from scoutnotes.errors import (
    AlreadyLockedError,
    CasConflictError,
    TeamExistsError,
    TeamNotFoundError,
    TokenMismatchError,
)
from scoutnotes.logging import get_logger, token_prefix
from scoutnotes.schema import LATEST_VERSION, Locked, Team, TeamData, TeamNotes

logger = get_logger(__name__)


class TeamNotesService:
    """GetTeam, AcquireLock, SubmitEdit, ReleaseLock and ForceUnlock over a TeamStore."""

    def __init__(self, store: TeamStore | None = None):
        self.store = store if store is not None else get_team_store()

    # =========================================================================
    # Read / write helpers
    # =========================================================================

    def _load(self, team_id: int) -> tuple[VersionedRecord, Team]:
        """Read a team's record and upgrade it to the current schema."""
        stored = self.store.read(team_id)
        if stored is None:
            raise TeamNotFoundError(team_id)

        team = stored.upgrade(LATEST_VERSION)
        if stored.version != LATEST_VERSION:
            logger.info(
                "record_migrated",
                team_id=team_id,
                from_version=stored.version,
                to_version=LATEST_VERSION,
            )
        return stored, team

    def _commit(self, team_id: int, prior: VersionedRecord, team: Team) -> Team:
        """Write the team back if nobody changed it since ``prior`` was read."""
        if not self.store.compare_and_swap(team_id, prior.raw, encode(team)):
            logger.warning("team_cas_conflict", team_id=team_id)
            raise CasConflictError(team_id)
        return team

    @staticmethod
    def _with_notes(team: Team, notes: TeamNotes) -> Team:
        return team.model_copy(update={"notes": notes})

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def create_team(self, data: TeamData) -> Team:
        """Store a new team with default (empty, unlocked) notes.

        Raises:
            TeamExistsError: if the team already has a record
        """
        team = Team(data=data)
        if not self.store.compare_and_swap(data.id, None, encode(team)):
            logger.warning("team_create_duplicate", team_id=data.id)
            raise TeamExistsError(data.id)

        logger.info("team_created", team_id=data.id, number=data.number)
        return team

    def get_team(self, team_id: int) -> Team:
        """Get a team's record in the current schema.

        Raises:
            TeamNotFoundError: if the team has no record
            InvalidSourceError: if the stored record does not match its version
        """
        _, team = self._load(team_id)
        return team

    def update_team_data(self, team_id: int, data: TeamData) -> Team:
        """Administrative update of team identity and profile.

        Team data is not covered by the notes lock; the notes are written back
        exactly as read.

        Raises:
            ValueError: if ``data.id`` differs from ``team_id``
        """
        if data.id != team_id:
            raise ValueError(f"Team id is immutable ({team_id} != {data.id})")

        prior, team = self._load(team_id)
        updated = self._commit(team_id, prior, team.model_copy(update={"data": data}))
        logger.info("team_data_updated", team_id=team_id)
        return updated

    # =========================================================================
    # Lock protocol
    # =========================================================================

    def acquire_lock(self, team_id: int, token: str | None = None) -> str:
        """Lock a team's notes for editing.

        Args:
            team_id: The team to lock
            token: Client-chosen token; generated when omitted

        Returns:
            The token to present to submit_edit or release_lock

        Raises:
            AlreadyLockedError: if the notes are already locked
            CasConflictError: if the record changed while locking
        """
        prior, team = self._load(team_id)
        try:
            token, locked = lock.acquire(team.notes.lock, token)
        except AlreadyLockedError as e:
            logger.info("team_lock_busy", team_id=team_id, held_by=token_prefix(e.token))
            raise

        notes = team.notes.model_copy(update={"lock": locked})
        self._commit(team_id, prior, self._with_notes(team, notes))
        logger.info("team_lock_acquired", team_id=team_id, token_prefix=token_prefix(token))
        return token

    def submit_edit(self, team_id: int, token: str, notes: TeamNotes) -> Team:
        """Replace a team's notes and release the lock in one write.

        Raises:
            TokenMismatchError: unless the notes are locked by exactly ``token``
            CasConflictError: if the record changed while committing
        """
        prior, team = self._load(team_id)
        try:
            committed = lock.commit_edit(team.notes.lock, token, notes)
        except TokenMismatchError:
            logger.info("team_edit_rejected", team_id=team_id, token_prefix=token_prefix(token))
            raise

        updated = self._commit(team_id, prior, self._with_notes(team, committed))
        logger.info(
            "team_edit_committed",
            team_id=team_id,
            robots=len(committed.robots),
            members=len(committed.members),
        )
        return updated

    def release_lock(self, team_id: int, token: str) -> Team:
        """Release a lock without editing.

        Raises:
            TokenMismatchError: unless the notes are locked by exactly ``token``
            CasConflictError: if the record changed while releasing
        """
        prior, team = self._load(team_id)
        try:
            unlocked = lock.release(team.notes.lock, token)
        except TokenMismatchError:
            logger.info(
                "team_release_rejected", team_id=team_id, token_prefix=token_prefix(token)
            )
            raise

        notes = team.notes.model_copy(update={"lock": unlocked})
        updated = self._commit(team_id, prior, self._with_notes(team, notes))
        logger.info("team_lock_released", team_id=team_id)
        return updated

    def force_unlock(self, team_id: int) -> Team:
        """Clear an abandoned lock regardless of token (admin only)."""
        prior, team = self._load(team_id)
        previous = team.notes.lock
        notes = team.notes.model_copy(update={"lock": lock.force_unlock(previous)})
        updated = self._commit(team_id, prior, self._with_notes(team, notes))

        logger.warning(
            "team_lock_force_unlocked",
            team_id=team_id,
            was_locked=isinstance(previous, Locked),
            held_by=token_prefix(previous.u) if isinstance(previous, Locked) else None,
        )
        return updated
