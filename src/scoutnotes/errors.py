"""Typed errors raised by the migration engine, lock protocol, and storage layer.

Nothing in scoutnotes retries or swallows these. Callers decide:
    - MigrationError subclasses are fatal for the request.
    - LockError subclasses and CasConflictError are recoverable by re-reading
      the record and trying again.
"""


class ScoutNotesError(Exception):
    """Base class for all scoutnotes errors."""


# =============================================================================
# MIGRATION
# =============================================================================


class MigrationError(ScoutNotesError):
    """A record could not be brought to the requested schema version."""


class InvalidSourceError(MigrationError):
    """The record does not parse against its declared schema version."""

    def __init__(self, version: int, reason: str):
        self.version = version
        self.reason = reason
        super().__init__(f"Record does not match schema version {version}: {reason}")


class UnsupportedDirectionError(MigrationError):
    """Downgrading a record to an older schema version was requested."""

    def __init__(self, from_version: int, to_version: int):
        self.from_version = from_version
        self.to_version = to_version
        super().__init__(
            f"Cannot migrate from version {from_version} down to version {to_version}"
        )


class UnknownVersionError(MigrationError):
    """The target schema version is not one this release knows about."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unknown schema version: {version}")


# =============================================================================
# LOCKING
# =============================================================================


class LockError(ScoutNotesError):
    """A lock precondition did not hold for the record as read."""


class AlreadyLockedError(LockError):
    """The notes are already locked by another token.

    The held token is exposed so a caller can tell whether it is its own
    (for example after a lost response) before deciding to retry.
    """

    def __init__(self, token: str):
        self.token = token
        super().__init__("Team notes are already locked")


class TokenMismatchError(LockError):
    """The supplied token is not the token currently holding the lock."""

    def __init__(self, message: str = "Lock token does not match the held lock"):
        super().__init__(message)


class InvalidTokenError(LockError):
    """The supplied token cannot be used to lock (for example, it is empty)."""

    def __init__(self, message: str = "Lock token must not be empty"):
        super().__init__(message)


# =============================================================================
# STORAGE
# =============================================================================


class StorageError(ScoutNotesError):
    """Base class for errors reported through the storage collaborator."""


class CasConflictError(StorageError):
    """The compare-and-swap lost a race; the stored record changed since it was read."""

    def __init__(self, team_id: int):
        self.team_id = team_id
        super().__init__(f"Record for team {team_id} changed since it was read")


class TeamNotFoundError(StorageError):
    """No record is stored for the team."""

    def __init__(self, team_id: int):
        self.team_id = team_id
        super().__init__(f"Team {team_id} not found")


class TeamExistsError(StorageError):
    """A record is already stored for the team."""

    def __init__(self, team_id: int):
        self.team_id = team_id
        super().__init__(f"Team {team_id} already exists")
