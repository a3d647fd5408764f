"""Optimistic lock protocol for team notes.

The lock lives inside the record (``TeamNotes.lock``), so these functions keep
no state of their own: each takes the lock as it was read and returns the lock
or notes to write back. Making the read-modify-write atomic is the job of the
storage compare-and-swap; whoever loses that race re-reads and tries again.

    Unlocked --acquire--> Locked(token) --commit_edit / release--> Unlocked
    any state --force_unlock--> Unlocked
"""

from uuid import uuid4

from scoutnotes.errors import AlreadyLockedError, InvalidTokenError, TokenMismatchError
from scoutnotes.schema import Lock, Locked, TeamNotes, Unlocked


def new_token() -> str:
    """Generate an opaque lock token."""
    return uuid4().hex


def holds(current: Lock, token: str) -> bool:
    """Check whether ``token`` is exactly the token holding ``current``."""
    return isinstance(current, Locked) and current.u == token


def acquire(current: Lock, token: str | None = None) -> tuple[str, Locked]:
    """Lock unlocked notes.

    Args:
        current: The lock as read from the record
        token: Client-chosen token; one is generated when omitted

    Returns:
        Tuple of (token, new lock state)

    Raises:
        AlreadyLockedError: if the notes are already locked, by any token
        InvalidTokenError: if ``token`` is given but empty
    """
    if isinstance(current, Locked):
        raise AlreadyLockedError(current.u)
    if token is None:
        token = new_token()
    elif not token:
        raise InvalidTokenError()
    return token, Locked(u=token)


def release(current: Lock, token: str) -> Unlocked:
    """Give up the lock without editing.

    Raises:
        TokenMismatchError: unless ``current`` is locked by exactly ``token``
    """
    if not holds(current, token):
        raise TokenMismatchError()
    return Unlocked()


def commit_edit(current: Lock, token: str, new_notes: TeamNotes) -> TeamNotes:
    """Accept an edit from the lock holder and release the lock with it.

    Whatever lock ``new_notes`` carries is ignored; the committed notes are
    always unlocked.

    Raises:
        TokenMismatchError: unless ``current`` is locked by exactly ``token``
    """
    if not holds(current, token):
        raise TokenMismatchError()
    return new_notes.model_copy(update={"lock": Unlocked()})


def force_unlock(current: Lock) -> Unlocked:
    """Administrative override that clears any lock regardless of token.

    Callers should log this as a non-routine action.
    """
    return Unlocked()
