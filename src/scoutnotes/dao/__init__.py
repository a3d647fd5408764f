"""Storage collaborators for team records."""

from scoutnotes.config import Settings, StorageBackend, get_settings
from scoutnotes.dao.base import SupabaseClient, TeamStore
from scoutnotes.dao.memory_store import InMemoryTeamStore
from scoutnotes.dao.team_record_dao import TeamRecordDAO


def get_team_store(settings: Settings | None = None) -> TeamStore:
    """Build the team store selected by STORAGE_BACKEND."""
    settings = settings or get_settings()
    if settings.storage_backend == StorageBackend.MEMORY:
        return InMemoryTeamStore()
    return TeamRecordDAO()


__all__ = [
    "get_team_store",
    "InMemoryTeamStore",
    "SupabaseClient",
    "TeamRecordDAO",
    "TeamStore",
]
