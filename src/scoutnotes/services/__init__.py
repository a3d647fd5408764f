"""Service layer for scoutnotes."""

from scoutnotes.services.team_notes_service import TeamNotesService

__all__ = [
    "TeamNotesService",
]
