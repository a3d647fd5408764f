"""Storage collaborator contract and the shared Supabase client."""

from typing import Protocol

from supabase import Client, create_client

from scoutnotes.codec import VersionedRecord
from scoutnotes.config import get_settings


class TeamStore(Protocol):
    """What scoutnotes needs from storage.

    ``compare_and_swap`` must be atomic: it writes ``new`` only if the stored
    bytes still equal ``expected``. ``expected=None`` means "only if no record
    exists yet".
    """

    def read(self, team_id: int) -> VersionedRecord | None: ...

    def compare_and_swap(self, team_id: int, expected: bytes | None, new: bytes) -> bool: ...

    def delete(self, team_id: int) -> bool: ...


class SupabaseClient:
    """Singleton Supabase client manager."""

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """Get or create the Supabase client from settings."""
        if cls._instance is None:
            settings = get_settings()
            if not settings.supabase_url or not settings.supabase_key:
                raise RuntimeError(
                    "SUPABASE_URL and SUPABASE_KEY environment variables must be set"
                )
            cls._instance = create_client(
                settings.supabase_url, settings.supabase_key.get_secret_value()
            )

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the client (useful for testing)."""
        cls._instance = None
