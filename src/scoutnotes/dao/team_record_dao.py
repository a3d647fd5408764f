"""Supabase-backed team store.

Expected table:

    create table team_records (
        id            bigint primary key,
        version       integer not null,
        record        text not null,
        record_sha256 char(64) not null
    );

Compare-and-swap filters on ``record_sha256`` rather than on the record
itself, so the request URL stays the same size however long the notes get.
"""

import hashlib

from postgrest.exceptions import APIError
from supabase import Client

from scoutnotes.codec import VersionedRecord, decode_envelope
from scoutnotes.config import get_settings
from scoutnotes.dao.base import SupabaseClient
from scoutnotes.logging import get_logger

logger = get_logger(__name__)


def record_digest(raw: bytes) -> str:
    """SHA-256 of the exact stored bytes, used as the compare-and-swap key."""
    return hashlib.sha256(raw).hexdigest()


class TeamRecordDAO:
    """DAO for serialized team records, implementing TeamStore."""

    def __init__(self, client: Client | None = None, table_name: str | None = None):
        """Initialize the DAO.

        Args:
            client: Supabase client. If not provided, uses the singleton.
            table_name: Table to use. Defaults to TEAM_RECORDS_TABLE.
        """
        self.client = client or SupabaseClient.get_client()
        self.table_name = table_name or get_settings().team_records_table

    @property
    def table(self):
        """Get the table reference."""
        return self.client.table(self.table_name)

    def read(self, team_id: int) -> VersionedRecord | None:
        """Read the stored record for a team.

        Returns:
            The record envelope, or None if the team has no record
        """
        result = self.table.select("record").eq("id", team_id).execute()

        if not result.data:
            return None

        return decode_envelope(result.data[0]["record"])

    def compare_and_swap(self, team_id: int, expected: bytes | None, new: bytes) -> bool:
        """Write ``new`` only if the stored record still equals ``expected``.

        Returns:
            True if the write happened, False if the stored record had changed
        """
        row = {
            "version": decode_envelope(new).version,
            "record": new.decode("utf-8"),
            "record_sha256": record_digest(new),
        }

        if expected is None:
            try:
                result = self.table.insert({"id": team_id, **row}).execute()
            except APIError as e:
                error_str = str(e).lower()
                if e.code == "23505" or "duplicate" in error_str:
                    logger.debug("team_record_insert_conflict", team_id=team_id)
                    return False
                raise
            return len(result.data) > 0

        result = (
            self.table.update(row)
            .eq("id", team_id)
            .eq("record_sha256", record_digest(expected))
            .execute()
        )
        return len(result.data) > 0

    def delete(self, team_id: int) -> bool:
        """Delete a team's record.

        Returns:
            True if deleted, False if not found
        """
        result = self.table.delete().eq("id", team_id).execute()
        return len(result.data) > 0
