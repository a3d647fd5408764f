"""Process-local team store."""

import threading

from scoutnotes.codec import VersionedRecord, decode_envelope


class InMemoryTeamStore:
    """Team records held in a dict, with compare-and-swap under a mutex.

    Safe to share between threads. Used by the test suite and for offline work.
    """

    def __init__(self) -> None:
        self._records: dict[int, bytes] = {}
        self._mutex = threading.Lock()

    def read(self, team_id: int) -> VersionedRecord | None:
        with self._mutex:
            raw = self._records.get(team_id)
        if raw is None:
            return None
        return decode_envelope(raw)

    def compare_and_swap(self, team_id: int, expected: bytes | None, new: bytes) -> bool:
        with self._mutex:
            if self._records.get(team_id) != expected:
                return False
            self._records[team_id] = new
            return True

    def delete(self, team_id: int) -> bool:
        with self._mutex:
            return self._records.pop(team_id, None) is not None
