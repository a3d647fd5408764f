"""Serialized record envelope.

Records are stored as compact JSON:

    {"payload": {...}, "version": 5}

Keys are sorted so the same record always encodes to the same bytes, which is
what the storage compare-and-swap compares. A record without a version tag is
read as the oldest schema version.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict

from scoutnotes.errors import InvalidSourceError
from scoutnotes.migrations import migrate, parse_record
from scoutnotes.schema import LATEST_VERSION, OLDEST_VERSION, SchemaModel, Team, version_of


class VersionedRecord(BaseModel):
    """A stored record, decoded only as far as its envelope.

    ``raw`` keeps the exact stored bytes for use as the expected prior value of
    a compare-and-swap.
    """

    model_config = ConfigDict(frozen=True)

    version: int
    payload: dict[str, Any]
    raw: bytes

    def parse(self) -> SchemaModel:
        """Validate the payload against its own version."""
        return parse_record(self.payload, self.version)

    def upgrade(self, to_version: int = LATEST_VERSION) -> SchemaModel:
        """Validate and migrate the payload to ``to_version``."""
        return migrate(self.payload, self.version, to_version)


def encode(record: SchemaModel) -> bytes:
    """Serialize a record model together with its version tag."""
    envelope = {
        "version": version_of(record),
        "payload": record.model_dump(mode="json"),
    }
    return json.dumps(envelope, sort_keys=True, separators=(",", ":")).encode("utf-8")


def detect_version(data: dict[str, Any]) -> tuple[int, dict[str, Any]]:
    """Split a decoded envelope into (version, payload).

    Raises:
        InvalidSourceError: if the tag or payload has the wrong type
    """
    if "version" not in data:
        payload = data.get("payload", data)
        if not isinstance(payload, dict):
            raise InvalidSourceError(OLDEST_VERSION, "payload is not an object")
        return OLDEST_VERSION, payload

    version = data["version"]
    if isinstance(version, bool) or not isinstance(version, int):
        raise InvalidSourceError(OLDEST_VERSION, f"version tag {version!r} is not an integer")
    payload = data.get("payload")
    if not isinstance(payload, dict):
        raise InvalidSourceError(version, "payload is missing or not an object")
    return version, payload


def decode_envelope(raw: bytes | str) -> VersionedRecord:
    """Read the envelope of a stored record without validating the payload.

    Raises:
        InvalidSourceError: if the bytes are not a JSON object
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidSourceError(OLDEST_VERSION, f"not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidSourceError(OLDEST_VERSION, "record is not a JSON object")

    version, payload = detect_version(data)
    return VersionedRecord(version=version, payload=payload, raw=raw)


def decode(raw: bytes | str) -> SchemaModel:
    """Deserialize a record at the version it was stored with."""
    return decode_envelope(raw).parse()


def load_latest(raw: bytes | str) -> Team:
    """Deserialize a record and migrate it to the current schema."""
    return decode_envelope(raw).upgrade(LATEST_VERSION)
