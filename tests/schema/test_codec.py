"""Tests for the serialized record envelope and entity round-trips."""

import json

import pytest

from scoutnotes.codec import decode, decode_envelope, encode, load_latest
from scoutnotes.errors import InvalidSourceError
from scoutnotes.schema import (
    LATEST_VERSION,
    Location,
    Locked,
    Robot,
    RobotAuton,
    SocialAccount,
    Statistics,
    Team,
    TeamData,
    TeamMember,
    TeamNotes,
    Unlocked,
)

ITERATIONS = 25


class TestLockSerialization:
    """Lock values serialize as tagged objects."""

    def test_unlocked(self):
        assert json.loads(TeamNotes().model_dump_json())["lock"] == {"t": "Unlocked"}

    def test_locked(self):
        notes = TeamNotes(lock=Locked(u="abc"))

        assert json.loads(notes.model_dump_json())["lock"] == {"t": "Locked", "u": "abc"}

    def test_parse_locked(self):
        notes = TeamNotes.model_validate({"lock": {"t": "Locked", "u": "abc"}})

        assert notes.lock == Locked(u="abc")

    def test_parse_unknown_tag(self):
        """Only the two known lock states parse."""
        with pytest.raises(ValueError):
            TeamNotes.model_validate({"lock": {"t": "Held", "u": "abc"}})

    def test_locked_requires_token(self):
        with pytest.raises(ValueError):
            TeamNotes.model_validate({"lock": {"t": "Locked"}})


class TestEnvelope:
    """Tests for encode/decode of whole records."""

    def test_encode_tags_version(self):
        """Encoded records carry their version next to the payload."""
        raw = encode(Team(data=TeamData(id=1, number="1")))

        envelope = json.loads(raw)
        assert envelope["version"] == LATEST_VERSION
        assert envelope["payload"]["data"]["id"] == 1

    def test_encoding_is_deterministic(self):
        """Equal records encode to identical bytes."""
        first = Team(data=TeamData(id=1, number="1", name="A"))
        second = Team.model_validate(first.model_dump(mode="json"))

        assert encode(first) == encode(second)

    def test_decode_envelope_keeps_raw(self):
        """The exact stored bytes are kept for compare-and-swap."""
        raw = encode(Team(data=TeamData(id=1, number="1")))

        stored = decode_envelope(raw)

        assert stored.raw == raw
        assert stored.version == LATEST_VERSION

    def test_decode_accepts_text(self):
        raw = encode(Team(data=TeamData(id=1, number="1")))

        assert decode(raw.decode("utf-8")) == decode(raw)

    def test_untagged_record_is_oldest_version(self):
        """A record with no version tag is read as version 1."""
        raw = json.dumps({"team": {"id": 3, "number": "3", "organization": "Acme"}})

        stored = decode_envelope(raw)

        assert stored.version == 1
        assert load_latest(raw).data.organization == "Acme"

    def test_load_latest_upgrades(self):
        """Older records decode straight to the current shape."""
        raw = json.dumps(
            {
                "version": 2,
                "payload": {
                    "data": {"id": 9, "number": "9", "organization": "Acme"},
                    "notes": {"robots": [{"images": "foo.png"}]},
                },
            }
        )

        team = load_latest(raw)

        assert isinstance(team, Team)
        assert team.notes.robots[0].images == ["foo.png"]
        assert team.data.location == Location()

    @pytest.mark.parametrize(
        "raw",
        [
            b"not json",
            b"[1, 2]",
            b'{"version": "2", "payload": {}}',
            b'{"version": true, "payload": {}}',
            b'{"version": 2}',
            b'{"version": 2, "payload": []}',
            b"\xff\xfe",
        ],
    )
    def test_malformed_envelopes(self, raw):
        """Malformed envelopes are invalid sources."""
        with pytest.raises(InvalidSourceError):
            decode_envelope(raw)

    def test_payload_not_matching_version(self):
        """A payload that does not fit its tag fails on parse, not on envelope read."""
        raw = b'{"version": 2, "payload": {"data": {"id": 1}}}'

        stored = decode_envelope(raw)

        with pytest.raises(InvalidSourceError):
            stored.parse()


class TestRoundTrip:
    """deserialize(serialize(x)) == x for generated entities and records."""

    @pytest.mark.parametrize("version", range(1, LATEST_VERSION + 1))
    def test_records(self, generator, version):
        for _ in range(ITERATIONS):
            record = generator.record(version)

            assert decode(encode(record)) == record

    @pytest.mark.parametrize(
        ("model", "make"),
        [
            (Robot, "robot"),
            (RobotAuton, "robot_auton"),
            (TeamMember, "team_member"),
            (Location, "location"),
            (SocialAccount, "social_account"),
            (TeamNotes, "team_notes"),
            (TeamData, "team_data"),
            (Statistics, "statistics"),
        ],
    )
    def test_entities(self, generator, model, make):
        for _ in range(ITERATIONS):
            entity = getattr(generator, make)()

            assert model.model_validate_json(entity.model_dump_json()) == entity

    def test_default_team(self):
        """A freshly created team round-trips with empty, unlocked notes."""
        team = Team(data=TeamData(id=1, number="1"))

        decoded = decode(encode(team))

        assert decoded == team
        assert decoded.notes.lock == Unlocked()
        assert decoded.notes.robots == []
