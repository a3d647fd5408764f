"""Upgrade stored records to newer schema versions.

Each step turns a record of version ``k`` into version ``k + 1`` and is
registered under ``k``. ``migrate`` always walks every intermediate step, so a
record written by any past release reaches the current shape through the same
steps every other record took. Steps only reshape data: new fields get their
zero value, nothing is looked up or invented.
"""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from scoutnotes.errors import InvalidSourceError, UnknownVersionError, UnsupportedDirectionError
from scoutnotes.logging import get_logger
from scoutnotes.schema import LATEST_VERSION, SCHEMAS, SchemaModel, v1, v2, v3, v4, v5

logger = get_logger(__name__)

MigrationStep = Callable[[Any], SchemaModel]

STEPS: dict[int, MigrationStep] = {}

# Separates notes folded into one free-text field
PARAGRAPH_BREAK = "\n\n"


def step(from_version: int) -> Callable[[MigrationStep], MigrationStep]:
    """Register a migration step from ``from_version`` to the next version."""

    def register(fn: MigrationStep) -> MigrationStep:
        if from_version in STEPS:
            raise RuntimeError(f"Duplicate migration step from version {from_version}")
        STEPS[from_version] = fn
        return fn

    return register


# =============================================================================
# STEPS
# =============================================================================


@step(1)
def nest_rows_under_team(record: v1.TeamRecord) -> v2.Team:
    """Fold a team's flat rows into its notes.

    Notes named "driving" or "strategy" fill those fields. Every other note is
    kept in ``notes`` under its name so nothing is lost.
    """
    driving: list[str] = []
    strategy: list[str] = []
    other: list[str] = []
    for note in record.notes:
        kind = note.name.strip().lower()
        if kind == "driving":
            driving.append(note.content)
        elif kind == "strategy":
            strategy.append(note.content)
        else:
            other.append(f"{note.name}\n{note.content}")

    return v2.Team(
        data=v2.TeamData(
            id=record.team.id,
            number=record.team.number,
            organization=record.team.organization,
            socials=record.team.socials,
        ),
        notes=v2.TeamNotes(
            robots=[
                v2.Robot(images=robot.images, status=robot.status, features=robot.features)
                for robot in record.robots
            ],
            members=[v2.TeamMember(name=person.name, role=person.role) for person in record.people],
            driving=PARAGRAPH_BREAK.join(driving),
            strategy=PARAGRAPH_BREAK.join(strategy),
            notes=PARAGRAPH_BREAK.join(other),
            lock=record.team.lock,
        ),
    )


@step(2)
def split_robot_images(record: v2.Team) -> v3.Team:
    """Turn each robot's image blob into a list and start it with no autons."""
    notes = record.notes
    return v3.Team(
        data=record.data,
        notes=v3.TeamNotes(
            robots=[
                v3.Robot(
                    images=[robot.images] if robot.images else [],
                    status=robot.status,
                    features=robot.features,
                    autons=[],
                )
                for robot in notes.robots
            ],
            members=notes.members,
            driving=notes.driving,
            strategy=notes.strategy,
            notes=notes.notes,
            lock=notes.lock,
        ),
    )


@step(3)
def add_team_name(record: v3.Team) -> v4.Team:
    """Organization becomes optional (value kept as is); name starts empty."""
    data = record.data
    return v4.Team(
        data=v4.TeamData(
            id=data.id,
            number=data.number,
            name="",
            organization=data.organization,
            socials=data.socials,
        ),
        notes=record.notes,
    )


@step(4)
def add_location(record: v4.Team) -> v5.Team:
    """Teams get an empty location; social accounts get no profile picture."""
    data = record.data
    return v5.Team(
        data=v5.TeamData(
            id=data.id,
            number=data.number,
            name=data.name,
            organization=data.organization,
            location=v5.Location(),
            socials=[
                v5.SocialAccount(
                    platform=social.platform,
                    url=social.url,
                    name=social.name,
                    profile_pic_url=None,
                )
                for social in data.socials
            ],
        ),
        notes=record.notes,
    )


# =============================================================================
# ENGINE
# =============================================================================


def parse_record(record: Mapping[str, Any] | SchemaModel, version: int) -> SchemaModel:
    """Validate a record against the shape of ``version``.

    Args:
        record: A payload mapping, or an already parsed record model
        version: The schema version the record claims

    Returns:
        The record as a model of that version

    Raises:
        InvalidSourceError: if the version is unknown or the record does not fit it
    """
    model = SCHEMAS.get(version)
    if model is None:
        raise InvalidSourceError(version, "unknown schema version")

    if isinstance(record, SchemaModel):
        if type(record) is not model:
            raise InvalidSourceError(
                version, f"{type(record).__name__} is not a version {version} record"
            )
        return record

    try:
        return model.model_validate(record)
    except ValidationError as e:
        raise InvalidSourceError(version, str(e)) from e


def migrate(
    record: Mapping[str, Any] | SchemaModel,
    from_version: int,
    to_version: int = LATEST_VERSION,
) -> SchemaModel:
    """Upgrade a record from ``from_version`` to ``to_version``.

    Every step between the two versions is applied in order. Migrating to the
    version a record already has returns it unchanged. Otherwise the result
    shares no mutable state with the input.

    Raises:
        UnknownVersionError: if ``to_version`` is not a known version
        UnsupportedDirectionError: if ``to_version`` is older than ``from_version``
        InvalidSourceError: if the record does not parse against ``from_version``
    """
    if to_version not in SCHEMAS:
        raise UnknownVersionError(to_version)
    if from_version in SCHEMAS and to_version < from_version:
        raise UnsupportedDirectionError(from_version, to_version)

    current = parse_record(record, from_version)
    if current is record and from_version < to_version:
        # Steps carry sub-models across; detach them from the caller's record
        current = current.model_copy(deep=True)
    for version in range(from_version, to_version):
        current = STEPS[version](current)
        logger.debug("record_step_applied", from_version=version, to_version=version + 1)
    return current


def _check_steps() -> None:
    missing = [v for v in range(min(SCHEMAS), LATEST_VERSION) if v not in STEPS]
    if missing or LATEST_VERSION not in SCHEMAS:
        raise RuntimeError(f"Schema registry incomplete; missing steps from versions {missing}")


_check_steps()
