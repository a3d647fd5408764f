"""Versioned record schema.

Each stored record is tagged with the version of the shape it was written
with. ``SCHEMAS`` maps a version to its record model; ``LATEST_VERSION`` is
the version new records are written with. Bump it explicitly when adding a
version, together with the migration step that reaches it.
"""

from scoutnotes.schema import v1, v2, v3, v4, v5
from scoutnotes.schema.common import (
    Lock,
    Locked,
    RobotStatus,
    SchemaModel,
    SocialPlatform,
    Statistics,
    Unlocked,
)

LATEST_VERSION = 5
OLDEST_VERSION = 1

SCHEMAS: dict[int, type[SchemaModel]] = {
    1: v1.TeamRecord,
    2: v2.Team,
    3: v3.Team,
    4: v4.Team,
    5: v5.Team,
}

# Current shapes
Team = v5.Team
TeamData = v5.TeamData
TeamNotes = v3.TeamNotes
Robot = v3.Robot
RobotAuton = v3.RobotAuton
TeamMember = v2.TeamMember
Location = v5.Location
SocialAccount = v5.SocialAccount


def version_of(record: SchemaModel) -> int:
    """Return the schema version a record model belongs to.

    Raises:
        TypeError: if the object is not a registered record model
    """
    for version, model in SCHEMAS.items():
        if type(record) is model:
            return version
    raise TypeError(f"{type(record).__name__} is not a versioned record model")


__all__ = [
    "LATEST_VERSION",
    "OLDEST_VERSION",
    "SCHEMAS",
    "version_of",
    # Shared
    "Lock",
    "Locked",
    "RobotStatus",
    "SchemaModel",
    "SocialPlatform",
    "Statistics",
    "Unlocked",
    # Current shapes
    "Location",
    "Robot",
    "RobotAuton",
    "SocialAccount",
    "Team",
    "TeamData",
    "TeamMember",
    "TeamNotes",
    # Versions
    "v1",
    "v2",
    "v3",
    "v4",
    "v5",
]
