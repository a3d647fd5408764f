"""Schema version 2: notes, people and robots nested under the team.

The flat rows of version 1 became owned children of ``Team.notes``, and the
lock moved from the team row onto the notes it protects.
"""

from pydantic import Field

from scoutnotes.schema.common import Lock, RobotStatus, SchemaModel, Unlocked
from scoutnotes.schema.v1 import SocialAccount


class TeamMember(SchemaModel):
    """A person on the team. Identified only by position; duplicates are allowed."""

    name: str
    role: str = ""


class Robot(SchemaModel):
    """A robot, images still one free-text blob."""

    images: str = ""
    status: RobotStatus = RobotStatus.ACTIVE
    features: str = ""


class TeamData(SchemaModel):
    """Team identity and profile."""

    id: int
    number: str
    organization: str
    socials: list[SocialAccount] = []


class TeamNotes(SchemaModel):
    """The collaboratively edited part of the record."""

    robots: list[Robot] = []
    members: list[TeamMember] = []
    driving: str = ""
    strategy: str = ""
    notes: str = ""
    lock: Lock = Field(default_factory=Unlocked)


class Team(SchemaModel):
    """Version 2 record."""

    data: TeamData
    notes: TeamNotes = Field(default_factory=TeamNotes)
