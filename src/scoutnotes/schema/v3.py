"""Schema version 3: robot images become a list, robots gain autonomous routines."""

from pydantic import Field

from scoutnotes.schema.common import Lock, RobotStatus, SchemaModel, Unlocked
from scoutnotes.schema.v2 import TeamData, TeamMember


class RobotAuton(SchemaModel):
    """An autonomous routine the robot can run and what it scores."""

    points: int = 0
    description: str = ""


class Robot(SchemaModel):
    """A robot. ``images`` holds opaque image names in display order."""

    images: list[str] = []
    status: RobotStatus = RobotStatus.ACTIVE
    features: str = ""
    autons: list[RobotAuton] = []


class TeamNotes(SchemaModel):
    robots: list[Robot] = []
    members: list[TeamMember] = []
    driving: str = ""
    strategy: str = ""
    notes: str = ""
    lock: Lock = Field(default_factory=Unlocked)


class Team(SchemaModel):
    """Version 3 record."""

    data: TeamData
    notes: TeamNotes = Field(default_factory=TeamNotes)
