"""Schema version 4: teams gain a display name, organization becomes optional."""

from pydantic import Field

from scoutnotes.schema.common import SchemaModel
from scoutnotes.schema.v1 import SocialAccount
from scoutnotes.schema.v3 import TeamNotes


class TeamData(SchemaModel):
    id: int
    number: str
    name: str = ""
    organization: str | None = None
    socials: list[SocialAccount] = []


class Team(SchemaModel):
    """Version 4 record."""

    data: TeamData
    notes: TeamNotes = Field(default_factory=TeamNotes)
