"""Schema version 5: team location and social profile pictures."""

from pydantic import Field, field_validator

from scoutnotes.schema.common import SchemaModel, SocialPlatform
from scoutnotes.schema.v3 import TeamNotes

# Applied to latitude and longitude alike, matching the data already stored.
# Latitude is not narrowed to [-90, 90] until product confirms the intent.
COORDINATE_MIN = -180.0
COORDINATE_MAX = 180.0


class Location(SchemaModel):
    """Where a team is based."""

    city: str = ""
    region: str | None = None
    postcode: str | None = None
    country: str = ""
    coordinates: tuple[float, float] = (0.0, 0.0)  # (latitude, longitude)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: tuple[float, float]) -> tuple[float, float]:
        """Both components must fall in [-180, 180]."""
        for value in v:
            if not COORDINATE_MIN <= value <= COORDINATE_MAX:
                raise ValueError(
                    f"Coordinate {value} outside [{COORDINATE_MIN}, {COORDINATE_MAX}]"
                )
        return v


class SocialAccount(SchemaModel):
    """A team's account on a social platform."""

    platform: SocialPlatform
    url: str
    name: str
    profile_pic_url: str | None = None


class TeamData(SchemaModel):
    """Team identity and profile. Changed only through the administrative path."""

    id: int
    number: str
    name: str = ""
    organization: str | None = None
    location: Location = Field(default_factory=Location)
    socials: list[SocialAccount] = []


class Team(SchemaModel):
    """Version 5 record."""

    data: TeamData
    notes: TeamNotes = Field(default_factory=TeamNotes)
