"""Schema version 1: free-floating rows tagged with a team id.

Notes, people and robots were stored as flat rows, each carrying the id of the
team it belongs to. A version 1 record is the team row together with every
row tagged with that team's id.
"""

from collections import defaultdict
from collections.abc import Iterable

from pydantic import Field, model_validator

from scoutnotes.schema.common import Lock, RobotStatus, SchemaModel, SocialPlatform, Unlocked


class SocialAccount(SchemaModel):
    """A team's account on a social platform."""

    platform: SocialPlatform
    url: str
    name: str


class TeamRow(SchemaModel):
    """Team identity row. The notes lock lived here until version 2."""

    id: int
    number: str
    organization: str
    socials: list[SocialAccount] = []
    lock: Lock = Field(default_factory=Unlocked)


class Note(SchemaModel):
    """A named block of free text."""

    team: int
    name: str
    content: str = ""


class Person(SchemaModel):
    """Someone on the team and what they do."""

    team: int
    name: str
    role: str = ""


class Robot(SchemaModel):
    """A robot, with its images as one free-text blob."""

    team: int
    images: str = ""
    status: RobotStatus = RobotStatus.ACTIVE
    features: str = ""


class TeamRecord(SchemaModel):
    """Everything stored for one team under version 1."""

    team: TeamRow
    notes: list[Note] = []
    people: list[Person] = []
    robots: list[Robot] = []

    @model_validator(mode="after")
    def rows_belong_to_team(self) -> "TeamRecord":
        """Every tagged row must name this record's team."""
        for kind, rows in (("note", self.notes), ("person", self.people), ("robot", self.robots)):
            for row in rows:
                if row.team != self.team.id:
                    raise ValueError(
                        f"{kind} tagged with team {row.team} stored under team {self.team.id}"
                    )
        return self


def group_by_team(
    teams: Iterable[TeamRow],
    notes: Iterable[Note] = (),
    people: Iterable[Person] = (),
    robots: Iterable[Robot] = (),
) -> list[TeamRecord]:
    """Group flat version 1 rows into one record per team.

    Row order within each team is preserved. Rows tagged with a team id that
    has no team row are rejected rather than dropped.

    Returns:
        One TeamRecord per team row, in the order the team rows were given

    Raises:
        ValueError: if a row names an unknown team or a team id repeats
    """
    team_rows: dict[int, TeamRow] = {}
    for team in teams:
        if team.id in team_rows:
            raise ValueError(f"Duplicate team row for team {team.id}")
        team_rows[team.id] = team

    grouped: dict[str, defaultdict[int, list]] = {
        "notes": defaultdict(list),
        "people": defaultdict(list),
        "robots": defaultdict(list),
    }
    for field, rows in (("notes", notes), ("people", people), ("robots", robots)):
        for row in rows:
            if row.team not in team_rows:
                raise ValueError(f"{field} row tagged with unknown team {row.team}")
            grouped[field][row.team].append(row)

    return [
        TeamRecord(
            team=team,
            notes=grouped["notes"][team_id],
            people=grouped["people"][team_id],
            robots=grouped["robots"][team_id],
        )
        for team_id, team in team_rows.items()
    ]
