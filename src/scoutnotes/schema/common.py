"""Shapes shared by every schema version.

Anything defined here has never changed since version 1. A shape that changes
gets a new class in the version module that introduces the change.
"""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class SchemaModel(BaseModel):
    """Base for all stored shapes.

    Unknown fields are rejected so a payload only validates against the
    version it was written with.
    """

    model_config = ConfigDict(extra="forbid")


class RobotStatus(StrEnum):
    """Whether a robot is still fielded by the team."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"


class SocialPlatform(StrEnum):
    """Platforms a team can link a social account for."""

    INSTAGRAM = "Instagram"
    YOUTUBE = "Youtube"


# =============================================================================
# LOCK
# =============================================================================


class Unlocked(SchemaModel):
    """Notes are free to be locked by any editor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    t: Literal["Unlocked"] = "Unlocked"

    def __str__(self) -> str:
        return "Unlocked"


class Locked(SchemaModel):
    """Notes are held by whoever presents ``u``, an opaque client-chosen token."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    t: Literal["Locked"] = "Locked"
    u: str

    @property
    def token(self) -> str:
        return self.u

    def __str__(self) -> str:
        return "Locked"


# Serialized as {"t": "Unlocked"} or {"t": "Locked", "u": "<token>"}
Lock = Annotated[Unlocked | Locked, Field(discriminator="t")]


# =============================================================================
# DERIVED
# =============================================================================


class Statistics(SchemaModel):
    """Scoring averages recomputed from match data; never part of a stored record."""

    average_score: float = 0.0
    average_net_score: float = 0.0
