"""Core domain models.

Every parser and evaluator in the engine produces or consumes these types.
Pydantic is used for validation and serialisation at every data boundary;
requirements are a union discriminated on their ``kind`` field so persisted
requests rehydrate without any class registry.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from skit_engine.emotions import Emotion


class Stat(str, Enum):
    """Participant-level attributes, scored 1-10."""

    BRAWN = "brawn"  # physical condition and strength
    SKILL = "skill"  # capability and finesse
    NERVE = "nerve"  # courage and confidence
    WITS = "wits"  # intelligence and awareness
    CHARM = "charm"  # charisma and tact
    LUST = "lust"  # sexuality and physical desire
    JOY = "joy"  # happiness and positivity
    TRUST = "trust"  # faith in the director


class StationStat(str, Enum):
    """World/station-level resources, scored 1-10."""

    SYSTEMS = "Systems"
    COMFORT = "Comfort"
    PROVISION = "Provision"
    SECURITY = "Security"
    HARMONY = "Harmony"
    WEALTH = "Wealth"


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------

class ScriptEntry(BaseModel):
    """One speaker/message pair, in playback order.

    ``arrivals`` and ``departures`` hold participant ids for movement cues
    found on the entry's lines.
    """

    model_config = ConfigDict(frozen=True)

    speaker: str
    message: str
    emotions: dict[str, Emotion] = Field(default_factory=dict)  # participant name -> emotion
    arrivals: list[str] = Field(default_factory=list)
    departures: list[str] = Field(default_factory=list)


class ScriptResult(BaseModel):
    """Output of one generation-and-parse cycle.

    ``stat_changes`` maps participant id -> stat name -> accumulated delta;
    ``faction_changes`` maps faction name -> accumulated reputation delta.

    ``exhausted`` is only set on the sentinel returned by ``empty()`` once
    generation attempts run out. A generation that parsed to nothing (only
    decorative tags, say) is ``is_empty`` but not ``exhausted``.
    """

    entries: list[ScriptEntry] = Field(default_factory=list)
    end_scene: bool = False
    stat_changes: dict[str, dict[str, int]] = Field(default_factory=dict)
    station_changes: dict[StationStat, int] = Field(default_factory=dict)
    faction_changes: dict[str, int] = Field(default_factory=dict)
    requests: list[Request] = Field(default_factory=list)
    summary: str | None = None
    exhausted: bool = False

    @classmethod
    def empty(cls) -> ScriptResult:
        return cls(exhausted=True)

    @property
    def is_empty(self) -> bool:
        """True when the result carries no content, whether or not it is ``exhausted``."""
        return (
            not self.entries
            and not self.end_scene
            and not self.stat_changes
            and not self.station_changes
            and not self.faction_changes
            and not self.requests
            and self.summary is None
        )


# ---------------------------------------------------------------------------
# World state (read-only snapshot supplied by the host)
# ---------------------------------------------------------------------------

class Participant(BaseModel):
    """A character that may appear in a scene."""

    id: str
    name: str
    stats: dict[Stat, int] = Field(default_factory=dict)
    remote: bool = False  # not physically aboard; excluded from scenes and fulfilment
    location_id: str = ""


StationLevel = Annotated[int, Field(ge=1)]


class WorldState(BaseModel):
    """Point-in-time snapshot of the roster and station resources."""

    participants: dict[str, Participant] = Field(default_factory=dict)
    station_stats: dict[StationStat, StationLevel] | None = None
    factions: list[str] = Field(default_factory=list)  # known faction names

    def present_at(self, location_id: str) -> list[Participant]:
        """Non-remote participants at ``location_id``, in roster order."""
        return [
            p for p in self.participants.values()
            if p.location_id == location_id and not p.remote
        ]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ActorWithStats(BaseModel):
    """Any on-station participant whose stats fall within the given bounds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["actor-with-stats"] = "actor-with-stats"
    min_stats: dict[Stat, int] = Field(default_factory=dict)
    max_stats: dict[Stat, int] = Field(default_factory=dict)


class SpecificActor(BaseModel):
    """One named participant."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["specific-actor"] = "specific-actor"
    actor_name: str


class StationStats(BaseModel):
    """Station resources to be deducted."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["station-stats"] = "station-stats"
    deltas: dict[StationStat, int]


class StationStatsReward(BaseModel):
    """Station resources granted on fulfilment."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["station-stats"] = "station-stats"
    deltas: dict[StationStat, int]


Requirement = Annotated[
    Union[ActorWithStats, SpecificActor, StationStats],
    Field(discriminator="kind"),
]

# Single case for now; becomes a discriminated union once a second reward kind exists.
Reward = StationStatsReward


def _new_request_id() -> str:
    return str(uuid.uuid4())


class Request(BaseModel):
    """A faction's conditional offer: satisfy ``requirement``, receive ``reward``."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_request_id)
    faction_name: str
    description: str
    requirement: Requirement
    reward: Reward


ScriptResult.model_rebuild()
