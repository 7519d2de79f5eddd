"""Scene script parsing and faction request tags for generated narrative text."""

from skit_engine.models import (
    ActorWithStats,
    Participant,
    Request,
    ScriptEntry,
    ScriptResult,
    SpecificActor,
    Stat,
    StationStat,
    StationStats,
    StationStatsReward,
    WorldState,
)
from skit_engine.requests import can_fulfill, format_request_tag, parse_request_tag
from skit_engine.script import entries_to_text, parse_script

__all__ = [
    "ActorWithStats",
    "Participant",
    "Request",
    "ScriptEntry",
    "ScriptResult",
    "SpecificActor",
    "Stat",
    "StationStat",
    "StationStats",
    "StationStatsReward",
    "WorldState",
    "can_fulfill",
    "entries_to_text",
    "format_request_tag",
    "parse_request_tag",
    "parse_script",
]
