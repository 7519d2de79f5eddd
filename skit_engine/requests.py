"""Faction request tags: parsing, fulfilment checks and rendering.

Wire format (one line, keywords case-sensitive):

  [REQUEST: <faction> | <description> | <requirement> -> <reward>]

  requirement:  ACTOR-NAME <name>
                ACTOR <stat>>=<n>, <stat><=<n>, ...
                STATION <station stat>-<n>, ...
  reward:       <station stat>+<n>, ...

Parsing is all-or-nothing: any violation logs a warning and yields None.
"""

from __future__ import annotations

import logging
import re

from skit_engine.models import (
    ActorWithStats,
    Request,
    Requirement,
    Reward,
    SpecificActor,
    Stat,
    StationStat,
    StationStats,
    StationStatsReward,
    WorldState,
)
from skit_engine.names import find_best_name_match

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"\[(?i:REQUEST):\s*([^\[\]]+?)\s*\]")
_ACTOR_NAME_RE = re.compile(r"ACTOR-NAME\s+(.+)", re.DOTALL)
_ACTOR_RE = re.compile(r"ACTOR\s+(.+)", re.DOTALL)
_STATION_RE = re.compile(r"STATION\s+(.+)", re.DOTALL)

_BOUND_RE = re.compile(r"(\w+)\s*(>=|<=)\s*(\d+)")
_DEDUCTION_RE = re.compile(r"(\w+)\s*-\s*(\d+)")
_GRANT_RE = re.compile(r"(\w+)\s*\+\s*(\d+)")


class _Invalid(ValueError):
    """Internal signal that a request tag broke the grammar."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _items(body: str) -> list[str]:
    items = [item.strip() for item in body.split(",")]
    if not items or any(not item for item in items):
        raise _Invalid(f"empty list item in {body!r}")
    return items


def _stat(name: str) -> Stat:
    try:
        return Stat(name.lower())
    except ValueError:
        raise _Invalid(f"unknown stat {name!r}") from None


def _station_stat(name: str) -> StationStat:
    key = name.lower()
    for stat in StationStat:
        if stat.value.lower() == key:
            return stat
    raise _Invalid(f"unknown station stat {name!r}")


def _station_deltas(body: str, pattern: re.Pattern[str]) -> dict[StationStat, int]:
    deltas: dict[StationStat, int] = {}
    for item in _items(body):
        m = pattern.fullmatch(item)
        if not m:
            raise _Invalid(f"malformed station delta {item!r}")
        deltas[_station_stat(m.group(1))] = int(m.group(2))
    return deltas


def _parse_requirement(body: str) -> Requirement:
    if m := _ACTOR_NAME_RE.fullmatch(body):
        name = m.group(1).strip()
        if not name:
            raise _Invalid("ACTOR-NAME without a name")
        return SpecificActor(actor_name=name)

    if m := _ACTOR_RE.fullmatch(body):
        min_stats: dict[Stat, int] = {}
        max_stats: dict[Stat, int] = {}
        for item in _items(m.group(1)):
            bound = _BOUND_RE.fullmatch(item)
            if not bound:
                raise _Invalid(f"malformed actor constraint {item!r}")
            stat = _stat(bound.group(1))
            target = min_stats if bound.group(2) == ">=" else max_stats
            target[stat] = int(bound.group(3))
        return ActorWithStats(min_stats=min_stats, max_stats=max_stats)

    if m := _STATION_RE.fullmatch(body):
        return StationStats(deltas=_station_deltas(m.group(1), _DEDUCTION_RE))

    raise _Invalid(f"unrecognised requirement {body!r}")


def _parse_reward(body: str) -> Reward:
    return StationStatsReward(deltas=_station_deltas(body, _GRANT_RE))


def parse_request_tag(tag: str) -> Request | None:
    """Parse a complete ``[REQUEST: ...]`` tag into a Request, or None."""
    m = _TAG_RE.fullmatch(tag.strip())
    if not m:
        logger.warning("Invalid REQUEST tag format: %r", tag)
        return None

    try:
        parts = [part.strip() for part in m.group(1).split("|")]
        if len(parts) != 3:
            raise _Invalid("expected faction | description | requirement -> reward")
        faction_name, description, exchange = parts
        if not faction_name or not description:
            raise _Invalid("faction and description must be non-empty")

        sides = [side.strip() for side in exchange.split("->")]
        if len(sides) != 2:
            raise _Invalid("expected exactly one '->'")

        requirement = _parse_requirement(sides[0])
        reward = _parse_reward(sides[1])
    except _Invalid as e:
        logger.warning("Rejected REQUEST tag %r: %s", tag, e)
        return None

    request = Request(
        faction_name=faction_name,
        description=description,
        requirement=requirement,
        reward=reward,
    )
    logger.debug("Parsed request %s from %s", request.id, faction_name)
    return request


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def can_fulfill(requirement: Requirement, world: WorldState) -> bool:
    """Whether ``world`` currently satisfies ``requirement``.

    Remote participants never count. Station deductions must leave every
    affected stat at 1 or more.
    """
    if isinstance(requirement, ActorWithStats):
        for participant in world.participants.values():
            if participant.remote:
                continue
            stats = participant.stats
            if all(stats.get(s, 0) >= v for s, v in requirement.min_stats.items()) and all(
                stats.get(s, 0) <= v for s, v in requirement.max_stats.items()
            ):
                return True
        return False

    if isinstance(requirement, SpecificActor):
        # only the best match counts, not any present participant with a similar name
        matched = find_best_name_match(requirement.actor_name, world.participants.values())
        return matched is not None and not matched.remote

    if isinstance(requirement, StationStats):
        if world.station_stats is None:
            return False
        return all(
            world.station_stats.get(stat, 0) > amount
            for stat, amount in requirement.deltas.items()
        )

    logger.warning("Unknown requirement kind: %r", getattr(requirement, "kind", requirement))
    return False


def can_fulfill_request(request: Request, world: WorldState) -> bool:
    return can_fulfill(request.requirement, world)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _format_requirement(requirement: Requirement) -> str:
    if isinstance(requirement, SpecificActor):
        return f"ACTOR-NAME {requirement.actor_name}"
    if isinstance(requirement, ActorWithStats):
        bounds = [f"{s.value}>={v}" for s, v in requirement.min_stats.items()]
        bounds += [f"{s.value}<={v}" for s, v in requirement.max_stats.items()]
        return "ACTOR " + ", ".join(bounds)
    return "STATION " + ", ".join(f"{s.value}-{v}" for s, v in requirement.deltas.items())


def format_request_tag(request: Request) -> str:
    """Render a request back into its tag form; parse_request_tag reads it back."""
    reward = ", ".join(f"{s.value}+{v}" for s, v in request.reward.deltas.items())
    return (
        f"[REQUEST: {request.faction_name} | {request.description} | "
        f"{_format_requirement(request.requirement)} -> {reward}]"
    )


def describe_requirement(requirement: Requirement, world: WorldState | None = None) -> str:
    """Short human-readable requirement, e.g. "Participant: brawn >= 7".

    With a ``world``, a named participant is shown under their roster name.
    """
    if isinstance(requirement, ActorWithStats):
        bounds = [f"{s.value} >= {v}" for s, v in requirement.min_stats.items()]
        bounds += [f"{s.value} <= {v}" for s, v in requirement.max_stats.items()]
        return "Participant: " + (", ".join(bounds) or "anyone")
    if isinstance(requirement, SpecificActor):
        name = requirement.actor_name
        if world is not None:
            matched = find_best_name_match(name, world.participants.values())
            if matched is not None:
                name = matched.name
        return f"Participant: {name}"
    return "Station: " + ", ".join(f"{s.value} -{v}" for s, v in requirement.deltas.items())


def describe_reward(reward: Reward) -> str:
    return ", ".join(f"{s.value} +{v}" for s, v in reward.deltas.items())
