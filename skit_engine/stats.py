"""Adjustment tags: ``[Elena: trust +1, charm -1]``, ``[STATION: Systems +2]``
and ``[FACTION: Stellar Concord +1]``.

Tag payloads are split on ``|`` and then ``,`` into phrases of the form
``<stat words><+|-><integer>``; whitespace around the sign is tolerated.
Phrases that do not fit are skipped, never fatal. Deltas accumulate across
every tag of one generation cycle.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from skit_engine.models import Participant, Stat, StationStat
from skit_engine.names import find_best_name_match, find_best_string_match

logger = logging.getLogger(__name__)

_ADJUSTMENT_RE = re.compile(r"([A-Za-z][A-Za-z\s]*?)\s*([+-])\s*(\d+)")
_FACTION_PHRASE_RE = re.compile(r"^(.+?)\s*([+-])\s*(\d+)$")


def split_stat_tag(body: str) -> tuple[str, str] | None:
    """Split a tag body at the first ``:`` or ``-`` into (name, payload)."""
    positions = [i for i in (body.find(":"), body.find("-")) if i != -1]
    if not positions:
        return None
    idx = min(positions)
    return body[:idx].strip(), body[idx + 1:].strip()


def parse_adjustments(payload: str) -> list[tuple[str, int]]:
    """Turn "Trust + 2, charm-1 | joy +1" into [("trust", 2), ("charm", -1), ("joy", 1)]."""
    adjustments: list[tuple[str, int]] = []
    for group in payload.split("|"):
        for phrase in group.split(","):
            phrase = phrase.strip()
            if not phrase:
                continue
            m = _ADJUSTMENT_RE.search(phrase)
            if not m:
                logger.debug("Skipping unparseable stat phrase %r", phrase)
                continue
            name = " ".join(m.group(1).split()).lower()
            value = int(m.group(3))
            adjustments.append((name, -value if m.group(2) == "-" else value))
    return adjustments


def _loose_match(name: str, options: Iterable[str]) -> str | None:
    for option in options:
        lowered = option.lower()
        if lowered == name or lowered in name or name in lowered:
            return option
    return None


def resolve_stat_name(name: str) -> str:
    """Normalise a stat phrase onto a Stat value where one loosely matches.

    Unrecognised names are returned lower-cased rather than dropped; the host
    decides whether to apply them.
    """
    key = name.strip().lower()
    for stat in Stat:
        if stat.value == key:
            return stat.value
    return _loose_match(key, (s.value for s in Stat)) or key


def resolve_station_stat(name: str) -> StationStat | None:
    key = name.strip().lower()
    for stat in StationStat:
        if stat.value.lower() == key:
            return stat
    matched = _loose_match(key, (s.value for s in StationStat))
    return StationStat(matched) if matched else None


def apply_stat_tag(
    body: str,
    participants: Iterable[Participant],
    changes: dict[str, dict[str, int]],
) -> Participant | None:
    """Accumulate a participant stat tag into ``changes``.

    Returns the participant the tag resolved to, or None if the tag had no
    delimiter or named nobody present.
    """
    split = split_stat_tag(body)
    if split is None:
        return None
    candidate, payload = split

    matched = find_best_name_match(candidate, participants)
    if matched is None:
        logger.debug("Stat tag names nobody present: %r", candidate)
        return None

    for stat_name, delta in parse_adjustments(payload):
        stat_key = resolve_stat_name(stat_name)
        per_stat = changes.setdefault(matched.id, {})
        per_stat[stat_key] = per_stat.get(stat_key, 0) + delta
        logger.debug("Stat change %s %s %+d", matched.name, stat_key, delta)
    return matched


def apply_station_tag(payload: str, changes: dict[StationStat, int]) -> None:
    """Accumulate ``[STATION: ...]`` adjustments; unknown station stats are skipped."""
    for stat_name, delta in parse_adjustments(payload):
        stat = resolve_station_stat(stat_name)
        if stat is None:
            logger.debug("Unknown station stat %r", stat_name)
            continue
        changes[stat] = changes.get(stat, 0) + delta


def apply_faction_tag(
    payload: str,
    changes: dict[str, int],
    factions: Iterable[str] = (),
) -> None:
    """Accumulate ``[FACTION: ...]`` reputation deltas into ``changes``.

    Faction names may contain hyphens, so each phrase is read as a name
    followed by a trailing signed integer. With known ``factions`` the name
    resolves onto one of them and unmatched names are skipped; without, the
    name is kept as written. Zero deltas are ignored.
    """
    known = list(factions)
    for group in payload.split("|"):
        for phrase in group.split(","):
            phrase = phrase.strip()
            if not phrase:
                continue
            m = _FACTION_PHRASE_RE.match(phrase)
            if not m:
                logger.debug("Skipping unparseable faction phrase %r", phrase)
                continue
            name = " ".join(m.group(1).split())
            if known:
                matched = find_best_string_match(name, known)
                if matched is None:
                    logger.debug("Faction tag names no known faction: %r", name)
                    continue
                name = matched
            delta = int(m.group(3)) * (-1 if m.group(2) == "-" else 1)
            if delta == 0:
                continue
            changes[name] = changes.get(name, 0) + delta
            logger.debug("Faction change %s %+d", name, delta)
