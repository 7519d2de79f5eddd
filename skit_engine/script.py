"""Scene script parsing: raw generated prose into ordered speaker/message entries.

Generator output format (parsed by parse_script):
  ELENA: She sets down the wrench. "It's fixed."
  She wipes her hands.                  <- continuation, no ":" on the line
  NARRATOR: [ELENA EXPRESSES PRIDE] The lights flicker back on.
  NARRATOR: [Guard arrives] The hatch hisses open.
  [Elena: trust +1]
  [FACTION: Stellar Concord +1]
  [END SCENE]

Scene-end detection and stat, station and faction extraction read every tag
in the unmodified text; the tags are then stripped and the remaining lines
merged into entries. A line containing ":" starts a new entry; any other line
is appended to the entry being built. Each entry splits at its first ":" into
speaker and message; a leading block with no ":" belongs to the NARRATOR.
Emotion and movement cues stay with the entry their line lands in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from skit_engine.emotions import Emotion, resolve_emotion
from skit_engine.models import Participant, Request, ScriptEntry, ScriptResult, StationStat
from skit_engine.names import find_best_name_match
from skit_engine.requests import parse_request_tag
from skit_engine.stats import apply_faction_tag, apply_stat_tag, apply_station_tag
from skit_engine.tags import (
    TagKind,
    classify_tag,
    is_end_marker,
    parse_emotion_tag,
    parse_faction_payload,
    parse_movement_tag,
    parse_station_payload,
    parse_summary,
    scan_tags,
    strip_tags,
)

logger = logging.getLogger(__name__)

NARRATOR = "NARRATOR"


@dataclass
class _Cues:
    """Per-line tag data that travels with the entry its line merges into."""

    emotions: dict[str, Emotion] = field(default_factory=dict)
    arrivals: list[str] = field(default_factory=list)
    departures: list[str] = field(default_factory=list)

    def update(self, other: _Cues) -> None:
        self.emotions.update(other.emotions)
        self.arrivals.extend(other.arrivals)
        self.departures.extend(other.departures)


_Block = tuple[str, _Cues]


def _merge(lines: Iterable[_Block]) -> list[_Block]:
    """Merge continuation lines into the entry before them.

    Cues found on a line that is empty once stripped carry over to the entry
    in progress, or to the next one if none has started.
    """
    blocks: list[_Block] = []
    current: list[str] = []
    current_cues = _Cues()
    pending = _Cues()

    for line, cues in lines:
        stripped = line.strip()
        if not stripped:
            (current_cues if current else pending).update(cues)
            continue

        if ":" in stripped:
            if current:
                blocks.append(("\n".join(current), current_cues))
            current = [stripped]
            current_cues, pending = pending, _Cues()
        elif not current:
            current_cues, pending = pending, _Cues()
            current.append(stripped)
        else:
            current.append(stripped)
        current_cues.update(cues)

    if current:
        blocks.append(("\n".join(current), current_cues))
    return blocks


def merge_lines(text: str) -> list[str]:
    """Group tag-stripped text into one block per entry."""
    return [block for block, _ in _merge((line, _Cues()) for line in text.splitlines())]


def split_block(block: str) -> tuple[str, str]:
    """Split a merged block at its first ":" into (speaker, message)."""
    idx = block.find(":")
    if idx == -1:
        return NARRATOR, block.strip()
    speaker = block[:idx].strip() or NARRATOR
    return speaker, block[idx + 1:].strip()


def _line_cues(
    line: str,
    present: list[Participant],
    movers: list[Participant],
    in_scene: set[str],
) -> _Cues:
    """Collect emotion and movement cues from one line.

    ``in_scene`` holds the ids of participants in the scene so far and is
    updated as arrivals and departures are accepted. An arrival is only
    accepted for someone absent and a departure only for someone in the scene.
    """
    cues = _Cues()
    for tag in scan_tags(line):
        kind = classify_tag(tag.body)
        if kind is TagKind.EMOTION:
            parsed = parse_emotion_tag(tag.body)
            if parsed is None:
                continue
            name, word = parsed
            matched = find_best_name_match(name, present)
            emotion = resolve_emotion(word)
            if matched is None or emotion is None:
                logger.debug("Ignoring emotion tag %r", tag.body)
                continue
            cues.emotions[matched.name] = emotion
        elif kind in (TagKind.ARRIVAL, TagKind.DEPARTURE):
            mover = find_best_name_match(parse_movement_tag(tag.body) or "", movers)
            if mover is None:
                logger.debug("Movement tag names nobody: %r", tag.body)
            elif kind is TagKind.ARRIVAL and mover.id not in in_scene:
                in_scene.add(mover.id)
                cues.arrivals.append(mover.id)
            elif kind is TagKind.DEPARTURE and mover.id in in_scene:
                in_scene.discard(mover.id)
                cues.departures.append(mover.id)
            else:
                logger.warning("Ignoring %s of %s: not possible here", kind.value, mover.name)
    return cues


def build_entries(
    text: str,
    present: Iterable[Participant] = (),
    roster: Iterable[Participant] = (),
) -> list[ScriptEntry]:
    """Strip tags from ``text`` and turn what remains into script entries.

    Speakers that resolve to a present participant take that participant's
    canonical name. Movement cues resolve against ``roster`` (falling back to
    ``present``); remote participants never move. Entries left with an empty
    message are dropped.
    """
    present = list(present)
    movers = [p for p in (list(roster) or present) if not p.remote]
    in_scene = {p.id for p in present}
    lines = [
        (strip_tags(line), _line_cues(line, present, movers, in_scene))
        for line in text.splitlines()
    ]

    entries: list[ScriptEntry] = []
    for block, cues in _merge(lines):
        speaker, message = split_block(block)
        if not message:
            continue
        if speaker != NARRATOR:
            matched = find_best_name_match(speaker, present)
            if matched is not None:
                speaker = matched.name
        entries.append(ScriptEntry(
            speaker=speaker,
            message=message,
            emotions=cues.emotions,
            arrivals=cues.arrivals,
            departures=cues.departures,
        ))
    return entries


def parse_script(
    text: str,
    present: Iterable[Participant] = (),
    *,
    roster: Iterable[Participant] = (),
    factions: Iterable[str] = (),
) -> ScriptResult:
    """Parse one block of generated scene text.

    ``present`` is the set of participants physically in the scene; stat and
    emotion tags only resolve against them. ``roster`` is everyone who could
    arrive or depart, and ``factions`` the known faction names that
    ``[FACTION: ...]`` tags resolve onto.
    """
    present = list(present)
    factions = list(factions)
    tags = scan_tags(text)

    end_scene = any(is_end_marker(tag.body) for tag in tags)
    stat_changes: dict[str, dict[str, int]] = {}
    station_changes: dict[StationStat, int] = {}
    faction_changes: dict[str, int] = {}
    requests: list[Request] = []
    summary: str | None = None

    for tag in tags:
        kind = classify_tag(tag.body)
        logger.debug("Tag %r classified as %s", tag.body, kind.value)
        if kind is TagKind.REQUEST:
            request = parse_request_tag(f"[{tag.body.strip()}]")
            if request is not None:
                requests.append(request)
        elif kind is TagKind.SUMMARY:
            summary = parse_summary(tag.body) or summary
        elif kind is TagKind.STATION:
            apply_station_tag(parse_station_payload(tag.body) or "", station_changes)
        elif kind is TagKind.FACTION:
            apply_faction_tag(parse_faction_payload(tag.body) or "", faction_changes, factions)
        elif kind is TagKind.STAT:
            apply_stat_tag(tag.body, present, stat_changes)

    return ScriptResult(
        entries=build_entries(text, present, roster),
        end_scene=end_scene,
        stat_changes=stat_changes,
        station_changes=station_changes,
        faction_changes=faction_changes,
        requests=requests,
        summary=summary,
    )


def entries_to_text(entries: Iterable[ScriptEntry], roster: Iterable[Participant] = ()) -> str:
    """Render entries back to script lines for a prompt's scene log.

    Movement cues are written with the roster name for each id, or the id
    itself when the roster does not know it.
    """
    names = {p.id: p.name for p in roster}
    lines: list[str] = []
    for entry in entries:
        cues = "".join(f"[{names.get(pid, pid)} arrives] " for pid in entry.arrivals)
        cues += "".join(f"[{names.get(pid, pid)} departs] " for pid in entry.departures)
        cues += "".join(
            f"[{name} EXPRESSES {emotion.value.upper()}] "
            for name, emotion in entry.emotions.items()
        )
        lines.append(f"{entry.speaker}: {cues}{entry.message}")
    return "\n".join(lines)
