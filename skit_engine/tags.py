"""Bracket tag scanning and classification.

Generated scene text carries inline directives in square brackets:

  [END] / [END SCENE ...] / [DONE]   scene-end markers
  [REQUEST: ...]                     faction offer (see requests.py)
  [STATION: Systems +1]              station stat adjustment
  [FACTION: Stellar Concord +1]      faction reputation change
  [SUMMARY: ...]                     scene synopsis
  [Elena EXPRESSES JOY]              emotion cue
  [Elena arrives] / [Elena departs]  movement cue
  [Elena: trust +1]                  participant stat adjustment

Anything else in brackets is decorative and only gets stripped. Tags never
nest and never span a line break.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple

TAG_RE = re.compile(r"\[([^\[\]\r\n]*)\]")

_REQUEST_RE = re.compile(r"^REQUEST\s*:", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"^SUMMARY\s*:\s*(.*)$", re.IGNORECASE | re.DOTALL)
_STATION_RE = re.compile(r"^STATION\s*[:\-]\s*(.*)$", re.IGNORECASE | re.DOTALL)
_FACTION_RE = re.compile(r"^FACTION\s*:\s*(.*)$", re.IGNORECASE | re.DOTALL)
_EMOTION_RE = re.compile(r"^(.+?)\s+EXPRESSES\s+(.+)$", re.IGNORECASE)
_MOVEMENT_RE = re.compile(r"^([^:\[\]]+?)\s+(ARRIVES|DEPARTS)$", re.IGNORECASE)


class Tag(NamedTuple):
    body: str  # text between the brackets, unstripped
    start: int  # offset of "["
    end: int  # offset just past "]"


class TagKind(str, Enum):
    END = "end"
    REQUEST = "request"
    SUMMARY = "summary"
    STATION = "station"
    FACTION = "faction"
    EMOTION = "emotion"
    ARRIVAL = "arrival"
    DEPARTURE = "departure"
    STAT = "stat"
    DECORATIVE = "decorative"


def scan_tags(text: str) -> list[Tag]:
    """All bracket tags in ``text``, left to right."""
    return [Tag(m.group(1), m.start(), m.end()) for m in TAG_RE.finditer(text)]


def is_end_marker(body: str) -> bool:
    """[END], [DONE], or anything starting with END SCENE (case-insensitive)."""
    upper = body.strip().upper()
    return upper in ("END", "DONE") or upper.startswith("END SCENE")


def has_end_marker(text: str) -> bool:
    return any(is_end_marker(tag.body) for tag in scan_tags(text))


def strip_tags(text: str) -> str:
    """Remove every bracket tag, repeating until none remain.

    A single pass can expose a new tag ("[a[b]c]" -> "[ac]"); looping makes
    stripping idempotent.
    """
    while True:
        stripped = TAG_RE.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def classify_tag(body: str) -> TagKind:
    raw = body.strip()
    if not raw:
        return TagKind.DECORATIVE
    if is_end_marker(raw):
        return TagKind.END
    if _REQUEST_RE.match(raw):
        return TagKind.REQUEST
    if _SUMMARY_RE.match(raw):
        return TagKind.SUMMARY
    if _STATION_RE.match(raw):
        return TagKind.STATION
    if _FACTION_RE.match(raw):
        return TagKind.FACTION
    if _EMOTION_RE.match(raw):
        return TagKind.EMOTION
    m = _MOVEMENT_RE.match(raw)
    if m:
        return TagKind.ARRIVAL if m.group(2).upper() == "ARRIVES" else TagKind.DEPARTURE
    if ":" in raw or "-" in raw:
        return TagKind.STAT
    return TagKind.DECORATIVE


def parse_summary(body: str) -> str | None:
    m = _SUMMARY_RE.match(body.strip())
    if not m:
        return None
    return m.group(1).strip() or None


def parse_station_payload(body: str) -> str | None:
    m = _STATION_RE.match(body.strip())
    return m.group(1).strip() if m else None


def parse_emotion_tag(body: str) -> tuple[str, str] | None:
    """Split "Elena EXPRESSES JOY" into ("Elena", "JOY")."""
    m = _EMOTION_RE.match(body.strip())
    if not m:
        return None
    return m.group(1).strip(), m.group(2).strip()


def parse_faction_payload(body: str) -> str | None:
    m = _FACTION_RE.match(body.strip())
    return m.group(1).strip() if m else None


def parse_movement_tag(body: str) -> str | None:
    """The participant name in "Elena arrives" or "Elena departs"."""
    m = _MOVEMENT_RE.match(body.strip())
    return m.group(1).strip() if m else None
