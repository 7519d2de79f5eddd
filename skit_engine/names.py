"""Fuzzy name resolution.

Generated text refers to characters loosely: "Elena" for "Elena Vasquez",
"the Guard Captain" for "Captain". Matching is case-insensitive:

  1. An exact match anywhere in the candidates wins.
  2. Otherwise the first candidate, in iteration order, where either name
     contains the other.

Blank names never match, since "" is a substring of everything.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")


def names_match(name: str, candidate: str) -> bool:
    """True if the two names are equal or one contains the other (case-insensitive)."""
    a = name.strip().lower()
    b = candidate.strip().lower()
    if not a or not b:
        return False
    return a == b or a in b or b in a


def find_best_name_match(
    name: str,
    candidates: Iterable[T],
    key: Callable[[T], str] = lambda c: c.name,  # type: ignore[attr-defined]
) -> T | None:
    """Return the candidate whose ``key(candidate)`` best matches ``name``, or None."""
    wanted = name.strip().lower()
    if not wanted:
        return None

    pool = list(candidates)
    for candidate in pool:
        if key(candidate).strip().lower() == wanted:
            return candidate
    for candidate in pool:
        if names_match(wanted, key(candidate)):
            return candidate
    return None


def find_best_string_match(name: str, candidates: Iterable[str]) -> str | None:
    """``find_best_name_match`` over plain strings."""
    return find_best_name_match(name, candidates, key=lambda s: s)
