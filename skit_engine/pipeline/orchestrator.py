"""Skit orchestrator: one generation-and-parse cycle for a scene.

Cycle:
  1. Call the LLM with the prompt spec.
  2. If the call raised, or produced nothing but whitespace, count the
     attempt and go again. Attempts never overlap.
  3. Parse the first usable generation against the participants present
     at the scene's location and return the result.
  4. Once every attempt is spent, return ScriptResult.empty(), the one
     result with ``exhausted`` set.
"""

from __future__ import annotations

import logging

from skit_engine.llm import LLM, PromptSpec
from skit_engine.models import ScriptResult, WorldState
from skit_engine.script import parse_script

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
STAGE = "skit"


async def generate_script(
    llm: LLM,
    prompt: PromptSpec,
    world: WorldState,
    location_id: str,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> ScriptResult:
    """Generate and parse one scene script.

    Transport failures are never propagated. Running out of attempts is
    reported by ``ScriptResult.exhausted``; a usable generation that held
    only decorative tags parses to a result that ``is_empty`` but is not
    exhausted.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        try:
            generation = await llm(STAGE, prompt)
        except Exception:
            logger.exception("Generation attempt %d/%d failed", attempt, max_attempts)
            continue

        text = generation.result if generation is not None else ""
        if not text.strip():
            logger.warning("Generation attempt %d/%d returned no text", attempt, max_attempts)
            continue

        result = parse_script(
            text,
            world.present_at(location_id),
            roster=world.participants.values(),
            factions=world.factions,
        )
        logger.debug(
            "Parsed %d entries on attempt %d (end_scene=%s)",
            len(result.entries), attempt, result.end_scene,
        )
        return result

    logger.warning("No usable generation after %d attempts", max_attempts)
    return ScriptResult.empty()
