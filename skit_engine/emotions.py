"""Emotion vocabulary for ``[NAME EXPRESSES EMOTION]`` tags.

The generator is told to use the listed emotions but routinely drifts to
near-synonyms ("curious", "relief", "smug"). EMOTION_SYNONYMS folds those back
onto the closed set; anything not found in either is ignored.
"""

from __future__ import annotations

from enum import Enum


class Emotion(str, Enum):
    NEUTRAL = "neutral"
    APPROVAL = "approval"
    ANGER = "anger"
    CONFUSION = "confusion"
    DESIRE = "desire"
    DISAPPOINTMENT = "disappointment"
    DISGUST = "disgust"
    EMBARRASSMENT = "embarrassment"
    ECSTASY = "ecstasy"
    FEAR = "fear"
    GRIEF = "grief"
    GUILT = "guilt"
    INTRIGUE = "intrigue"
    JOY = "joy"
    KINDNESS = "kindness"
    LOVE = "love"
    NERVOUSNESS = "nervousness"
    PRIDE = "pride"
    SADNESS = "sadness"
    WONDER = "wonder"


EMOTION_SYNONYMS: dict[Emotion, list[str]] = {
    Emotion.NEUTRAL: ["calm", "placid", "serene", "tranquil", "stoic", "composed", "impassive"],
    Emotion.APPROVAL: ["content", "amusement", "admiration", "pleased", "appreciative", "satisfied", "cheerful"],
    Emotion.ANGER: ["angry", "furious", "fury", "enraged", "livid", "frustration", "rage"],
    Emotion.CONFUSION: ["confused", "puzzled", "baffled", "stunned", "perplexed", "bewilderment"],
    Emotion.DESIRE: ["seductive", "desirous", "longing", "lust", "yearning", "passion"],
    Emotion.DISAPPOINTMENT: ["annoyed", "disapproval", "dismayed", "suspicious", "suspicion", "distrust", "skepticism"],
    Emotion.DISGUST: ["disgusted", "grossed out", "sickened", "revulsion", "disdain", "contempt"],
    Emotion.EMBARRASSMENT: ["embarrassed", "shame", "ashamed", "sheepish", "flustered", "bashful", "awkward"],
    Emotion.ECSTASY: ["ecstatic", "euphoria", "euphoric", "mania", "manic"],
    Emotion.FEAR: ["shocked", "terrified", "terror", "panic", "alarmed", "frightened", "horrified"],
    Emotion.GRIEF: ["depressed", "sobbing", "desperation", "despair"],
    Emotion.GUILT: ["remorseful", "remorse", "repentant", "regretful", "penitent", "concern"],
    Emotion.INTRIGUE: ["intrigued", "curious", "curiosity", "interest", "engrossed", "mischievous"],
    Emotion.JOY: ["happy", "happiness", "thrilled", "delighted", "elated", "playful", "enthusiasm"],
    Emotion.KINDNESS: ["grateful", "caring", "thankful", "affectionate", "tenderness", "fondness", "warmth"],
    Emotion.LOVE: ["lovestruck", "adoration", "adoring", "devotion", "infatuated", "romantic"],
    Emotion.NERVOUSNESS: ["anxious", "uncertain", "jittery", "uneasy", "worry", "vulnerable", "anxiety"],
    Emotion.PRIDE: ["proud", "arrogance", "arrogant", "triumph", "confidence", "confident", "smug"],
    Emotion.SADNESS: ["sad", "upset", "distress", "sorrow", "unhappiness", "melancholy", "gloom"],
    Emotion.WONDER: ["excited", "optimistic", "optimism", "surprised", "surprise", "realization",
                     "excitement", "relief", "hope", "fascinated", "awe"],
}

# synonym -> Emotion; first listing wins where a word appears twice
EMOTION_MAPPING: dict[str, Emotion] = {}
for _emotion, _synonyms in EMOTION_SYNONYMS.items():
    for _synonym in _synonyms:
        EMOTION_MAPPING.setdefault(_synonym, _emotion)


def resolve_emotion(word: str) -> Emotion | None:
    """Map a free-text emotion word onto the closed vocabulary."""
    key = word.strip().lower()
    if not key:
        return None
    try:
        return Emotion(key)
    except ValueError:
        return EMOTION_MAPPING.get(key)
