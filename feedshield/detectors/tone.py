"""
feedshield/detectors/tone.py
Coarse emotional tone from three small bilingual word lists.
Deterministic — substring counts only.
"""

from typing import List

from feedshield.models.assessment import (
    TONE_NEGATIVE, TONE_NEUTRAL, TONE_POSITIVE, TONE_TOXIC,
)

POSITIVE_WORDS: List[str] = [
    'feliz', 'grato', 'amor', 'paz', 'alegria',
    'happy', 'grateful', 'love', 'peace', 'joy',
]

NEGATIVE_WORDS: List[str] = [
    'triste', 'ansioso', 'deprimido',
    'sad', 'anxious', 'depressed', 'worried',
]

TOXIC_WORDS: List[str] = [
    'inveja', 'ódio', 'raiva',
    'hate', 'envy', 'anger', 'jealous',
]


def _count(lower: str, words: List[str]) -> int:
    return sum(1 for w in words if w in lower)


def classify(text: str) -> str:
    """
    Precedence: any toxic word → Toxic; more negative than positive
    → Negative; any positive → Positive; otherwise Neutral.
    """
    lower = (text or '').lower()
    if _count(lower, TOXIC_WORDS):
        return TONE_TOXIC
    positive = _count(lower, POSITIVE_WORDS)
    negative = _count(lower, NEGATIVE_WORDS)
    if negative > positive:
        return TONE_NEGATIVE
    if positive > 0:
        return TONE_POSITIVE
    return TONE_NEUTRAL
