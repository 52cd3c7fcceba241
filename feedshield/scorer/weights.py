"""
feedshield/scorer/weights.py
Per-category scoring constants and the numeric helpers shared by the
engine and the journal. Constants are behavioral defaults — keep them
bit-for-bit unless you mean to change every score.
"""

import math
from dataclasses import dataclass
from typing import Dict

from feedshield.detectors import lexicon as lx
from feedshield.models.assessment import RISK_CRITICAL, RISK_HIGH, RISK_LOW, RISK_MEDIUM


@dataclass(frozen=True)
class CategoryRule:
    sensitivity_key: str
    base_weight:     int
    multiplier:      float     # applied to the toxicity total only
    label:           str
    reason:          str


CATEGORY_RULES: Dict[str, CategoryRule] = {
    lx.COMPARISON: CategoryRule(
        'comparison', 20, 0.8, 'Social Comparison',
        'Content may trigger harmful social comparison and low self-esteem',
    ),
    lx.ANXIETY: CategoryRule(
        'anxiety', 18, 0.7, 'Anxiety/FOMO',
        'Anxiety and fear-of-missing-out inducers detected',
    ),
    lx.DEPRESSION: CategoryRule(
        'depression', 25, 1.2, 'Depression Risk',
        'Potentially depressive content that may affect mood and self-esteem',
    ),
    lx.BODY_IMAGE: CategoryRule(
        'bodyImage', 22, 0.9, 'Body Image',
        'Body image trigger that may cause dysmorphia and dissatisfaction',
    ),
    lx.MATERIALISM: CategoryRule(
        'materialism', 15, 0.6, 'Excessive Materialism',
        'Materialistic content that may cause financial dissatisfaction',
    ),
    lx.OSTENTATION: CategoryRule(
        'ostentation', 15, 1.0, 'Ostentation',
        'Showing-off language that invites unfavorable comparison',
    ),
}

DEFAULT_BASE_WEIGHT = 15

FALLBACK_LABEL  = 'General Analysis'
FALLBACK_REASON = 'Harmful content detected by contextual psychological analysis'

BLOCK_THRESHOLD = 35

# (threshold, label) checked top-down, score >= threshold
RISK_THRESHOLDS = ((80, RISK_CRITICAL), (60, RISK_HIGH), (35, RISK_MEDIUM))

CONFIDENCE_MIN = 60
CONFIDENCE_MAX = 98


def round_half_up(x: float) -> int:
    """Round .5 away from zero for positives (not Python's banker's rounding)."""
    return int(math.floor(x + 0.5))


def clamp(x: float, lo: float = 0, hi: float = 100):
    return max(lo, min(hi, x))


def specificity_bonus(phrase: str) -> int:
    """Longer phrases are more specific and weigh more."""
    n = len(phrase)
    if n > 15:
        return 5
    if n > 10:
        return 3
    return 0


def trigger_weight(phrase: str, base_weight: int, sensitivity: int) -> int:
    return round_half_up((base_weight + specificity_bonus(phrase)) * (sensitivity / 100))


def risk_level(score: float) -> str:
    for threshold, label in RISK_THRESHOLDS:
        if score >= threshold:
            return label
    return RISK_LOW


def confidence(score: float, triggers_found: int, factors_found: int) -> int:
    value = round_half_up(score * 1.2)
    if triggers_found > 2:
        value += 5
    if factors_found > 1:
        value += 3
    if score > 0 and triggers_found == 1:
        value -= 10
    return int(clamp(value, CONFIDENCE_MIN, CONFIDENCE_MAX))
