"""
feedshield/scorer — lexicon-weighted risk scoring.

Privacy: No raw snippet content in logs. Scores and labels only.
"""

from feedshield.scorer.engine import CategoryResult, ScoringEngine
from feedshield.scorer.weights import BLOCK_THRESHOLD, CATEGORY_RULES

__all__ = [
    "BLOCK_THRESHOLD",
    "CATEGORY_RULES",
    "CategoryResult",
    "ScoringEngine",
]
