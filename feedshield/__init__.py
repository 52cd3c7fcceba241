"""
feedshield — rule-based psychological risk scoring for social-media snippets.

    from feedshield import ScoringEngine
    engine = ScoringEngine()
    result = engine.assess("Minha vida é perfeita! #blessed", "instagram")
"""

__version__ = '4.0.0'

from feedshield.scorer.engine import ScoringEngine  # noqa: E402

__all__ = ["ScoringEngine", "__version__"]
