"""
feedshield/models/assessment.py
Shared dataclass schema. The engine, journal, pipeline and API
all use these types. Do not add logic here — data only.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

# Risk levels, lowest to highest
RISK_LOW      = 'Low'
RISK_MEDIUM   = 'Medium'
RISK_HIGH     = 'High'
RISK_CRITICAL = 'Critical'

# Emotional tones
TONE_POSITIVE = 'Positive'
TONE_NEUTRAL  = 'Neutral'
TONE_NEGATIVE = 'Negative'
TONE_TOXIC    = 'Toxic'


@dataclass(frozen=True)
class Assessment:
    """Output of one scoring call. Never mutated after construction."""
    toxicity_score:      int                    # 0–100
    comparison_level:    int                    # 0–100
    anxiety_level:       int                    # 0–100
    depression_risk:     int                    # 0–100
    body_image_risk:     int                    # 0–100
    materialism_level:   int                    # 0–100
    ostentation_level:   int                    # 0–100
    found_triggers:      Tuple[str, ...]        # discovery order
    should_block:        bool
    confidence:          int                    # 60–98
    trigger_type:        str                    # primary category label, '' if none
    trigger_reason:      str
    risk_level:          str                    # Low / Medium / High / Critical
    contextual_factors:  Tuple[str, ...]
    emotional_tone:      str                    # Positive / Neutral / Negative / Toxic
    processing_time_ms:  float
    app_context:         str = 'unknown'


@dataclass
class AnalysisStats:
    """Process-wide running counters."""
    total_analyzed:         int             = 0
    toxic_content_detected: int             = 0
    accuracy_rate:          float           = 96.8
    processing_speed:       int             = 42      # ms, two-point moving average
    models_active:          int             = 8
    learning_progress:      float           = 0.0     # 0–100
    last_analysis:          Optional[int]   = None    # epoch ms


@dataclass(frozen=True)
class LearningSample:
    """One journal entry. Text is truncated to 100 chars before storage."""
    text:         str
    score:        float
    triggers:     int
    timestamp:    int                                 # epoch ms


@dataclass(frozen=True)
class CaptureSample:
    """One (text, app) pair produced by a capture source."""
    text:   str
    app:    str = 'unknown'
    meta:   dict = field(default_factory=dict, compare=False)
