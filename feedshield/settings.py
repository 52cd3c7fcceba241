"""
feedshield/settings.py
Sensitivity profile, advanced feature flags and the typed partial
configuration update that merges into both (plus the lexicon).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_SENSITIVITY_LEVEL = 75

DEFAULT_SENSITIVITY: Dict[str, int] = {
    'comparison':    88,
    'anxiety':       92,
    'depression':    96,
    'bodyImage':     90,
    'materialism':   78,
    'perfectionism': 85,
    'ostentation':   82,
}

# Floor/ceiling applied by the global sensitivity dial
GLOBAL_MIN = 25
GLOBAL_MAX = 100


def _clamp_level(value: Any, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, int(value)))


class SensitivityProfile:
    """Per-category sensitivity in [0, 100]. Unknown keys read as 75."""

    def __init__(self, levels: Optional[Dict[str, int]] = None):
        self._levels: Dict[str, int] = dict(DEFAULT_SENSITIVITY)
        if levels:
            self.merge(levels)

    def get(self, key: str) -> int:
        return self._levels.get(key, DEFAULT_SENSITIVITY_LEVEL)

    def merge(self, fragment: Dict[str, int]) -> None:
        """Incoming values override existing ones, clamped to [0, 100]."""
        for key, value in fragment.items():
            try:
                self._levels[key] = _clamp_level(value)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric sensitivity for {key!r}")

    def set_global(self, level: int) -> None:
        """Scale every category by a global dial clamped to [25, 100]."""
        level = _clamp_level(level, GLOBAL_MIN, GLOBAL_MAX)
        for key, current in self._levels.items():
            self._levels[key] = _clamp_level(current * (level / 100.0), GLOBAL_MIN, GLOBAL_MAX)
        logger.info(f"Global sensitivity set to {level}%")

    def snapshot(self) -> Dict[str, int]:
        return dict(self._levels)


# camelCase keys used by stored configs and the mobile client
_FLAG_ALIASES = {
    'contextualAnalysis':          'contextual_analysis',
    'patternRecognition':          'pattern_recognition',
    'implicitComparisonDetection': 'implicit_comparison_detection',
    'semanticAnalysis':            'semantic_analysis',
    'emotionalToneDetection':      'emotional_tone_detection',
    'learningMode':                'learning_mode',
}


@dataclass
class AdvancedSettings:
    """Feature flags gating the optional analysis stages."""
    contextual_analysis:           bool = True
    pattern_recognition:           bool = True
    implicit_comparison_detection: bool = True
    semantic_analysis:             bool = True
    emotional_tone_detection:      bool = True
    learning_mode:                 bool = True

    def merge(self, fragment: Dict[str, bool]) -> None:
        known = {f.name for f in fields(self)}
        for key, value in fragment.items():
            name = _FLAG_ALIASES.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown advanced setting {key!r}")
                continue
            setattr(self, name, bool(value))

    def snapshot(self) -> Dict[str, bool]:
        return asdict(self)


@dataclass
class ConfigurationUpdate:
    """
    Partial configuration. Every fragment is optional; whatever is
    present overrides the engine's current value field-by-field.
    Lexicon fragments replace the named categories wholesale.
    """
    lexicon:     Dict[str, List[str]] = field(default_factory=dict)
    sensitivity: Dict[str, int]       = field(default_factory=dict)
    advanced:    Dict[str, bool]      = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConfigurationUpdate':
        """Accepts both snake_case keys and the snapshot keys of get_configuration()."""
        data = data or {}
        return cls(
            lexicon     = dict(data.get('lexicon') or data.get('psychologyDatabase') or {}),
            sensitivity = dict(data.get('sensitivity') or data.get('sensitivityLevels') or {}),
            advanced    = dict(
                data.get('advanced') or data.get('advancedSettings') or {}
            ),
        )

    def is_empty(self) -> bool:
        return not (self.lexicon or self.sensitivity or self.advanced)
