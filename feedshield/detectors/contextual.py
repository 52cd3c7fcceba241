"""
feedshield/detectors/contextual.py
Contextual sub-analyses run after the lexicon scan.

Each analyzer is a pure function over the raw text returning a Signal:
an additive score contribution plus zero or more factor notes. None of
them can force or veto a block on its own — only the summed total does.
"""

import re
from typing import Iterable, List, NamedTuple, Sequence

from feedshield.settings import AdvancedSettings


class Signal(NamedTuple):
    score:   float
    factors: List[str]


EMPTY = Signal(0, [])

# ── PATTERN FAMILIES ─────────────────────────────────────────
# (compiled pattern, points, note). Each pattern fires at most once.

def _family(patterns: Sequence[str], points: int, note: str):
    return [(re.compile(p, re.IGNORECASE), points, note) for p in patterns]


SUPERIORITY = _family([
    r'eu sou.*(melhor|superior|único|especial)',
    r'consegui.*(que ninguém|sozinho|primeiro)',
    r'tenho.*(que vocês|mais que|melhor que)',
], 18, 'Superiority language')

HUMBLE_BRAG = _family([
    r'não quero me gabar mas',
    r'com toda humildade',
    r'sem querer me exibir',
    r'not to brag but',
    r'humbly speaking',
], 15, 'Humble bragging detected')

IMPLICIT_COMPARISON = _family([
    r'enquanto vocês.*(eu|eu já)',
    r'diferente de.*(outros|maioria)',
    r'ao contrário de.*(todos|pessoas)',
], 20, 'Implicit comparison detected')

FALSE_MODESTY = _family([
    r'sorte.*(conseguir|ter|ganhar)',
    r'acaso.*(consegui|ganhei)',
    r'por acidente.*(sucesso|conquista)',
], 16, 'False modesty detected')

SOCIAL_PRESSURE = _family([
    r'todo mundo.*(tem|faz|consegue)',
    r'normal.*(ter|fazer|conseguir)',
    r'óbvio que.*(você|qualquer)',
], 14, 'Social pressure detected')

MASKED_NEGATIVITY = _family([
    r'feliz mas.*(gostaria|queria|sonho)',
    r'grato mas.*(falta|preciso|quero)',
    r'blessed mas.*(ainda|só|apenas)',
], 12, 'Masked negativity')

# ── VOCABULARIES ─────────────────────────────────────────────

EXCLUSIVITY_WORDS = ['exclusivo', 'vip', 'premium', 'elite', 'first class', 'luxury']
EXCLUSIVITY_POINTS = 10

TOXIC_ASPIRATIONAL_WORDS = [
    'inspiração', 'motivação', 'hustle', 'grind', 'mindset',
    'manifestation', 'abundance', 'prosperity', 'wealth mindset',
]
ASPIRATIONAL_POINTS = 8

EMOJI_MIN_COUNT = 3          # strictly more than this
EMOJI_POINTS = 3
HASHTAG_POINTS = 8
DENSITY_THRESHOLD = 0.3
DENSITY_POINTS = 12


def _match_family(text: str, family) -> Signal:
    score = 0
    factors: List[str] = []
    for pattern, points, note in family:
        if pattern.search(text):
            score += points
            factors.append(note)
    return Signal(score, factors)


def _match_words(text: str, words: Iterable[str], points: int, note: str) -> Signal:
    lower = text.lower()
    hits = [w for w in words if w in lower]
    return Signal(points * len(hits), [note] * len(hits))


def _combine(*signals: Signal) -> Signal:
    score = 0
    factors: List[str] = []
    for s in signals:
        score += s.score
        factors.extend(s.factors)
    return Signal(score, factors)


# ── SINGLE ANALYZERS ─────────────────────────────────────────

def count_emojis(text: str, emojis: Iterable[str]) -> int:
    return sum(text.count(e) for e in emojis)


def count_hashtags(text: str, hashtags: Iterable[str]) -> int:
    lower = text.lower()
    return sum(1 for h in hashtags if h in lower)


def emoji_density(text: str, emojis: Iterable[str]) -> Signal:
    n = count_emojis(text, emojis)
    if n > EMOJI_MIN_COUNT:
        return Signal(n * EMOJI_POINTS, [f"{n} show-off emojis"])
    return EMPTY


def hashtag_density(text: str, hashtags: Iterable[str]) -> Signal:
    n = count_hashtags(text, hashtags)
    if n > 0:
        return Signal(n * HASHTAG_POINTS, [f"{n} toxic hashtags"])
    return EMPTY


def superiority_language(text: str) -> Signal:
    return _match_family(text, SUPERIORITY)


def humble_brag(text: str) -> Signal:
    return _match_family(text, HUMBLE_BRAG)


def keyword_ratio(text: str, phrases: Sequence[str]) -> float:
    """Share of whitespace tokens that appear inside any trigger phrase."""
    words = text.split()
    if not words:
        return 0.0
    hits = sum(1 for w in words if any(w.lower() in p for p in phrases))
    return hits / len(words)


def keyword_density(text: str, phrases: Sequence[str]) -> Signal:
    if keyword_ratio(text, phrases) > DENSITY_THRESHOLD:
        return Signal(DENSITY_POINTS, ['High density of toxic keywords'])
    return EMPTY


def exclusivity_language(text: str) -> Signal:
    return _match_words(text, EXCLUSIVITY_WORDS, EXCLUSIVITY_POINTS,
                        'Exclusive/elitist language')


def implicit_comparison(text: str) -> Signal:
    return _match_family(text, IMPLICIT_COMPARISON)


def false_modesty(text: str) -> Signal:
    return _match_family(text, FALSE_MODESTY)


def social_pressure(text: str) -> Signal:
    return _match_family(text, SOCIAL_PRESSURE)


def masked_negativity(text: str) -> Signal:
    return _match_family(text, MASKED_NEGATIVITY)


def toxic_aspirational(text: str) -> Signal:
    return _match_words(text, TOXIC_ASPIRATIONAL_WORDS, ASPIRATIONAL_POINTS,
                        'Potentially toxic aspirational language')


# ── STAGES ───────────────────────────────────────────────────

def analyze(
    text:     str,
    emojis:   Sequence[str],
    hashtags: Sequence[str],
    phrases:  Sequence[str],
    settings: AdvancedSettings,
) -> Signal:
    """
    Run every enabled stage in fixed order:
      contextual (density, superiority, humble-brag, exclusivity)
      → complex patterns → semantic.
    Factor notes keep that order.
    """
    signals: List[Signal] = []

    if settings.contextual_analysis:
        signals += [
            emoji_density(text, emojis),
            hashtag_density(text, hashtags),
            superiority_language(text),
            humble_brag(text),
            keyword_density(text, phrases),
            exclusivity_language(text),
        ]

    if settings.pattern_recognition:
        if settings.implicit_comparison_detection:
            signals.append(implicit_comparison(text))
        signals += [false_modesty(text), social_pressure(text)]

    if settings.semantic_analysis:
        signals += [masked_negativity(text), toxic_aspirational(text)]

    return _combine(*signals)
