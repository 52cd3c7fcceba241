"""
feedshield/detectors/lexicon.py
Categorized trigger phrases, emoji and hashtag sets.
Pure Python, zero dependencies. Portuguese and English entries.
Extend the seed lists freely — keys are the configuration category names.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from feedshield.errors import UnknownCategory

logger = logging.getLogger(__name__)

COMPARISON   = 'comparisonTriggers'
ANXIETY      = 'anxietyTriggers'
DEPRESSION   = 'depressionTriggers'
BODY_IMAGE   = 'bodyImageTriggers'
MATERIALISM  = 'materialismTriggers'
OSTENTATION  = 'ostentationPatterns'
EMOJIS       = 'toxicEmojis'
HASHTAGS     = 'toxicHashtags'

# Scan order matters: the first category with a hit names the assessment.
SCORED_CATEGORIES: Tuple[str, ...] = (
    COMPARISON, ANXIETY, DEPRESSION, BODY_IMAGE, MATERIALISM, OSTENTATION,
)
ALL_CATEGORIES: Tuple[str, ...] = SCORED_CATEGORIES + (EMOJIS, HASHTAGS)

# ── SEED CORPUS ──────────────────────────────────────────────

DEFAULT_LEXICON: Dict[str, List[str]] = {

    COMPARISON: [
        'vida perfeita', 'sucesso extremo', 'blessed', 'richlife', 'lifestyle perfeito',
        'corpo perfeito', 'relacionamento perfeito', 'viagem dos sonhos', 'casa dos sonhos',
        'carro novo', 'marca de luxo', 'riqueza', 'conquista', 'achievement',
        'melhor que', 'superior', 'único', 'especial', 'privilegiado', 'inveja',
        'todos querem', 'ninguém tem', 'só eu tenho', 'consegui', 'conquistei',
        'perfect life', 'extreme success', 'blessed life', 'rich lifestyle',
        'perfect body', 'perfect relationship', 'dream vacation', 'dream house',
        'new car', 'luxury brand', 'wealth', 'achievement', 'accomplished',
        'better than', 'superior', 'unique', 'special', 'privileged', 'envy',
        'everyone wants', 'nobody has', 'only i have', 'achieved', 'conquered',
    ],

    ANXIETY: [
        'fomo', 'urgência', 'limitado', 'apenas hoje', 'última chance', 'vai acabar',
        'você está perdendo', 'todos estão fazendo', 'não perca', 'exclusivo',
        'limited edition', 'sold out', 'running out', 'deadline', 'pressure',
        'pressa', 'ansiedade', 'stress', 'overwhelmed', 'panic', 'desespero',
        'urgency', 'limited', 'only today', 'last chance', 'running out',
        'you are missing', 'everyone is doing', 'dont miss', 'exclusive',
        'limited edition', 'sold out', 'deadline', 'pressure', 'hurry',
        'anxiety', 'stress', 'overwhelmed', 'panic', 'desperation',
    ],

    DEPRESSION: [
        'não sou suficiente', 'por que eu não tenho', 'minha vida é um fracasso',
        'nunca vou conseguir', 'sou um perdedor', 'todo mundo menos eu',
        'não mereço', 'sou inadequado', 'sem esperança', 'sem sentido',
        'vazio', 'quebrado', 'inútil', 'fracasso', 'desistir', 'sem valor',
        'not enough', 'why dont i have', 'my life is a failure',
        'never going to make it', 'i am a loser', 'everyone but me',
        'dont deserve', 'inadequate', 'hopeless', 'meaningless',
        'empty', 'broken', 'worthless', 'failure', 'give up', 'no value',
    ],

    BODY_IMAGE: [
        'corpo dos sonhos', 'transformação radical', 'antes e depois', 'peso ideal',
        'bodygoals', 'fitness inspiration', 'perfect body', 'summer body',
        'bikini body', 'abs', 'sixpack', 'diet', 'skinny', 'magra', 'gorda',
        'fat loss', 'muscle gain', 'transformation', 'glow up', 'makeover',
        'corpo perfeito', 'shape', 'forma física', 'medidas', 'silhueta',
        'dream body', 'radical transformation', 'before and after', 'ideal weight',
        'body goals', 'fitness inspiration', 'perfect body', 'summer body',
        'bikini body', 'abs', 'six pack', 'diet', 'skinny', 'fat', 'thin',
        'fat loss', 'muscle gain', 'transformation', 'glow up', 'makeover',
    ],

    MATERIALISM: [
        'nova compra', 'produto caro', 'vale muito', 'investimento caro',
        'shopping', 'haul', 'expensive', 'luxury', 'designer', 'marca cara',
        'brand new', 'worth it', 'splurge', 'treat myself', 'me dei de presente',
        'money spent', 'cost', 'price', 'expensive taste', 'gosto caro',
        'new purchase', 'expensive product', 'worth a lot', 'expensive investment',
        'shopping', 'haul', 'expensive', 'luxury', 'designer', 'expensive brand',
        'brand new', 'worth it', 'splurge', 'treat myself', 'gave myself',
        'money spent', 'cost', 'price', 'expensive taste',
    ],

    OSTENTATION: [
        'olhem meu', 'vejam minha', 'consegui comprar', 'acabei de ganhar',
        'meu novo', 'minha nova', 'finalmente consegui', 'me dei o luxo',
        'posso pagar', 'caro mas vale', 'dinheiro bem gasto', 'investimento',
        'look at my', 'check out my', 'just bought', 'just got',
        'my new', 'finally got', 'treated myself', 'can afford',
        'expensive but worth it', 'money well spent', 'investment',
    ],

    EMOJIS: [
        '💎', '🏖️', '✨', '🚗', '🏠', '💰', '👑', '🔥', '💪', '🎉',
        '🏆', '💯', '🤑', '💸', '🥇', '⭐', '🌟', '💫', '🎯', '🚀',
    ],

    HASHTAGS: [
        '#blessed', '#richlife', '#luxury', '#expensive', '#perfect',
        '#goals', '#rich', '#money', '#success', '#winning', '#winner',
        '#bodygoals', '#fitspiration', '#thinspiration', '#perfectbody',
        '#lifestyle', '#flexing', '#showoff', '#humblebrag', '#flex',
        '#richkid', '#luxurylife', '#moneytalks', '#successmindset',
    ],
}


def _normalize(phrases: Iterable[str]) -> List[str]:
    """Lowercase, strip, drop blanks and later duplicates. Keeps first-seen order."""
    seen: Dict[str, None] = {}
    for p in phrases:
        p = (p or '').strip().lower()
        if p:
            seen.setdefault(p, None)
    return list(seen)


class LexiconStore:
    """
    Mutable category → phrase list mapping.
    Invariant: every phrase in a category is lowercase and unique.
    """

    def __init__(self, seed: Optional[Dict[str, List[str]]] = None):
        seed = DEFAULT_LEXICON if seed is None else seed
        self._data: Dict[str, List[str]] = {
            cat: _normalize(seed.get(cat, [])) for cat in ALL_CATEGORIES
        }

    def __contains__(self, category: str) -> bool:
        return category in self._data

    def phrases(self, category: str) -> List[str]:
        return list(self._data.get(category, []))

    def scored_categories(self) -> Iterator[Tuple[str, List[str]]]:
        for cat in SCORED_CATEGORIES:
            yield cat, self._data[cat]

    def all_phrases(self) -> List[str]:
        """Every scored phrase, emoji and hashtag sets excluded."""
        out: List[str] = []
        for _, phrases in self.scored_categories():
            out.extend(phrases)
        return out

    # ── MUTATION ──────────────────────────────────────────────

    def add(self, category: str, phrase: str) -> bool:
        """Returns True if the phrase was inserted. Duplicates are a silent no-op."""
        if category not in self._data:
            logger.warning(str(UnknownCategory(category)))
            return False
        phrase = (phrase or '').strip().lower()
        if not phrase or phrase in self._data[category]:
            return False
        self._data[category].append(phrase)
        logger.info(f"Trigger added to {category}")
        return True

    def remove(self, category: str, phrase: str) -> bool:
        if category not in self._data:
            logger.warning(str(UnknownCategory(category)))
            return False
        phrase = (phrase or '').strip().lower()
        if phrase not in self._data[category]:
            return False
        self._data[category].remove(phrase)
        logger.info(f"Trigger removed from {category}")
        return True

    def replace(self, fragment: Dict[str, List[str]]) -> None:
        """Wholesale replacement of the categories named in fragment."""
        for category, phrases in fragment.items():
            if category not in self._data:
                logger.warning(str(UnknownCategory(category)))
                continue
            self._data[category] = _normalize(phrases)

    # ── SNAPSHOTS ─────────────────────────────────────────────

    def snapshot(self) -> Dict[str, List[str]]:
        return {cat: list(phrases) for cat, phrases in self._data.items()}

    def counts(self) -> Dict[str, int]:
        return {cat: len(phrases) for cat, phrases in self._data.items()}
