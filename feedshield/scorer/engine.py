"""
feedshield/scorer/engine.py
The scoring engine. Takes (text, app) and returns an immutable Assessment.

Pipeline per call:
  1. Lexicon scan — one CategoryResult per scored category, folded with
     "first non-empty label wins".
  2. Contextual / pattern / semantic signals (gated by AdvancedSettings).
  3. Tone classification (gated).
  4. Per-app heuristics.
  5. Block decision, confidence, risk level. Stats + journal update.

No I/O happens during scoring. synchronize() and restore() are the only
methods that touch storage, and neither raises.

Privacy: raw text is never logged.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import feedshield
from feedshield.detectors import contextual, tone
from feedshield.detectors import lexicon as lx
from feedshield.detectors.app_heuristics import app_score
from feedshield.errors import EngineNotInitialized, PersistenceFailure
from feedshield.journal import AnalysisJournal
from feedshield.models.assessment import Assessment, TONE_NEUTRAL
from feedshield.scorer import weights as w
from feedshield.settings import AdvancedSettings, ConfigurationUpdate, SensitivityProfile
from feedshield.storage.blob_store import BlobStore, CONFIG_KEY, LEARNING_KEY, STATS_KEY

logger = logging.getLogger(__name__)


@dataclass
class CategoryResult:
    """What one lexicon category contributed to an assessment."""
    category:     str
    subscore:     float              = 0
    contribution: float              = 0      # after the category multiplier
    triggers:     List[str]          = field(default_factory=list)
    label:        str                = ''
    reason:       str                = ''


@dataclass
class _Fold:
    subscores:    Dict[str, float]   = field(default_factory=dict)
    total:        float              = 0
    triggers:     List[str]          = field(default_factory=list)
    label:        str                = ''
    reason:       str                = ''


def _reduce(results: Iterable[CategoryResult]) -> _Fold:
    acc = _Fold()
    for r in results:
        acc.subscores[r.category] = acc.subscores.get(r.category, 0) + r.subscore
        acc.total += r.contribution
        acc.triggers.extend(r.triggers)
        if not acc.label and r.label:
            acc.label, acc.reason = r.label, r.reason
    return acc


def _report(x: float) -> int:
    return int(w.clamp(w.round_half_up(x), 0, 100))


class ScoringEngine:
    """
    One instance per process. Pass it to whatever issues capture events;
    there is no module-level singleton.
    """

    def __init__(
        self,
        store:       Optional[BlobStore]           = None,
        lexicon:     Optional[lx.LexiconStore]     = None,
        sensitivity: Optional[SensitivityProfile]  = None,
        settings:    Optional[AdvancedSettings]    = None,
        journal:     Optional[AnalysisJournal]     = None,
    ):
        self.store        = store
        self.lexicon      = lexicon
        self.sensitivity  = sensitivity
        self.settings     = settings
        self.journal      = journal or AnalysisJournal()
        self._config_lock = threading.RLock()
        self._initialized = False
        self.initialize()

    # ── LIFECYCLE ─────────────────────────────────────────────

    def initialize(self) -> None:
        """Load defaults for anything not injected. Safe to call again after cleanup()."""
        with self._config_lock:
            if self.lexicon is None:
                self.lexicon = lx.LexiconStore()
            if self.sensitivity is None:
                self.sensitivity = SensitivityProfile()
            if self.settings is None:
                self.settings = AdvancedSettings()
            self._initialized = True
        logger.info(f"Scoring engine initialized ({sum(self.lexicon.counts().values())} lexicon entries)")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def reset(self) -> None:
        """Clear stats and journal. Lexicon and settings are kept."""
        self.journal.reset()
        logger.info("Engine stats and learning journal reset")

    def cleanup(self) -> None:
        """Drop the journal and mark the engine unusable until initialize()."""
        self.journal.clear_samples()
        self._initialized = False
        logger.info("Engine cleaned up — assess() disabled until initialize()")

    # ── SCORING ───────────────────────────────────────────────

    def _scan(self, lower: str, category: str, phrases: List[str],
              levels: SensitivityProfile) -> CategoryResult:
        rule = w.CATEGORY_RULES[category]
        sensitivity = levels.get(rule.sensitivity_key)
        result = CategoryResult(category=category)
        for phrase in phrases:
            if phrase not in lower:
                continue
            weight = w.trigger_weight(phrase, rule.base_weight, sensitivity)
            result.subscore += weight
            result.contribution += weight * rule.multiplier
            result.triggers.append(phrase)
        if result.triggers:
            result.label, result.reason = rule.label, rule.reason
        return result

    def assess(self, text: str, app_context: str = 'unknown') -> Assessment:
        """
        Score one snippet. Raises EngineNotInitialized after cleanup().
        Empty text is valid and scores 0.
        """
        start = time.perf_counter()
        if not self._initialized:
            raise EngineNotInitialized("Scoring engine is not initialized")

        text = text or ''
        lower = text.lower()

        with self._config_lock:
            categories = [(cat, list(phrases)) for cat, phrases in self.lexicon.scored_categories()]
            emojis     = self.lexicon.phrases(lx.EMOJIS)
            hashtags   = self.lexicon.phrases(lx.HASHTAGS)
            settings   = AdvancedSettings(**self.settings.snapshot())
            levels     = SensitivityProfile(self.sensitivity.snapshot())

        fold = _reduce(self._scan(lower, cat, phrases, levels) for cat, phrases in categories)

        signal = contextual.analyze(
            text,
            emojis   = emojis,
            hashtags = hashtags,
            phrases  = [p for _, phrases in categories for p in phrases],
            settings = settings,
        )
        emotional_tone = tone.classify(text) if settings.emotional_tone_detection else TONE_NEUTRAL

        total = fold.total + signal.score + app_score(text, app_context)

        should_block = total > w.BLOCK_THRESHOLD
        label, reason = fold.label, fold.reason
        if not reason and should_block:
            label, reason = w.FALLBACK_LABEL, w.FALLBACK_REASON

        elapsed_ms = (time.perf_counter() - start) * 1000

        sub = fold.subscores
        assessment = Assessment(
            toxicity_score     = _report(total),
            comparison_level   = _report(sub.get(lx.COMPARISON, 0)),
            anxiety_level      = _report(sub.get(lx.ANXIETY, 0)),
            depression_risk    = _report(sub.get(lx.DEPRESSION, 0)),
            body_image_risk    = _report(sub.get(lx.BODY_IMAGE, 0)),
            materialism_level  = _report(sub.get(lx.MATERIALISM, 0)),
            ostentation_level  = _report(sub.get(lx.OSTENTATION, 0)),
            found_triggers     = tuple(fold.triggers),
            should_block       = should_block,
            confidence         = w.confidence(total, len(fold.triggers), len(signal.factors)),
            trigger_type       = label,
            trigger_reason     = reason,
            risk_level         = w.risk_level(total),
            contextual_factors = tuple(signal.factors),
            emotional_tone     = emotional_tone,
            processing_time_ms = elapsed_ms,
            app_context        = app_context or 'unknown',
        )

        self.journal.record_outcome(total, should_block, elapsed_ms)
        if settings.learning_mode:
            self.journal.append_sample(text, total, len(fold.triggers))

        logger.debug(
            f"Assessed [{assessment.app_context}] score={assessment.toxicity_score} "
            f"block={should_block} type={label or '-'}"
        )
        return assessment

    # ── CONFIGURATION ─────────────────────────────────────────

    def add_trigger(self, category: str, phrase: str) -> bool:
        with self._config_lock:
            return self.lexicon.add(category, phrase)

    def remove_trigger(self, category: str, phrase: str) -> bool:
        with self._config_lock:
            return self.lexicon.remove(category, phrase)

    def update_configuration(
        self, update: Union[ConfigurationUpdate, Dict[str, Any]],
    ) -> None:
        if not isinstance(update, ConfigurationUpdate):
            update = ConfigurationUpdate.from_dict(update)
        with self._config_lock:
            if update.lexicon:
                self.lexicon.replace(update.lexicon)
            if update.sensitivity:
                self.sensitivity.merge(update.sensitivity)
            if update.advanced:
                self.settings.merge(update.advanced)
        logger.info("Engine configuration updated")

    def set_sensitivity(self, level: int) -> None:
        with self._config_lock:
            self.sensitivity.set_global(level)

    def get_configuration(self) -> Dict[str, Any]:
        with self._config_lock:
            return {
                'lexicon':     self.lexicon.snapshot(),
                'sensitivity': self.sensitivity.snapshot(),
                'advanced':    self.settings.snapshot(),
            }

    # ── OBSERVABILITY ─────────────────────────────────────────

    def get_analysis_stats(self) -> Dict[str, Any]:
        return self.journal.stats_snapshot()

    def get_database_info(self) -> Dict[str, Any]:
        with self._config_lock:
            counts = self.lexicon.counts()
        return {
            'total_triggers':  sum(counts.values()),
            'categories':      len(counts),
            'category_counts': counts,
            'last_update':     int(time.time() * 1000),
            'version':         feedshield.__version__,
        }

    # ── PERSISTENCE ───────────────────────────────────────────

    def _write_blobs(self, blobs: Dict[str, str]) -> None:
        try:
            self.store.put(STATS_KEY, blobs['stats'])
            self.store.put(LEARNING_KEY, blobs['learning'])
            self.store.put(CONFIG_KEY, blobs['config'])
        except Exception as e:
            raise PersistenceFailure(f"Blob store write failed: {e}") from e

    def _read_blobs(self) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        try:
            return (
                self.store.get(STATS_KEY),
                self.store.get(LEARNING_KEY),
                self.store.get(CONFIG_KEY),
            )
        except Exception as e:
            raise PersistenceFailure(f"Blob store read failed: {e}") from e

    async def synchronize(self) -> bool:
        """
        Best-effort flush of stats, journal and configuration to the
        blob store. Returns True on success. Failures are logged, never
        raised. Cancellation propagates to the caller.
        """
        if self.store is None:
            logger.debug("No blob store configured — skipping synchronize")
            return False
        blobs = self.journal.to_blobs()
        blobs['config'] = json.dumps(self.get_configuration(), ensure_ascii=False)
        try:
            await asyncio.to_thread(self._write_blobs, blobs)
        except PersistenceFailure as e:
            logger.error(f"Synchronize failed: {e}", exc_info=True)
            return False
        logger.info("Engine stats synchronized")
        return True

    def restore(self) -> bool:
        """
        Load state previously written by synchronize(). The saved
        configuration replaces the current lexicon, sensitivity and flags.
        """
        if self.store is None:
            return False
        try:
            stats_blob, learning_blob, config_blob = self._read_blobs()
        except PersistenceFailure as e:
            logger.error(f"Restore failed: {e}", exc_info=True)
            return False
        try:
            self.journal.load_blobs(stats_blob, learning_blob)
            if config_blob:
                self.update_configuration(json.loads(config_blob))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Stored state unreadable, starting fresh: {e}")
            return False
        return True
