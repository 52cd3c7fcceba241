"""
tests/test_engine.py
ScoringEngine — end-to-end scoring, configuration and persistence.
Scores below are worked out by hand from the default lexicon and weights.
"""

import asyncio
import json
import logging
import sqlite3
from dataclasses import asdict

import pytest

from feedshield.detectors import lexicon as lx
from feedshield.errors import EngineNotInitialized
from feedshield.scorer.engine import ScoringEngine
from feedshield.storage.blob_store import LEARNING_KEY, STATS_KEY, MemoryBlobStore


# ── FIXTURES ─────────────────────────────────────────────────

INSTAGRAM_POST = "Minha vida é perfeita! Olhem minha nova BMW M8 🚗🏠✨ #blessed #richlife"


class FailingStore(MemoryBlobStore):
    def put(self, key, value):
        raise OSError("disk full")


class UnreadableStore(MemoryBlobStore):
    def get(self, key):
        raise sqlite3.OperationalError("database is locked")


@pytest.fixture
def engine():
    return ScoringEngine()


def _isolated_engine(*phrases):
    """Only the given ostentation phrases score; every extra stage is off."""
    eng = ScoringEngine()
    eng.update_configuration({
        'lexicon': {cat: [] for cat in lx.SCORED_CATEGORIES} | {lx.OSTENTATION: list(phrases)},
        'sensitivity': {'ostentation': 100},
        'advanced': {
            'contextual_analysis': False,
            'pattern_recognition': False,
            'semantic_analysis':   False,
        },
    })
    return eng


def _without_timing(assessment):
    d = asdict(assessment)
    d.pop('processing_time_ms')
    return d


# ── SCORING ──────────────────────────────────────────────────

class TestScoring:
    def test_instagram_post(self, engine):
        a = engine.assess(INSTAGRAM_POST, 'instagram')
        assert a.toxicity_score == 77
        assert a.risk_level == 'High'
        assert a.should_block is True
        assert a.confidence == 98
        assert a.trigger_type == 'Social Comparison'
        assert a.found_triggers == ('blessed', 'richlife', 'minha nova')
        assert a.comparison_level == 36
        assert a.ostentation_level == 12
        assert a.materialism_level == 0
        assert a.contextual_factors == ('3 toxic hashtags', 'High density of toxic keywords')
        assert a.emotional_tone == 'Neutral'
        assert a.app_context == 'instagram'

    def test_empty_text(self, engine):
        a = engine.assess('', 'unknown')
        assert a.toxicity_score == 0
        assert a.found_triggers == ()
        assert a.contextual_factors == ()
        assert a.should_block is False
        assert a.risk_level == 'Low'
        assert a.confidence == 60
        assert a.trigger_type == ''
        assert a.emotional_tone == 'Neutral'

    def test_depression_label(self, engine):
        a = engine.assess('sou um perdedor', 'unknown')
        assert a.trigger_type == 'Depression Risk'
        assert 'depressive' in a.trigger_reason
        assert a.found_triggers == ('sou um perdedor',)
        assert a.depression_risk == 27
        assert a.toxicity_score == 44
        assert a.should_block is True
        assert a.confidence == 60

    def test_first_category_names_assessment(self, engine):
        a = engine.assess('blessed and hopeless', 'unknown')
        assert a.trigger_type == 'Social Comparison'

    def test_fallback_label_without_lexicon_hits(self, engine):
        a = engine.assess('💎💎💎💎💎 #goals #money #success', 'unknown')
        assert a.found_triggers == ()
        assert a.toxicity_score == 39
        assert a.should_block is True
        assert a.trigger_type == 'General Analysis'
        assert a.trigger_reason

    def test_idempotent(self, engine):
        first  = engine.assess(INSTAGRAM_POST, 'instagram')
        second = engine.assess(INSTAGRAM_POST, 'instagram')
        assert _without_timing(first) == _without_timing(second)

    def test_adding_triggers_never_lowers_score(self, engine):
        scores = [
            engine.assess(t, 'unknown').toxicity_score
            for t in ('blessed', 'blessed luxury', 'blessed luxury hopeless')
        ]
        assert scores == [26, 44, 72]

    def test_scores_are_clamped(self, engine):
        text = ' '.join(lx.DEFAULT_LEXICON[lx.DEPRESSION])
        a = engine.assess(text, 'unknown')
        assert a.toxicity_score == 100
        assert a.depression_risk == 100
        assert a.risk_level == 'Critical'
        assert a.confidence == 98

    def test_app_boost(self, engine):
        plain  = engine.assess('new challenge going viral', 'unknown')
        tiktok = engine.assess('new challenge going viral', 'com.zhiliaoapp.musically')
        assert tiktok.toxicity_score - plain.toxicity_score == 25


class TestBlockThreshold:
    def test_exactly_35_is_not_blocked(self):
        eng = _isolated_engine('aaaa', 'b' * 16)
        a = eng.assess('aaaa ' + 'b' * 16, 'unknown')
        assert a.toxicity_score == 35
        assert a.should_block is False
        assert a.risk_level == 'Medium'

    def test_36_is_blocked(self):
        eng = _isolated_engine('c' * 12, 'd' * 12)
        a = eng.assess('c' * 12 + ' ' + 'd' * 12, 'unknown')
        assert a.toxicity_score == 36
        assert a.should_block is True
        assert a.trigger_type == 'Ostentation'


# ── CONFIGURATION ────────────────────────────────────────────

class TestConfiguration:
    def test_add_and_remove_trigger(self, engine):
        assert engine.add_trigger(lx.COMPARISON, 'x-test-trigger')
        assert 'x-test-trigger' in engine.assess('x-test-trigger', 'appX').found_triggers
        assert engine.remove_trigger(lx.COMPARISON, 'x-test-trigger')
        assert 'x-test-trigger' not in engine.assess('x-test-trigger', 'appX').found_triggers

    def test_unknown_category_is_logged(self, engine, caplog):
        with caplog.at_level(logging.WARNING):
            assert engine.add_trigger('nopeTriggers', 'x') is False
        assert 'Unknown lexicon category: nopeTriggers' in caplog.text

    def test_zero_sensitivity_still_reports_trigger(self, engine):
        engine.update_configuration({'sensitivity': {'depression': 0}})
        a = engine.assess('sou um perdedor', 'unknown')
        assert a.depression_risk == 0
        assert a.found_triggers == ('sou um perdedor',)

    def test_tone_detection_flag(self, engine):
        assert engine.assess('I hate this', 'unknown').emotional_tone == 'Toxic'
        engine.update_configuration({'advanced': {'emotionalToneDetection': False}})
        assert engine.assess('I hate this', 'unknown').emotional_tone == 'Neutral'

    def test_learning_mode_off_skips_journal(self, engine):
        engine.update_configuration({'advanced': {'learning_mode': False}})
        engine.assess('blessed', 'unknown')
        assert len(engine.journal) == 0
        assert engine.get_analysis_stats()['total_analyzed'] == 1

    def test_global_sensitivity(self, engine):
        engine.set_sensitivity(50)
        assert engine.get_configuration()['sensitivity']['comparison'] == 44

    def test_configuration_snapshot_keys(self, engine):
        config = engine.get_configuration()
        assert set(config) == {'lexicon', 'sensitivity', 'advanced'}
        assert set(config['lexicon']) == set(lx.ALL_CATEGORIES)

    def test_database_info(self, engine):
        info = engine.get_database_info()
        assert info['categories'] == len(lx.ALL_CATEGORIES)
        assert info['total_triggers'] == sum(info['category_counts'].values())
        engine.add_trigger(lx.ANXIETY, 'brand new anxiety')
        assert engine.get_database_info()['total_triggers'] == info['total_triggers'] + 1


# ── LIFECYCLE ────────────────────────────────────────────────

class TestLifecycle:
    def test_stats_count_blocks(self, engine):
        engine.assess(INSTAGRAM_POST, 'instagram')
        engine.assess('bom dia', 'unknown')
        stats = engine.get_analysis_stats()
        assert stats['total_analyzed'] == 2
        assert stats['toxic_content_detected'] == 1
        assert stats['last_analysis'] is not None

    def test_cleanup_disables_assess(self, engine):
        engine.cleanup()
        assert engine.is_initialized is False
        with pytest.raises(EngineNotInitialized):
            engine.assess('bom dia', 'unknown')
        engine.initialize()
        assert engine.assess('bom dia', 'unknown').should_block is False

    def test_reset_keeps_lexicon(self, engine):
        engine.add_trigger(lx.COMPARISON, 'kept after reset')
        engine.assess('blessed', 'unknown')
        engine.reset()
        assert engine.get_analysis_stats()['total_analyzed'] == 0
        assert len(engine.journal) == 0
        assert 'kept after reset' in engine.get_configuration()['lexicon'][lx.COMPARISON]


class TestPersistence:
    def test_synchronize_and_restore(self):
        store = MemoryBlobStore()
        eng = ScoringEngine(store=store)
        eng.assess('blessed', 'unknown')
        assert asyncio.run(eng.synchronize()) is True
        assert json.loads(store.get(STATS_KEY))['total_analyzed'] == 1

        fresh = ScoringEngine(store=store)
        assert fresh.restore() is True
        assert fresh.get_analysis_stats()['total_analyzed'] == 1
        assert len(fresh.journal) == 1

    def test_synchronize_failure_is_swallowed(self, caplog):
        eng = ScoringEngine(store=FailingStore())
        eng.assess('blessed', 'unknown')
        with caplog.at_level(logging.ERROR):
            assert asyncio.run(eng.synchronize()) is False
        assert 'Synchronize failed' in caplog.text
        assert eng.get_analysis_stats()['total_analyzed'] == 1

    def test_synchronize_without_store(self, engine):
        assert asyncio.run(engine.synchronize()) is False

    def test_restore_unreadable_blob(self):
        store = MemoryBlobStore()
        store.put(STATS_KEY, 'not json')
        eng = ScoringEngine(store=store)
        assert eng.restore() is False
        assert eng.get_analysis_stats()['total_analyzed'] == 0

    def test_samples_are_truncated_on_disk(self):
        store = MemoryBlobStore()
        eng = ScoringEngine(store=store)
        eng.assess('blessed ' * 50, 'unknown')
        asyncio.run(eng.synchronize())
        sample = json.loads(store.get(LEARNING_KEY))[0]
        assert len(sample['text']) == 100

    def test_configuration_survives_restore(self):
        store = MemoryBlobStore()
        eng = ScoringEngine(store=store)
        eng.update_configuration({
            'sensitivity': {'depression': 10},
            'advanced':    {'learning_mode': False},
        })
        eng.add_trigger(lx.COMPARISON, 'Yacht Week')
        eng.remove_trigger(lx.DEPRESSION, 'hopeless')
        assert asyncio.run(eng.synchronize()) is True

        fresh = ScoringEngine(store=store)
        assert fresh.restore() is True
        config = fresh.get_configuration()
        assert config['sensitivity']['depression'] == 10
        assert config['advanced']['learning_mode'] is False
        assert 'yacht week' in config['lexicon'][lx.COMPARISON]
        assert 'hopeless' not in config['lexicon'][lx.DEPRESSION]

    def test_restore_read_failure_is_logged(self, caplog):
        eng = ScoringEngine(store=UnreadableStore())
        with caplog.at_level(logging.ERROR):
            assert eng.restore() is False
        assert 'Restore failed' in caplog.text
        assert eng.assess('blessed', 'unknown').toxicity_score == 26


class TestConfigSnapshot:
    def test_scan_reads_snapshot_not_live_profile(self, engine, monkeypatch):
        def live_read(key):
            raise AssertionError("live sensitivity read during scan")

        monkeypatch.setattr(engine.sensitivity, 'get', live_read)
        assert engine.assess(INSTAGRAM_POST, 'instagram').toxicity_score == 77
