"""
tests/test_config_export.py
JSON config loading/applying and the hashed state export.
"""

import json

from feedshield.config import DEFAULT_CONFIG, apply_config, load_config, save_config
from feedshield.detectors import lexicon as lx
from feedshield.export import build_export, verify_export
from feedshield.scorer.engine import ScoringEngine


# ── CONFIG ───────────────────────────────────────────────────

class TestConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_save_and_load(self, tmp_path):
        cfg = {**DEFAULT_CONFIG, 'port': 9000, 'global_sensitivity': 60}
        path = save_config(cfg, tmp_path)
        assert path.name == 'feedshield_config.json'
        assert load_config(tmp_path)['port'] == 9000

    def test_partial_file_merges_defaults(self, tmp_path):
        (tmp_path / 'feedshield_config.json').write_text(json.dumps({'port': 1234}))
        cfg = load_config(tmp_path)
        assert cfg['port'] == 1234
        assert cfg['host'] == '127.0.0.1'

    def test_broken_file_gives_defaults(self, tmp_path):
        (tmp_path / 'feedshield_config.json').write_text('{not json')
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_apply_config(self):
        engine = ScoringEngine()
        apply_config(engine, {
            **DEFAULT_CONFIG,
            'global_sensitivity': 50,
            'sensitivity':        {'anxiety': 10},
            'advanced':           {'learningMode': False},
            'custom_triggers':    {lx.COMPARISON: ['Yacht Week']},
            'removed_triggers':   {lx.DEPRESSION: ['hopeless']},
        })
        config = engine.get_configuration()
        assert config['sensitivity']['comparison'] == 44
        assert config['sensitivity']['anxiety'] == 10
        assert config['advanced']['learning_mode'] is False
        assert 'yacht week' in config['lexicon'][lx.COMPARISON]
        assert 'hopeless' not in config['lexicon'][lx.DEPRESSION]


# ── EXPORT ───────────────────────────────────────────────────

class TestExport:
    def _engine(self):
        engine = ScoringEngine()
        engine.assess("sou um perdedor", "unknown")
        return engine

    def test_export_verifies(self):
        export = build_export(self._engine(), [{'id': '1', 'app': 'instagram'}])
        assert len(export['content_hash_sha256']) == 64
        assert export['learning_samples'] == 1
        assert export['blocked_events'] == [{'id': '1', 'app': 'instagram'}]
        assert verify_export(export)

    def test_export_survives_json(self):
        export = build_export(self._engine())
        assert verify_export(json.loads(json.dumps(export)))

    def test_tampering_detected(self):
        export = build_export(self._engine())
        export['stats']['total_analyzed'] = 999
        assert not verify_export(export)

    def test_no_raw_text(self):
        export = build_export(self._engine())
        assert 'sou um perdedor' not in json.dumps(export['stats'])
        assert isinstance(export['learning_samples'], int)
