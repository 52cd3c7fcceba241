"""
tests/test_journal_storage.py
Analysis journal bounds and stats, plus the blob store backends.
Uses a real SQLite file under tmp_path.
"""

import json

import pytest

from feedshield.journal import AnalysisJournal
from feedshield.storage.blob_store import MemoryBlobStore, SqliteBlobStore


# ── JOURNAL ──────────────────────────────────────────────────

class TestJournal:
    def test_bounded_fifo(self):
        j = AnalysisJournal()
        for i in range(1500):
            j.append_sample(f"sample {i}", 10, 1)
        samples = j.samples()
        assert len(samples) == 1000
        assert samples[0].text == "sample 500"
        assert samples[-1].text == "sample 1499"
        assert j.stats_snapshot()['learning_progress'] == 100.0

    def test_progress_ratio(self):
        j = AnalysisJournal(capacity=10)
        for _ in range(4):
            j.append_sample("x", 0, 0)
        assert j.stats_snapshot()['learning_progress'] == 40.0

    def test_text_truncated(self):
        j = AnalysisJournal()
        j.append_sample("é" * 250, 50, 2)
        assert j.samples()[0].text == "é" * 100

    def test_record_outcome(self):
        j = AnalysisJournal()
        j.record_outcome(40, True, 10)
        stats = j.stats_snapshot()
        assert stats['total_analyzed'] == 1
        assert stats['toxic_content_detected'] == 1
        assert stats['processing_speed'] == 26
        assert stats['accuracy_rate'] == pytest.approx(96.801)

    def test_accuracy_capped(self):
        j = AnalysisJournal()
        for _ in range(2000):
            j.record_outcome(0, False, 1)
        assert j.stats_snapshot()['accuracy_rate'] == 98.5

    def test_reset(self):
        j = AnalysisJournal()
        j.record_outcome(40, True, 10)
        j.append_sample("x", 40, 1)
        j.reset()
        assert len(j) == 0
        assert j.stats_snapshot()['total_analyzed'] == 0
        assert j.stats_snapshot()['accuracy_rate'] == 96.8

    def test_blobs_restore(self):
        j = AnalysisJournal()
        j.record_outcome(40, True, 10)
        j.append_sample("x", 40, 1)
        blobs = j.to_blobs()

        other = AnalysisJournal()
        other.load_blobs(blobs['stats'], blobs['learning'])
        assert other.stats_snapshot() == j.stats_snapshot()
        assert other.samples() == j.samples()

    def test_missing_blobs_leave_defaults(self):
        j = AnalysisJournal()
        j.load_blobs(None, None)
        assert j.stats_snapshot()['total_analyzed'] == 0
        assert len(j) == 0


# ── BLOB STORES ──────────────────────────────────────────────

@pytest.fixture(params=['memory', 'sqlite'])
def store(request, tmp_path):
    if request.param == 'memory':
        return MemoryBlobStore()
    return SqliteBlobStore(tmp_path / "blobs.db")


class TestBlobStore:
    def test_missing_key(self, store):
        assert store.get('nope') is None

    def test_put_overwrites(self, store):
        store.put('k', json.dumps({'v': 1}))
        store.put('k', json.dumps({'v': 2}))
        assert json.loads(store.get('k')) == {'v': 2}

    def test_delete(self, store):
        store.put('k', 'x')
        store.delete('k')
        store.delete('k')
        assert store.get('k') is None


class TestSqliteBlobStore:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "blobs.db"
        SqliteBlobStore(path).put('feedshield:stats:v1', '{}')
        reopened = SqliteBlobStore(path)
        assert reopened.get('feedshield:stats:v1') == '{}'
        assert reopened.keys() == ['feedshield:stats:v1']
