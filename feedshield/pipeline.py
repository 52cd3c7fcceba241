"""
feedshield/pipeline.py
Capture → score → deliver wiring.

Three narrow ports:
  CaptureSource   yields CaptureSample(text, app)
  ScoringEngine   turns each sample into an Assessment
  AssessmentSink  receives (sample, assessment) and owns user-visible action

Sources and sinks here are the in-process ones used by the CLI, the API
and tests. Platform capture (accessibility hooks, screen OCR) plugs in
by subclassing CaptureSource.
"""

from __future__ import annotations

import itertools
import json
import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Deque, Dict, Iterable, Iterator, List, Optional, Sequence, TextIO

from feedshield.errors import EngineNotInitialized
from feedshield.models.assessment import Assessment, CaptureSample
from feedshield.scorer.engine import ScoringEngine
from feedshield.storage.blob_store import BLOCKED_EVENTS_KEY, BlobStore

logger = logging.getLogger(__name__)

BLOCKED_EVENTS_CAPACITY = 500


def assessment_to_dict(assessment: Assessment) -> Dict[str, Any]:
    """JSON-ready dict. Contains no raw snippet text."""
    d = asdict(assessment)
    d['found_triggers'] = list(assessment.found_triggers)
    d['contextual_factors'] = list(assessment.contextual_factors)
    return d


# ═══════════════════════════════════════════════════════════════════════════
# SOURCES
# ═══════════════════════════════════════════════════════════════════════════

class CaptureSource(ABC):

    @abstractmethod
    def samples(self) -> Iterable[CaptureSample]:
        """Yield samples in capture order. May be unbounded."""
        ...


class ListCaptureSource(CaptureSource):
    """Fixed in-memory samples. Accepts CaptureSample or (text, app) tuples."""

    def __init__(self, items: Sequence[Any]):
        self._items = [
            i if isinstance(i, CaptureSample) else CaptureSample(text=i[0], app=i[1])
            for i in items
        ]

    def samples(self) -> Iterator[CaptureSample]:
        return iter(self._items)


class JsonlCaptureSource(CaptureSource):
    """
    One JSON object per line: {"text": "...", "app": "instagram"}.
    Blank lines are skipped. Malformed lines are logged and skipped.
    """

    def __init__(self, path: Path, default_app: str = 'unknown'):
        self.path = Path(path)
        self.default_app = default_app

    def samples(self) -> Iterator[CaptureSample]:
        with self.path.open(encoding='utf-8') as fh:
            for lineno, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    obj = json.loads(line)
                    text = obj['text']
                except (json.JSONDecodeError, KeyError, TypeError) as e:
                    logger.warning(f"{self.path.name}:{lineno} skipped — {type(e).__name__}")
                    continue
                yield CaptureSample(
                    text = str(text),
                    app  = str(obj.get('app') or self.default_app),
                    meta = {k: v for k, v in obj.items() if k not in ('text', 'app')},
                )


# ═══════════════════════════════════════════════════════════════════════════
# SINKS
# ═══════════════════════════════════════════════════════════════════════════

class AssessmentSink(ABC):

    @abstractmethod
    def deliver(self, sample: CaptureSample, assessment: Assessment) -> None:
        """
        Act on one assessment. Sinks must not raise for ordinary
        delivery problems — log and carry on.
        """
        ...

    def close(self) -> None:
        """Flush buffered output. Called once after the source is exhausted."""


class CollectingSink(AssessmentSink):
    """Keeps every (sample, assessment) pair. Handy for tests and the API."""

    def __init__(self):
        self.items: List[tuple] = []

    def deliver(self, sample: CaptureSample, assessment: Assessment) -> None:
        self.items.append((sample, assessment))


class JsonlSink(AssessmentSink):
    """Writes one assessment dict per line. The raw text is not written."""

    def __init__(self, out: TextIO):
        self.out = out

    def deliver(self, sample: CaptureSample, assessment: Assessment) -> None:
        record = assessment_to_dict(assessment)
        if sample.meta:
            record['meta'] = sample.meta
        self.out.write(json.dumps(record, ensure_ascii=False) + '\n')

    def close(self) -> None:
        self.out.flush()


class BlockedEventLog(AssessmentSink):
    """
    Remembers the newest 500 blocked assessments, newest first, and
    persists them to the blob store on flush() and close(). Event ids
    stay unique after the oldest entries are evicted. Store failures
    are logged, not raised.
    """

    def __init__(self, store: Optional[BlobStore] = None,
                 capacity: int = BLOCKED_EVENTS_CAPACITY):
        self.store = store
        self._events: Deque[Dict[str, Any]] = deque(maxlen=capacity)
        self._seq = itertools.count()
        if store is not None:
            self._load()

    def _load(self) -> None:
        try:
            raw = self.store.get(BLOCKED_EVENTS_KEY)
            if raw:
                # stored newest first; deque is oldest → newest
                self._events.extend(reversed(json.loads(raw)))
        except Exception as e:
            logger.warning(f"Blocked event log unreadable, starting empty: {e}")

    def deliver(self, sample: CaptureSample, assessment: Assessment) -> None:
        if not assessment.should_block:
            return
        ts = int(time.time() * 1000)
        self._events.append({
            'id':           f"{ts}-{next(self._seq)}",
            'timestamp':    ts,
            'app':          sample.app,
            'trigger_type': assessment.trigger_type,
            'risk_level':   assessment.risk_level,
            'confidence':   assessment.confidence,
            'score':        assessment.toxicity_score,
        })

    def events(self) -> List[Dict[str, Any]]:
        return list(reversed(self._events))

    def flush(self) -> None:
        if self.store is None:
            return
        try:
            self.store.put(BLOCKED_EVENTS_KEY, json.dumps(self.events()))
        except Exception as e:
            logger.error(f"Failed to persist blocked events: {e}", exc_info=True)

    def clear(self) -> None:
        """Drop every event, in memory and in the store."""
        self._events.clear()
        if self.store is None:
            return
        try:
            self.store.delete(BLOCKED_EVENTS_KEY)
        except Exception as e:
            logger.error(f"Failed to clear blocked events: {e}", exc_info=True)

    def close(self) -> None:
        self.flush()


# ═══════════════════════════════════════════════════════════════════════════
# RUNNER
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class PipelineSummary:
    analyzed:  int = 0
    blocked:   int = 0
    by_type:   Dict[str, int] = field(default_factory=dict)


def run_pipeline(
    source:      CaptureSource,
    engine:      ScoringEngine,
    sinks:       Sequence[AssessmentSink],
    progress_cb: Optional[Callable[[int, Assessment], None]] = None,
) -> PipelineSummary:
    """
    Drain the source through the engine into every sink.
    EngineNotInitialized stops the run; sinks are still closed.
    progress_cb: optional callable(count, assessment) for CLI output.
    """
    summary = PipelineSummary()
    try:
        for sample in source.samples():
            assessment = engine.assess(sample.text, sample.app)
            summary.analyzed += 1
            if assessment.should_block:
                summary.blocked += 1
                key = assessment.trigger_type or 'Unlabeled'
                summary.by_type[key] = summary.by_type.get(key, 0) + 1
            for sink in sinks:
                sink.deliver(sample, assessment)
            if progress_cb:
                progress_cb(summary.analyzed, assessment)
    except EngineNotInitialized:
        logger.error("Pipeline stopped: engine not initialized")
        raise
    finally:
        for sink in sinks:
            sink.close()
    logger.info(f"Pipeline complete: {summary.analyzed} analyzed, {summary.blocked} blocked")
    return summary
