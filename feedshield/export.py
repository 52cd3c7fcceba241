"""
feedshield/export.py
Portable snapshot of engine state for backup or support requests.

Includes stats, configuration, lexicon info and the blocked event log,
plus a SHA-256 over the canonical payload. No raw snippet text —
learning samples are summarized as counts only.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import feedshield

EXPORT_FORMAT_VERSION = "1.0"


def _content_hash(payload: Dict[str, Any]) -> str:
    """SHA-256 of canonical JSON serialization of payload (no hash field)."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def build_export(
    engine,
    blocked_events: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    payload = {
        "export_format_version": EXPORT_FORMAT_VERSION,
        "exported_at":           datetime.now(timezone.utc).isoformat(),
        "engine_version":        feedshield.__version__,
        "stats":                 engine.get_analysis_stats(),
        "configuration":         engine.get_configuration(),
        "database":              engine.get_database_info(),
        "learning_samples":      len(engine.journal),
        "blocked_events":        list(blocked_events or []),
    }
    return {**payload, "content_hash_sha256": _content_hash(payload)}


def verify_export(export: Dict[str, Any]) -> bool:
    """True if the stored hash matches the payload."""
    payload = {k: v for k, v in export.items() if k != "content_hash_sha256"}
    return export.get("content_hash_sha256") == _content_hash(payload)
