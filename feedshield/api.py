"""
feedshield/api.py
─────────────────────────────────────────────────────────────────────────────
FeedShield — Dual-mode API layer

TWO USAGE MODES:
  1. Importable module (capture services, overlay clients):
         from feedshield.api import FeedShieldAPI
         api = FeedShieldAPI(db_path=Path("feedshield.db"))
         result = api.assess("Minha vida é perfeita! #blessed", "instagram")

  2. FastAPI HTTP server:
         python -m feedshield.api                 # default: port 8766
         python -m feedshield.api --port 9000
         uvicorn --factory feedshield.api:create_app --port 8766

ENDPOINTS:
  POST   /assess     — score one snippet, returns the assessment
  GET    /config     — full configuration snapshot
  POST   /config     — partial configuration update
  POST   /triggers   — add a trigger phrase
  DELETE /triggers   — remove a trigger phrase
  GET    /stats      — analysis stats
  GET    /database   — lexicon counts + version
  GET    /events     — blocked event log, newest first
  POST   /reset      — clear stats, journal + blocked events (lexicon kept)
  POST   /sync       — flush stats, journal, config + events to the blob store
  GET    /export     — hashed snapshot of everything above
  GET    /health     — liveness

PRIVACY NOTE:
  Snippets are scored in memory and never written to disk in full.
  The learning journal keeps 100 characters per sample.
  The server binds to 127.0.0.1 only.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

import feedshield
from feedshield.config import apply_config, load_config
from feedshield.errors import EngineNotInitialized
from feedshield.export import build_export
from feedshield.models.assessment import CaptureSample
from feedshield.pipeline import BlockedEventLog, assessment_to_dict
from feedshield.scorer.engine import ScoringEngine
from feedshield.settings import ConfigurationUpdate
from feedshield.storage.blob_store import BlobStore, SqliteBlobStore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS
# ═══════════════════════════════════════════════════════════════════════════

class FeedShieldAPI:
    """
    Engine + blob store + blocked event log behind one object.
    No HTTP layer required — import and call directly.

    Usage:
        api     = FeedShieldAPI(db_path=Path("/sdcard/feedshield.db"))
        result  = api.assess("olhem meu carro novo 🚗", "com.instagram.android")
        stats   = api.get_stats()
        ok      = await api.synchronize()
    """

    def __init__(
        self,
        db_path: Optional[Path]      = Path("feedshield.db"),
        store:   Optional[BlobStore] = None,
        config:  Optional[Dict[str, Any]] = None,
    ):
        if store is None and db_path is not None:
            store = SqliteBlobStore(Path(db_path))
        self.store  = store
        self.engine = ScoringEngine(store=store)
        if config:
            apply_config(self.engine, config)
        self.engine.restore()           # saved state overrides the config file
        self.blocked_log = BlockedEventLog(store=store)

    # ── SCORING ───────────────────────────────────────────────────────────

    def assess(self, text: str, app: str = "unknown") -> Dict[str, Any]:
        assessment = self.engine.assess(text, app)
        self.blocked_log.deliver(CaptureSample(text=text, app=app), assessment)
        return assessment_to_dict(assessment)

    # ── CONFIGURATION ─────────────────────────────────────────────────────

    def get_config(self) -> Dict[str, Any]:
        return self.engine.get_configuration()

    def update_config(self, update: Dict[str, Any]) -> Dict[str, Any]:
        self.engine.update_configuration(ConfigurationUpdate.from_dict(update))
        return self.engine.get_configuration()

    def add_trigger(self, category: str, phrase: str) -> bool:
        return self.engine.add_trigger(category, phrase)

    def remove_trigger(self, category: str, phrase: str) -> bool:
        return self.engine.remove_trigger(category, phrase)

    # ── OBSERVABILITY ─────────────────────────────────────────────────────

    def get_stats(self) -> Dict[str, Any]:
        return self.engine.get_analysis_stats()

    def get_database_info(self) -> Dict[str, Any]:
        return self.engine.get_database_info()

    def get_events(self, limit: int = 100) -> List[Dict[str, Any]]:
        return self.blocked_log.events()[:max(int(limit), 0)]

    def export(self) -> Dict[str, Any]:
        return build_export(self.engine, self.blocked_log.events())

    # ── LIFECYCLE ─────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Clear stats, journal and the blocked event log. Lexicon and settings are kept."""
        self.engine.reset()
        self.blocked_log.clear()

    async def synchronize(self) -> bool:
        ok = await self.engine.synchronize()
        await asyncio.to_thread(self.blocked_log.flush)
        return ok


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# ═══════════════════════════════════════════════════════════════════════════

class AssessRequest(BaseModel):
    text: str = ""
    app:  str = "unknown"


class TriggerRequest(BaseModel):
    category: str
    phrase:   str = Field(min_length=1)


def _build_app(
    db_path: Optional[Path] = Path("feedshield.db"),
    api:     Optional[FeedShieldAPI] = None,
) -> FastAPI:
    """
    Build and return the FastAPI application instance.
    Pass api= to serve an existing FeedShieldAPI (tests do this).
    """
    _api = api or FeedShieldAPI(db_path=db_path, config=load_config(Path.cwd()))

    _app = FastAPI(
        title       = "FeedShield API",
        description = "Rule-based psychological risk scoring for social-media snippets",
        version     = feedshield.__version__,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:8766",
            "http://127.0.0.1",
            "http://127.0.0.1:8766",
        ],
        allow_methods     = ["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )
    _app.state.api = _api

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.post("/assess", summary="Score one snippet")
    def assess(req: AssessRequest):
        try:
            return _api.assess(req.text, req.app)
        except EngineNotInitialized as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except Exception as exc:
            logger.error(f"Assess endpoint error: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail="Assessment failed")

    @_app.get("/config", summary="Configuration snapshot")
    def get_config():
        return _api.get_config()

    @_app.post("/config", summary="Partial configuration update")
    def update_config(update: Dict[str, Any] = Body(default_factory=dict)):
        """
        Body keys: lexicon (category → phrases, replaces the category),
        sensitivity (category → 0–100), advanced (flag → bool).
        """
        return {"status": "ok", "config": _api.update_config(update or {})}

    @_app.post("/triggers", summary="Add trigger phrase")
    def add_trigger(req: TriggerRequest):
        added = _api.add_trigger(req.category, req.phrase)
        return {"status": "ok", "changed": added}

    @_app.delete("/triggers", summary="Remove trigger phrase")
    def remove_trigger(req: TriggerRequest):
        removed = _api.remove_trigger(req.category, req.phrase)
        return {"status": "ok", "changed": removed}

    @_app.get("/stats", summary="Analysis stats")
    def get_stats():
        return _api.get_stats()

    @_app.get("/database", summary="Lexicon info")
    def get_database():
        return _api.get_database_info()

    @_app.get("/events", summary="Blocked event log")
    def get_events(limit: int = 100):
        events = _api.get_events(limit=min(max(limit, 1), 500))
        return {"count": len(events), "events": events}

    @_app.post("/reset", summary="Reset stats and journal")
    def reset():
        _api.reset()
        return {"status": "ok"}

    @_app.post("/sync", summary="Flush stats to storage")
    async def sync():
        ok = await _api.synchronize()
        return {"status": "ok" if ok else "skipped"}

    @_app.get("/export", summary="Hashed state export")
    def export():
        return _api.export()

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":      "ok",
            "initialized": _api.engine.is_initialized,
            "version":     feedshield.__version__,
        }

    return _app


def create_app() -> FastAPI:
    """uvicorn factory: uvicorn --factory feedshield.api:create_app"""
    cfg = load_config(Path.cwd())
    return _build_app(db_path=Path(cfg["db_path"]))


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT — python -m feedshield.api
# ═══════════════════════════════════════════════════════════════════════════

def main():
    import argparse

    import uvicorn

    cfg = load_config(Path.cwd())
    parser = argparse.ArgumentParser(
        prog        = "feedshield-api",
        description = "FeedShield API Server — scoring on localhost",
    )
    parser.add_argument("--port", type=int, default=cfg["port"],
                        help=f"Port to bind (default: {cfg['port']})")
    parser.add_argument("--db",   type=str, default=cfg["db_path"],
                        help=f"Blob store path (default: {cfg['db_path']})")
    parser.add_argument("--host", type=str, default=cfg["host"],
                        help="Host to bind — DO NOT change to 0.0.0.0 on shared networks")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    server_app = _build_app(db_path=Path(args.db))
    logger.info(f"FeedShield API v{feedshield.__version__} on http://{args.host}:{args.port}")
    uvicorn.run(server_app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
