"""
feedshield/config.py
JSON config persisted to feedshield_config.json. Missing or broken
files fall back to defaults so the engine always starts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from feedshield.settings import ConfigurationUpdate

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "feedshield_config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "db_path": "feedshield.db",
    "host": "127.0.0.1",
    "port": 8766,
    "global_sensitivity": None,     # 25–100, scales every category
    "sensitivity": {},              # per-category overrides
    "advanced": {},                 # feature flag overrides
    "custom_triggers": {},          # category → phrases to add
    "removed_triggers": {},         # category → phrases to drop
    "auto_sync_every": 50,          # assessments between CLI syncs; 0 disables
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from feedshield_config.json. Returns defaults if missing."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to feedshield_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def build_update(config: Dict[str, Any]) -> ConfigurationUpdate:
    """Sensitivity and advanced fragments from a loaded config."""
    return ConfigurationUpdate(
        sensitivity = dict(config.get("sensitivity") or {}),
        advanced    = dict(config.get("advanced") or {}),
    )


def apply_config(engine, config: Dict[str, Any]) -> None:
    """
    Apply a loaded config to an engine, in order:
    global sensitivity → per-category overrides → flags → trigger edits.
    """
    if config.get("global_sensitivity") is not None:
        engine.set_sensitivity(int(config["global_sensitivity"]))
    update = build_update(config)
    if not update.is_empty():
        engine.update_configuration(update)
    for category, phrases in (config.get("custom_triggers") or {}).items():
        for phrase in phrases:
            engine.add_trigger(category, phrase)
    for category, phrases in (config.get("removed_triggers") or {}).items():
        for phrase in phrases:
            engine.remove_trigger(category, phrase)
    logger.info("Config applied to engine")
