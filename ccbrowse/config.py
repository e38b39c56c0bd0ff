from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

SETTINGS_FILE = "ccbrowse.settings.json"
CLAUDE_DIR_ENV = "CCBROWSE_CLAUDE_DIR"

DEFAULTS: Dict[str, Any] = {
    "changelog": {
        "url": "https://raw.githubusercontent.com/anthropics/claude-code/main/CHANGELOG.md",
        "timeout": 30.0,
    },
    "claudeDir": "~/.claude",
    "messages": {
        "maxProjects": 5,
        "maxFilesPerProject": 5,
        "maxPerFile": 10,
        "limit": 50,
        "previewLength": 100,
    },
}


def load_settings(cwd: Path | None = None) -> Dict[str, Any]:
    cwd = cwd or Path.cwd()
    settings = _merge(DEFAULTS, {})
    cfg_path = cwd / SETTINGS_FILE
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")
            settings = _merge(DEFAULTS, data)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", cfg_path, exc)
    env_dir = os.getenv(CLAUDE_DIR_ENV)
    if env_dir:
        settings = _merge(settings, {"claudeDir": env_dir})
    return settings


def claude_dir(settings: Dict[str, Any]) -> Path:
    return Path(settings.get("claudeDir") or DEFAULTS["claudeDir"]).expanduser()


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: _merge(v, {}) if isinstance(v, dict) else v for k, v in base.items()}
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out
