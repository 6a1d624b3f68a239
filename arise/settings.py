"""Application settings with JSON persistence.

Settings are stored at:
    ~/.arise/settings.json

Usage::

    settings = load_settings()
    settings.recovery_max_pause_seconds = 600
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

# Shared with database/db.py
APP_SUPPORT_DIR = Path.home() / ".arise"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable tunables."""

    # ── recovery quest ────────────────────────────────────────────────
    recovery_required_seconds: int = 8 * 3600
    recovery_max_pause_seconds: int = 5 * 60
    recovery_health: int = 50

    # ── timer ─────────────────────────────────────────────────────────
    tick_interval_ms: int = 1000
    sleep_threshold_seconds: float = 5.0   # 5x the tick interval

    # ── diagnostics ───────────────────────────────────────────────────
    log_level: str = "INFO"


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
