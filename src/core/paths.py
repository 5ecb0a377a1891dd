from __future__ import annotations

import logging
import os
from pathlib import Path

from PySide6.QtCore import QStandardPaths


APP_NAME = "BoopPony"
BASE_DIR_ENV = "BOOP_PONY_BASE_DIR"

logger = logging.getLogger("BoopPony")


def get_base_dir() -> Path:
    """Read-only install root: ``BOOP_PONY_BASE_DIR`` if set, else the project root."""
    override = os.environ.get(BASE_DIR_ENV, "").strip()
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2]


def get_user_data_dir() -> Path:
    """Writable per-user directory, created on demand."""
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    target = Path(location) if location else Path.home() / ".local" / "share"
    # Without application metadata Qt returns the generic data root.
    if target.name.lower() != APP_NAME.lower():
        target = target / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_log_dir() -> Path:
    target = get_user_data_dir() / "logs"
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_ponies_dir(configured: str = "") -> Path:
    """Pony pack directory: configured path if set, else bundled ``assets/ponies``."""
    if configured.strip():
        return Path(configured).expanduser()
    return get_base_dir() / "assets" / "ponies"


def resolve_config_path() -> Path:
    """
    Return the user's ``config.json``.

    On first run the bundled ``config/config.json`` is copied there. The path
    is returned even when nothing could be copied; loading then uses defaults.
    """
    user_cfg = get_user_data_dir() / "config.json"
    if user_cfg.exists():
        return user_cfg

    bundled = get_base_dir() / "config" / "config.json"
    if bundled.exists():
        try:
            user_cfg.write_text(bundled.read_text(encoding="utf-8"), encoding="utf-8")
        except OSError as exc:
            logger.warning("[Paths] could not copy bundled config to %s: %s", user_cfg, exc)
    return user_cfg
