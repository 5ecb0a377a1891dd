from __future__ import annotations

import logging
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

LOGGER_NAME = "BoopPony"
LOG_FILE_NAME = "app.log"

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

_qt_bridge_lock = threading.Lock()
_qt_bridge_installed = False
_qt_bridge_logger: logging.Logger | None = None


def _qt_message_handler(mode, context, message: str) -> None:
    logger = _qt_bridge_logger
    if logger is None:
        return
    category = str(getattr(context, "category", "") or "").strip()
    prefix = f"[Qt:{category}] " if category else "[Qt] "
    logger.log(_QT_LEVELS.get(mode, logging.INFO), "%s%s", prefix, message)


def _install_qt_message_bridge(logger: logging.Logger) -> None:
    global _qt_bridge_installed, _qt_bridge_logger
    with _qt_bridge_lock:
        _qt_bridge_logger = logger
        if _qt_bridge_installed:
            return
        qInstallMessageHandler(_qt_message_handler)
        _qt_bridge_installed = True


def setup_logger(log_dir: Path, debug: bool = False) -> logging.Logger:
    """
    Configure the rotating ``BoopPony`` file logger.

    Safe to call repeatedly; handlers are only attached once.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    if not logger.handlers:
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

        if debug:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG)
            console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            logger.addHandler(console_handler)

    _install_qt_message_bridge(logger)
    return logger
