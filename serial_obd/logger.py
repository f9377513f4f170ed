# ⚠️ DISCLAIMER
# This software communicates directly with live vehicle systems.
# You use this software entirely at your own risk.
#
# The developers, contributors, and any associated parties accept no liability for:
# - Damage to vehicles, ECUs, batteries, or electronics
# - Data loss, unintended resets, or corrupted configurations
# - Physical injury, legal consequences, or financial loss
#
# This tool is intended only for qualified professionals who
# understand the risks of direct OBD/CAN access.

# File: serial_obd/logger.py
"""
Unified logging for serial-obd applications.

- Creates the log directory if missing
- Console: INFO by default (DEBUG if DEBUG_MODE is set)
- File: timed rotating logs (daily), keeps LOG_BACKUP_DAYS days, full DEBUG detail

Library modules only call logging.getLogger(__name__); handlers are
attached once by the application via setup_logging().
"""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from . import config

LOG_FILE_NAME = "serial_obd.log"

# Internal module-level guard so we don't add handlers twice
_INITIALIZED = False


def _ensure_log_dir(log_dir: Path | str) -> Path:
    path = Path(log_dir).expanduser().resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def _build_handlers(log_path: Path, debug: bool, backups: int) -> list[logging.Handler]:
    """Console (terse, level from debug) and daily-rotated file (always DEBUG)."""
    console = logging.StreamHandler()
    console.set_name("console")
    console.setLevel(logging.DEBUG if debug else logging.INFO)
    console.setFormatter(logging.Formatter("%(asctime)s %(levelname).1s [%(name)s] %(message)s", "%H:%M:%S"))

    rotating = TimedRotatingFileHandler(
        log_path / LOG_FILE_NAME, when="midnight", backupCount=backups, encoding="utf-8", delay=True
    )
    rotating.set_name("file")
    rotating.setLevel(logging.DEBUG)
    rotating.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-7s %(name)s (%(module)s:%(lineno)d) %(message)s"
    ))
    return [console, rotating]


def setup_logging(log_dir: Path | str | None = None, debug: bool | None = None) -> None:
    """
    Idempotent setup: safe to call multiple times.
    Attaches console + rotating file handlers to the root logger.
    """
    global _INITIALIZED
    if _INITIALIZED:
        return

    debug = config.DEBUG_MODE if debug is None else debug
    path = _ensure_log_dir(config.LOG_DIR if log_dir is None else log_dir)
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # let handlers filter levels

    # Remove any pre-existing handlers to avoid duplicates (e.g., when reloading)
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in _build_handlers(path, debug, config.LOG_BACKUP_DAYS):
        root.addHandler(h)

    _INITIALIZED = True


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Returns a logger with unified configuration.
    Ensures logging is configured before returning the logger.
    """
    setup_logging()
    return logging.getLogger(name if name else "serial_obd")
