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

# File: serial_obd/config.py
# serial-obd - runtime configuration

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# allows overrides from a .env file
load_dotenv()


# -------- helpers --------
def _env(name: str, default: str) -> str:
    v = os.getenv(name)
    return v if v not in (None, "") else default

def _env_int(name: str, default: int) -> int:
    try:
        return int(_env(name, str(default)))
    except ValueError:
        return default

def _env_float(name: str, default: float) -> float:
    try:
        return float(_env(name, str(default)))
    except ValueError:
        return default

def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, str(default)).strip().lower()
    return v in ("1", "true", "yes", "y", "on") if v else default


# ---- Transport / Link ----
# Linux Bluetooth: "/dev/rfcomm0", USB: "/dev/ttyUSB0", Windows: "COM5"
SERIAL_PORT     = _env("SERIAL_PORT", "/dev/rfcomm0")
BAUD_RATE       = _env_int("BAUD_RATE", 115200)
WRITE_TIMEOUT_S = _env_float("WRITE_TIMEOUT_S", 2.0)

# ---- Adapter framing ----
PROMPT_CHAR = _env("PROMPT_CHAR", ">")   # ELM327 prints this after every reply

# ---- Polling ----
POLL_INTERVAL_MS = _env_int("POLL_INTERVAL_MS", 3000)

# ---- Logging ----
DEBUG_MODE = _env_bool("DEBUG_MODE", False)
LOG_DIR    = Path(_env("LOG_DIR", "logs")).expanduser()
LOG_LEVEL  = "DEBUG" if DEBUG_MODE else "INFO"
LOG_BACKUP_DAYS = _env_int("LOG_BACKUP_DAYS", 7)


# ----------------------------------------------------------
#  Reader configuration
# ----------------------------------------------------------
@dataclass(slots=True, frozen=True)
class ReaderSettings:
    """
    Connection and polling configuration for one reader instance.
    - port: e.g. '/dev/rfcomm0' (Linux) or 'COM5' (Windows)
    - baud: typical ELM327 38400/115200/500000
    - poll_interval_ms: period of the poller timer
    - prompt: adapter prompt character separating replies
    - write_timeout_s: pyserial write timeout
    """
    port: str = SERIAL_PORT
    baud: int = BAUD_RATE
    poll_interval_ms: int = POLL_INTERVAL_MS
    prompt: str = PROMPT_CHAR
    write_timeout_s: float = WRITE_TIMEOUT_S

    def __post_init__(self) -> None:
        if not self.port:
            raise ValueError("port is required")
        if self.baud <= 0:
            raise ValueError("baud must be > 0")
        if self.poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be > 0")
        if len(self.prompt) != 1:
            raise ValueError("prompt must be a single character")
        if self.write_timeout_s <= 0:
            raise ValueError("write_timeout_s must be > 0")

    @classmethod
    def from_env(cls) -> "ReaderSettings":
        """Re-read the environment (useful after os.environ changes)."""
        return cls(
            port=_env("SERIAL_PORT", "/dev/rfcomm0"),
            baud=_env_int("BAUD_RATE", 115200),
            poll_interval_ms=_env_int("POLL_INTERVAL_MS", 3000),
            prompt=_env("PROMPT_CHAR", ">"),
            write_timeout_s=_env_float("WRITE_TIMEOUT_S", 2.0),
        )
