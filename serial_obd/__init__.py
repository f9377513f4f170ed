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

"""OBD-II over ELM327-style serial adapters: framing, PID codec and polling."""

from .codec import NO_DATA, OK, Reply, decode, encode
from .errors import MalformedFrame, OBDError, TransportError, UnknownPid
from .framer import FrameReader
from .pids import PID_TABLE, PidDefinition, PidTable
from .poller import PollScheduler
from .reader import OBDReader

__version__ = "0.3.0"

__all__ = [
    "NO_DATA",
    "OK",
    "PID_TABLE",
    "FrameReader",
    "MalformedFrame",
    "OBDError",
    "OBDReader",
    "PidDefinition",
    "PidTable",
    "PollScheduler",
    "Reply",
    "TransportError",
    "UnknownPid",
    "decode",
    "encode",
]
