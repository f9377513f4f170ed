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

# File: serial_obd/codec.py
"""
Command encoder and response decoder.

encode() turns a symbolic PID name into the ASCII-hex request the adapter
expects; decode() turns the text of one adapter reply into a Reply.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import MalformedFrame, UnknownPid
from .pids import PID_TABLE, PidTable

logger = logging.getLogger(__name__)

NO_DATA = "NO DATA"
OK = "OK"
SENTINELS = (NO_DATA, OK)

_WHITESPACE = re.compile(r"\s+")
_HEX = re.compile(r"^[0-9A-Fa-f]*$")


@dataclass(slots=True, frozen=True)
class Reply:
    """
    Result of decoding one adapter frame.

    Sentinel replies ('OK', 'NO DATA') carry only `value`. PID replies carry
    `mode` and `pid` as received and, when the pair is in the table, `name`
    and the decoded `value`.
    """
    value: Any = None
    mode: Optional[str] = None
    pid: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_sentinel(self) -> bool:
        return self.mode is None and self.value in SENTINELS

    @property
    def is_partial(self) -> bool:
        """Reply whose mode/pid pair was not recognised."""
        return self.mode is not None and self.name is None

    def as_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in (("mode", self.mode), ("pid", self.pid),
                                  ("name", self.name), ("value", self.value))
                if v is not None}


def encode(name: str, table: PidTable = PID_TABLE) -> str:
    """
    Find the request string for a PID name.
    @raise UnknownPid: name is not in the table
    """
    definition = table.lookup_by_name(name)
    if definition is None:
        raise UnknownPid(name)
    return definition.command


def decode(hex_text: str, table: PidTable = PID_TABLE) -> Reply:
    """
    Parse the hexadecimal text of one reply, e.g. '41 0D 32'.
    @raise MalformedFrame: odd length, non-hex text, fewer data bytes than
                           the matched PID expects, or a decode rule that fails

    Replies to mode-only requests (43, 47, 4A) are looked up by their first
    two bytes like any other reply, so they come back partial; apply the
    entry's rule (e.g. decoders.dtc_list) to the data bytes directly.
    """
    if hex_text in SENTINELS:
        return Reply(value=hex_text)

    compact = _WHITESPACE.sub("", hex_text)
    if not compact:
        raise MalformedFrame("Empty reply")
    if not _HEX.match(compact):
        raise MalformedFrame(f"Non-hex reply: {hex_text!r}")
    if len(compact) % 2:
        raise MalformedFrame(f"Odd number of hex digits: {hex_text!r}")

    data = [compact[i:i + 2].upper() for i in range(0, len(compact), 2)]
    mode = data[0]
    if len(data) < 2:
        return Reply(mode=mode)

    pid = data[1]
    definition = table.lookup_by_mode_and_pid(mode, pid)
    if definition is None:
        logger.debug("No PID definition for mode %s pid %s", mode, pid)
        return Reply(mode=mode, pid=pid)

    payload = data[2:2 + definition.byte_count]
    if len(payload) < definition.byte_count:
        raise MalformedFrame(
            f"{definition.name} expects {definition.byte_count} byte(s), got {len(payload)}: {hex_text!r}"
        )
    try:
        value = definition.decode(*payload)
    except Exception as e:
        raise MalformedFrame(f"{definition.name} could not decode {hex_text!r}: {e}") from e
    return Reply(value=value, mode=mode, pid=pid, name=definition.name)
