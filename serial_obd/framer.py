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

# File: serial_obd/framer.py
"""
Reassembles the adapter's chunked serial output into frames.

The adapter prints its prompt character after every reply, so the stream
looks like:

    010D\r\n41 0D 32\r\n\r\n>

Text between two prompts is one frame; the reply itself sits between the
last two CR-LF pairs (the first line is the echoed request when echo is on).
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Union

from .codec import Reply, decode
from .errors import MalformedFrame
from .pids import PID_TABLE, PidTable

logger = logging.getLogger(__name__)

CRLF = "\r\n"


def extract_payload(segment: str) -> str:
    """
    Return the reply line of one prompt-delimited segment.
    @raise MalformedFrame: segment holds no CR-LF terminator
    """
    end = segment.rfind(CRLF)
    if end < 0:
        raise MalformedFrame(f"No line terminator in {segment!r}")
    body = segment[:end]
    # blank lines between the reply and the prompt
    while body.endswith(CRLF):
        body = body[:-len(CRLF)]
    start = body.rfind(CRLF)
    if start >= 0:
        body = body[start + len(CRLF):]
    return body.strip()


class FrameReader:
    """
    Stateful splitter: feed it raw chunks, get decoded replies back.

    Text after the last prompt is incomplete and stays in `buffer` until a
    later chunk closes it.
    """

    def __init__(self, table: PidTable = PID_TABLE, prompt: str = ">"):
        if len(prompt) != 1:
            raise ValueError("prompt must be a single character")
        self.table = table
        self.prompt = prompt
        self.buffer = ""

    def reset(self) -> None:
        self.buffer = ""

    def feed(self, data: Union[str, bytes]) -> List[Reply]:
        """Consume one chunk; return the replies it completed, in order."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("ascii", errors="ignore")

        current = self.buffer + data
        segments = current.split(self.prompt)
        if len(segments) < 2:
            self.buffer = current
            return []

        *complete, self.buffer = segments
        replies: List[Reply] = []
        for segment in complete:
            if not segment:
                continue
            reply = self._parse(segment)
            if reply is not None:
                replies.append(reply)
        return replies

    def frames(self, chunks: Iterable[Union[str, bytes]]) -> Iterator[Reply]:
        """Lazily yield replies from a stream of chunks."""
        for chunk in chunks:
            yield from self.feed(chunk)

    def _parse(self, segment: str) -> Optional[Reply]:
        try:
            return decode(extract_payload(segment), self.table)
        except MalformedFrame as e:
            logger.warning("Error in parsing: %s", e)
            return None
