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

# File: serial_obd/reader.py
"""
OBDReader - one adapter session.

Ties the pieces together over two channels:
  • inbound:  raw chunks -> FrameReader -> asyncio.Queue of Reply
  • outbound: command strings + CR -> sink (usually SerialTransport.write)

Each reader owns its own frame buffer, poll set and timer.

Usage (example):
    reader = OBDReader()
    await reader.connect()
    reader.add_poller("vss")
    reader.start_polling()
    async for reply in reader.replies():
        print(reply.name, reply.value)
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, List, Optional, Tuple, Union

from .codec import Reply, encode
from .config import ReaderSettings
from .errors import OBDError, TransportError
from .framer import FrameReader
from .pids import PID_TABLE, PidTable
from .poller import PollScheduler
from .transport import SerialTransport

logger = logging.getLogger(__name__)

TERMINATOR = "\r"
REPLY_QUEUE_SIZE = 256


class OBDReader:
    def __init__(
        self,
        sink: Optional[Callable[[str], None]] = None,
        *,
        table: PidTable = PID_TABLE,
        settings: Optional[ReaderSettings] = None,
        queue_size: int = REPLY_QUEUE_SIZE,
    ) -> None:
        if queue_size <= 0:
            raise ValueError("queue_size must be > 0")
        self.settings = settings or ReaderSettings()
        self.table = table
        self.sink = sink
        self.connected = False

        self.framer = FrameReader(table, prompt=self.settings.prompt)
        self.scheduler = PollScheduler(self.write, self.settings.poll_interval_ms, table)

        # None marks the end of the stream
        self._queue: asyncio.Queue[Optional[Reply]] = asyncio.Queue(maxsize=queue_size)
        self._stream_open = False
        self._dropped = 0
        self._transport: Optional[SerialTransport] = None
        self._pump: Optional[asyncio.Task] = None

    # ----------------------- connection ----------------------

    async def connect(self, transport: Optional[SerialTransport] = None) -> None:
        """Open the transport and start feeding its output into the framer."""
        if self.connected:
            return
        if transport is None:
            transport = SerialTransport(
                self.settings.port,
                self.settings.baud,
                write_timeout=self.settings.write_timeout_s,
            )
        transport.open()
        self._transport = transport
        self.sink = transport.write
        self.framer.reset()
        # replies or an end marker left over from an earlier session
        while not self._queue.empty():
            self._queue.get_nowait()
        self._stream_open = True
        self._pump = asyncio.get_running_loop().create_task(self._pump_chunks(transport))
        self.connected = True
        logger.info("connected")

    async def disconnect(self) -> None:
        self.stop_polling()
        pump, self._pump = self._pump, None
        if pump is not None:
            pump.cancel()
            try:
                await pump
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Reader pump failed")
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            self.sink = None
        self.connected = False
        self._end_stream()

    async def _pump_chunks(self, transport: SerialTransport) -> None:
        try:
            async for chunk in transport.chunks():
                self.data_received(chunk)
        except TransportError as e:
            logger.error("Transport failed: %s", e)
        finally:
            self.connected = False
            self._end_stream()

    # ----------------------- outbound ------------------------

    def write(self, message: str) -> None:
        """Send a PID or AT command. Without \\r or \\n!"""
        if self.sink is None:
            raise OBDError("No output sink; call connect() first")
        self.sink(message + TERMINATOR)

    def request_value_by_name(self, name: str) -> None:
        """@raise UnknownPid: nothing is written"""
        self.write(encode(name, self.table))

    # ----------------------- pollers -------------------------

    def add_poller(self, name: str) -> bool:
        return self.scheduler.add_poller(name)

    def remove_poller(self, name: str) -> bool:
        return self.scheduler.remove_poller(name)

    def remove_all_pollers(self) -> None:
        self.scheduler.remove_all_pollers()

    def write_pollers(self) -> None:
        self.scheduler.write_pollers()

    def start_polling(self) -> None:
        self.scheduler.start_polling()

    def stop_polling(self) -> None:
        self.scheduler.stop_polling()

    @property
    def pollers(self) -> Tuple[str, ...]:
        return self.scheduler.pollers

    # ----------------------- inbound -------------------------

    def data_received(self, data: Union[str, bytes]) -> List[Reply]:
        """Feed one raw chunk; completed replies are also published on replies()."""
        replies = self.framer.feed(data)
        for reply in replies:
            self._publish(reply)
        return replies

    async def replies(self) -> AsyncIterator[Reply]:
        """
        Replies in arrival order. Stop iterating to unsubscribe.
        Ends when the connection drops or disconnect() is called.
        """
        while True:
            reply = await self._queue.get()
            if reply is None:
                return
            yield reply

    def _publish(self, item: Optional[Reply]) -> None:
        # bounded: with nobody consuming, the oldest reply goes first
        if self._queue.full():
            self._queue.get_nowait()
            self._dropped += 1
            if self._dropped == 1 or self._dropped % 100 == 0:
                logger.warning("Reply queue full (%d), %d oldest replies dropped",
                               self._queue.maxsize, self._dropped)
        self._queue.put_nowait(item)

    def _end_stream(self) -> None:
        if self._stream_open:
            self._stream_open = False
            self._publish(None)
