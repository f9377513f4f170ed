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

# ------------------------------------------------------------------
#  transport.py - pyserial link to the adapter
# ------------------------------------------------------------------
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional

import serial  # pyserial

from .errors import TransportError

LOG = logging.getLogger("serial_obd.transport")


class SerialTransport:
    """
    Thin serial link:
      • non-blocking reads (timeout=0) polled from asyncio
      • ASCII writes, the caller supplies any terminator

    Notes:
      - Keeps a single serial port open.
      - pyserial is sync; idle reads back off with a short asyncio sleep.
    """

    def __init__(
        self,
        port: str,
        baud: int = 115200,
        *,
        write_timeout: float = 2.0,
        idle_sleep_s: float = 0.01,
    ) -> None:
        self.port = port
        self.baud = baud
        self.write_timeout = write_timeout
        self.idle_sleep_s = idle_sleep_s
        self._ser: Optional[serial.Serial] = None

    # ----------------------- lifecycle -----------------------

    @property
    def is_open(self) -> bool:
        return self._ser is not None and self._ser.is_open

    def open(self) -> None:
        if self.is_open:
            return
        try:
            self._ser = serial.Serial(
                self.port,
                self.baud,
                timeout=0,         # non-blocking reads; we handle timing
                write_timeout=self.write_timeout,
            )
            # Flush any stale data
            self._ser.reset_input_buffer()
            self._ser.reset_output_buffer()
        except serial.SerialException as e:
            self._ser = None
            raise TransportError(f"Failed to open {self.port}: {e}") from e
        LOG.info("Serial port [%s] opened @ %d", self.port, self.baud)

    def close(self) -> None:
        if self._ser and self._ser.is_open:
            try:
                self._ser.close()
            finally:
                self._ser = None
                LOG.info("Serial port [%s] was closed", self.port)

    # ----------------------- I/O -----------------------------

    def write(self, text: str) -> None:
        ser = self._ensure_open()
        try:
            ser.write(text.encode("ascii"))
            ser.flush()
        except serial.SerialException as e:
            raise TransportError(f"Write failed for {text!r}: {e}") from e

    async def chunks(self) -> AsyncIterator[str]:
        """Yield text as it arrives until the port is closed."""
        while self.is_open:
            ser = self._ensure_open()
            try:
                chunk = ser.read(ser.in_waiting or 1)
            except serial.SerialException as e:
                raise TransportError(f"Read failed: {e}") from e

            if chunk:
                yield chunk.decode("ascii", errors="ignore")
            else:
                await asyncio.sleep(self.idle_sleep_s)

    # ----------------------- internals -----------------------

    def _ensure_open(self) -> serial.Serial:
        if self._ser is None or not self._ser.is_open:
            raise TransportError("Serial port is not open")
        return self._ser
