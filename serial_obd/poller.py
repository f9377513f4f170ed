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

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from .codec import encode
from .errors import UnknownPid
from .pids import PID_TABLE, PidTable


class PollScheduler:
    """
    Re-sends a set of PID requests on a fixed period.

    Requests are kept in insertion order and are not deduplicated: adding the
    same name twice sends it twice per tick.
    """

    def __init__(self, write: Callable[[str], None],
                 interval_ms: int = 3000,
                 table: PidTable = PID_TABLE):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self.write = write
        self.interval_ms = interval_ms
        self.table = table
        self.logger = logging.getLogger(__name__)

        self._pollers: List[str] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def pollers(self) -> Tuple[str, ...]:
        return tuple(self._pollers)

    @property
    def polling(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    #  Active set
    # ------------------------------------------------------------------
    def add_poller(self, name: str) -> bool:
        """Queue a PID by name; False if the name is unknown."""
        try:
            command = encode(name, self.table)
        except UnknownPid as e:
            self.logger.warning("Not polling: %s", e)
            return False
        self._pollers.append(command)
        self.logger.debug("Added poller %s (%s)", name, command)
        return True

    def remove_poller(self, name: str) -> bool:
        """Drop the first queued request for a PID name, if any."""
        try:
            command = encode(name, self.table)
        except UnknownPid:
            return False
        if command not in self._pollers:
            return False
        self._pollers.remove(command)
        self.logger.debug("Removed poller %s (%s)", name, command)
        return True

    def remove_all_pollers(self) -> None:
        self._pollers.clear()

    def write_pollers(self) -> None:
        """Send every queued request once, in order."""
        for command in list(self._pollers):
            self.write(command)

    # ------------------------------------------------------------------
    #  Timer
    # ------------------------------------------------------------------
    def start_polling(self) -> None:
        """Start the periodic timer. Needs a running event loop."""
        if self.polling:
            self.logger.debug("Polling already active")
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run())
        self.logger.info("Polling every %d ms", self.interval_ms)

    def stop_polling(self) -> None:
        """Cancel the timer; the active set is kept. Safe to call when idle."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            self.logger.info("Polling stopped")

    async def _run(self) -> None:
        interval = self.interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            self.logger.debug("Poll tick: %d request(s)", len(self._pollers))
            try:
                self.write_pollers()
            except Exception as e:
                self.logger.error("Poll tick failed: %s", e)
