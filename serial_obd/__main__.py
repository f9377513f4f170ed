#!/usr/bin/env python3
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

# File: serial_obd/__main__.py
"""
Live PID monitor.

Examples:
  python -m serial_obd vss rpm temp
  python -m serial_obd --port /dev/ttyUSB0 --baud 38400 --interval 1000 rpm
  python -m serial_obd --list
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import List, Optional

from . import config
from .config import ReaderSettings
from .errors import TransportError
from .logger import get_logger, setup_logging
from .pid_pack import load_pid_pack
from .pids import PID_TABLE, PidTable
from .reader import OBDReader


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="serial_obd", description="Poll OBD-II PIDs through an ELM327 adapter")
    ap.add_argument("pids", nargs="*", help="PID names to poll (see --list)")
    ap.add_argument("-p", "--port", default=config.SERIAL_PORT, help="Serial port")
    ap.add_argument("-b", "--baud", type=int, default=config.BAUD_RATE)
    ap.add_argument("-i", "--interval", type=int, default=config.POLL_INTERVAL_MS, help="Poll interval (ms)")
    ap.add_argument("--pack", help="JSON PID pack with extra definitions")
    ap.add_argument("-d", "--debug", action="store_true", help="Verbose logging")
    ap.add_argument("--list", action="store_true", help="List known PIDs and exit")
    return ap


def print_table(table: PidTable) -> None:
    for definition in table:
        units = f" [{definition.units}]" if definition.units else ""
        print(f"{definition.name:<20} {definition.command:<5} {definition.description}{units}")


async def monitor(settings: ReaderSettings, table: PidTable, names: List[str]) -> None:
    log = get_logger("serial_obd.monitor")
    reader = OBDReader(table=table, settings=settings)
    await reader.connect()
    try:
        for name in names:
            if not reader.add_poller(name):
                log.warning("Skipping unknown PID %r", name)
        reader.start_polling()
        async for reply in reader.replies():
            data = {"timestamp": datetime.now().isoformat(), **reply.as_dict()}
            print(json.dumps(data, default=str), flush=True)
        log.warning("Adapter stream ended")
    finally:
        await reader.disconnect()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    table = load_pid_pack(args.pack) if args.pack else PID_TABLE

    if args.list:
        print_table(table)
        return 0
    if not args.pids:
        print("No PIDs given (use --list to see names)", file=sys.stderr)
        return 2

    setup_logging(debug=args.debug or None)
    settings = ReaderSettings(port=args.port, baud=args.baud, poll_interval_ms=args.interval)
    try:
        asyncio.run(monitor(settings, table, args.pids))
    except TransportError as e:
        sys.stderr.write(f"Serial error: {e}\n")
        return 1
    except KeyboardInterrupt:
        print("\nStopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
