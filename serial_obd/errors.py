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

# File: serial_obd/errors.py


class OBDError(Exception):
    """Base exception for serial-obd errors."""
    pass


class UnknownPid(OBDError, KeyError):
    """Symbolic PID name is not present in the PID table."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown PID name: {self.name!r}"


class MalformedFrame(OBDError, ValueError):
    """Adapter frame could not be parsed into a reply."""
    pass


class TransportError(OBDError):
    """Serial port could not be opened, read or written."""
    pass
