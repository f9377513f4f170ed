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
#  pids.py  –  PID definitions and lookup table
# ------------------------------------------------------------------
from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

from . import decoders as d

_HEX_BYTE = re.compile(r"^[0-9A-F]{2}$")

BYTE_COUNTS = (1, 2, 4, 8)

# Positive responses echo the request mode with bit 6 set (01 -> 41)
RESPONSE_MODE_OFFSET = 0x40


def _accepts(fn: Callable[..., Any], count: int) -> bool:
    """True when fn can be called with exactly `count` positional arguments."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return True  # builtins without signature metadata
    required = 0
    maximum: Optional[int] = 0
    for p in sig.parameters.values():
        if p.kind is p.VAR_POSITIONAL:
            maximum = None
        elif p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
            if maximum is not None:
                maximum += 1
            if p.default is p.empty:
                required += 1
    if maximum is None:
        return required <= count
    return required <= count <= maximum


@dataclass(slots=True, frozen=True)
class PidDefinition:
    """
    One request the adapter understands.
    - mode: service byte as two hex characters (e.g. '01')
    - pid: parameter byte, None for mode-only requests (e.g. '03')
    - byte_count: data bytes following mode+pid in the reply
    - decode: rule receiving byte_count hex-byte strings
    """
    name: str
    mode: str
    pid: Optional[str]
    byte_count: int
    decode: Callable[..., Any]
    description: str = ""
    units: str = ""

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name is required")
        if not _HEX_BYTE.match(self.mode.upper()):
            raise ValueError(f"{self.name}: mode must be two hex characters, got {self.mode!r}")
        if self.pid is not None and not _HEX_BYTE.match(self.pid.upper()):
            raise ValueError(f"{self.name}: pid must be two hex characters, got {self.pid!r}")
        if self.byte_count not in BYTE_COUNTS:
            raise ValueError(f"{self.name}: byte_count must be one of {BYTE_COUNTS}")
        if not _accepts(self.decode, self.byte_count):
            raise ValueError(f"{self.name}: decode does not accept {self.byte_count} byte(s)")

    @property
    def command(self) -> str:
        """Request string sent to the adapter (no terminator)."""
        if self.pid is None:
            return self.mode.upper()
        return (self.mode + self.pid).upper()


class PidTable:
    """Immutable registry of PidDefinition, indexed by name and by (mode, pid)."""

    def __init__(self, definitions: Iterable[PidDefinition]):
        self._by_name: Dict[str, PidDefinition] = {}
        self._by_code: Dict[Tuple[str, str], PidDefinition] = {}
        for definition in definitions:
            if definition.name in self._by_name:
                raise ValueError(f"Duplicate PID name: {definition.name!r}")
            self._by_name[definition.name] = definition
            if definition.pid is not None:
                key = (definition.mode.upper(), definition.pid.upper())
                # first definition wins for a shared (mode, pid)
                self._by_code.setdefault(key, definition)

    def lookup_by_name(self, name: str) -> Optional[PidDefinition]:
        return self._by_name.get(name)

    def lookup_by_mode_and_pid(self, mode: str, pid: str) -> Optional[PidDefinition]:
        """
        Find the definition for a mode/pid pair as seen in a reply.
        A positive-response mode (request mode + 0x40) resolves to its request mode.
        """
        if not mode or not pid:
            return None
        mode, pid = mode.upper(), pid.upper()
        found = self._by_code.get((mode, pid))
        if found is not None:
            return found
        try:
            value = int(mode, 16)
        except ValueError:
            return None
        if value >= RESPONSE_MODE_OFFSET:
            return self._by_code.get((f"{value - RESPONSE_MODE_OFFSET:02X}", pid))
        return None

    def extend(self, definitions: Iterable[PidDefinition]) -> "PidTable":
        """New table with extra definitions appended; self is unchanged."""
        return PidTable([*self, *definitions])

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[PidDefinition]:
        return iter(self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"PidTable({len(self)} definitions)"


# ------------------------------------------------------------------
#  Default table (SAE J1979)
# ------------------------------------------------------------------
def _pid(name, mode, pid, byte_count, decode, description, units=""):
    return PidDefinition(name=name, mode=mode, pid=pid, byte_count=byte_count,
                         decode=decode, description=description, units=units)


_DEFINITIONS = (
    # Mode 01 – live data
    _pid("pidsupp0",    "01", "00", 4, d.supported_pids, "PIDs supported 01-20"),
    _pid("dtc_cnt",     "01", "01", 4, d.monitor_status, "Monitor status since DTCs cleared"),
    _pid("dtcfrzf",     "01", "02", 2, d.decode_dtc, "DTC that caused freeze frame"),
    _pid("fuelsys",     "01", "03", 2, d.fuel_system_status, "Fuel system status"),
    _pid("load_pct",    "01", "04", 1, d.percent, "Calculated engine load", "%"),
    _pid("temp",        "01", "05", 1, d.temperature, "Engine coolant temperature", "°C"),
    _pid("shrtft13",    "01", "06", 1, d.fuel_trim, "Short term fuel trim, bank 1 and 3", "%"),
    _pid("longft13",    "01", "07", 1, d.fuel_trim, "Long term fuel trim, bank 1 and 3", "%"),
    _pid("shrtft24",    "01", "08", 1, d.fuel_trim, "Short term fuel trim, bank 2 and 4", "%"),
    _pid("longft24",    "01", "09", 1, d.fuel_trim, "Long term fuel trim, bank 2 and 4", "%"),
    _pid("frp",         "01", "0A", 1, d.fuel_pressure, "Fuel pressure", "kPa"),
    _pid("map",         "01", "0B", 1, d.raw_byte, "Intake manifold absolute pressure", "kPa"),
    _pid("rpm",         "01", "0C", 2, d.engine_rpm, "Engine RPM", "rpm"),
    _pid("vss",         "01", "0D", 1, d.vehicle_speed, "Vehicle speed sensor", "km/h"),
    _pid("sparkadv",    "01", "0E", 1, d.timing_advance, "Ignition timing advance for cylinder 1", "°"),
    _pid("iat",         "01", "0F", 1, d.temperature, "Intake air temperature", "°C"),
    _pid("maf",         "01", "10", 2, d.maf_rate, "Air flow rate from mass air flow sensor", "g/s"),
    _pid("throttlepos", "01", "11", 1, d.percent, "Absolute throttle position", "%"),
    _pid("air_stat",    "01", "12", 1, d.secondary_air_status, "Commanded secondary air status"),
    _pid("o2sloc",      "01", "13", 1, d.raw_byte, "Location of oxygen sensors"),
    _pid("o2s11",       "01", "14", 2, d.oxygen_sensor_voltage, "Bank 1 - Sensor 1 oxygen sensor", "V"),
    _pid("o2s12",       "01", "15", 2, d.oxygen_sensor_voltage, "Bank 1 - Sensor 2 oxygen sensor", "V"),
    _pid("obdsup",      "01", "1C", 1, d.obd_standard, "OBD requirements to which vehicle is designed"),
    _pid("runtm",       "01", "1F", 2, d.word, "Time since engine start", "s"),
    _pid("pidsupp2",    "01", "20", 4, d.supported_pids, "PIDs supported 21-40"),
    _pid("mil_dist",    "01", "21", 2, d.word, "Distance travelled while MIL is activated", "km"),
    _pid("frpm",        "01", "22", 2, d.fuel_rail_pressure, "Fuel rail pressure relative to manifold vacuum", "kPa"),
    _pid("frpd",        "01", "23", 2, d.fuel_rail_gauge_pressure, "Fuel rail pressure (diesel)", "kPa"),
    _pid("lambda11",    "01", "24", 4, d.wide_band_lambda, "Bank 1 - Sensor 1 wide range O2 sensor"),
    _pid("egr_pct",     "01", "2C", 1, d.percent, "Commanded EGR", "%"),
    _pid("egr_err",     "01", "2D", 1, d.fuel_trim, "EGR error", "%"),
    _pid("evap_pct",    "01", "2E", 1, d.percent, "Commanded evaporative purge", "%"),
    _pid("fli",         "01", "2F", 1, d.percent, "Fuel level input", "%"),
    _pid("warm_ups",    "01", "30", 1, d.raw_byte, "Warm-ups since DTCs cleared"),
    _pid("clr_dist",    "01", "31", 2, d.word, "Distance travelled since DTCs cleared", "km"),
    _pid("evap_vp",     "01", "32", 2, d.evap_vapor_pressure, "Evap system vapour pressure", "Pa"),
    _pid("baro",        "01", "33", 1, d.raw_byte, "Barometric pressure", "kPa"),
    _pid("catemp11",    "01", "3C", 2, d.catalyst_temperature, "Catalyst temperature bank 1, sensor 1", "°C"),
    _pid("catemp21",    "01", "3D", 2, d.catalyst_temperature, "Catalyst temperature bank 2, sensor 1", "°C"),
    _pid("pidsupp4",    "01", "40", 4, d.supported_pids, "PIDs supported 41-60"),
    _pid("vpwr",        "01", "42", 2, d.control_module_voltage, "Control module voltage", "V"),
    _pid("load_abs",    "01", "43", 2, d.absolute_load, "Absolute load value", "%"),
    _pid("lambda",      "01", "44", 2, d.equivalence_ratio, "Commanded equivalence ratio"),
    _pid("tp_r",        "01", "45", 1, d.percent, "Relative throttle position", "%"),
    _pid("aat",         "01", "46", 1, d.temperature, "Ambient air temperature", "°C"),
    _pid("mil_time",    "01", "4D", 2, d.word, "Time run by the engine while MIL activated", "min"),
    _pid("clr_time",    "01", "4E", 2, d.word, "Time since DTCs cleared", "min"),
    _pid("fuel_type",   "01", "51", 1, d.fuel_type, "Type of fuel currently being utilized"),
    _pid("alch_pct",    "01", "52", 1, d.percent, "Ethanol fuel", "%"),
    _pid("oil_temp",    "01", "5C", 1, d.temperature, "Engine oil temperature", "°C"),
    _pid("fuel_rate",   "01", "5E", 2, d.fuel_rate, "Engine fuel rate", "L/h"),
    _pid("odometer",    "01", "A6", 4, d.odometer, "Odometer", "km"),

    # Mode 09 – vehicle information
    _pid("vinsupp0",    "09", "00", 4, d.supported_pids, "Mode 09 PIDs supported 01-20"),
    _pid("vin_mscount", "09", "01", 1, d.raw_byte, "VIN message count"),
    _pid("cvn",         "09", "06", 8, d.calibration_verification_numbers, "Calibration verification numbers"),

    # Mode-only requests (no PID byte). decode() never matches their replies;
    # the rules are for callers holding the raw data bytes.
    _pid("requestdtc",          "03", None, 8, d.dtc_list, "Request stored trouble codes"),
    _pid("cleardtc",            "04", None, 1, d.raw_byte, "Clear trouble codes and stored values"),
    _pid("requestpendingdtc",   "07", None, 8, d.dtc_list, "Request pending trouble codes"),
    _pid("requestpermanentdtc", "0A", None, 8, d.dtc_list, "Request permanent trouble codes"),
)

PID_TABLE = PidTable(_DEFINITIONS)
