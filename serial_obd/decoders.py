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
#  decoders.py  –  SAE J1979 decode rules
# ------------------------------------------------------------------
# Every rule takes the raw data bytes of a reply as two-character hex
# strings, in order, one positional argument per byte.
from typing import Dict, List, Union


def _int(byte: str) -> int:
    return int(byte, 16)


def _word(a: str, b: str) -> int:
    return _int(a) * 256 + _int(b)


# ------------------------------------------------------------------
#  Single byte
# ------------------------------------------------------------------
def vehicle_speed(a: str) -> int:
    """Vehicle speed (km/h)."""
    return _int(a)


def raw_byte(a: str) -> int:
    return _int(a)


def temperature(a: str) -> int:
    """SAE J1979 temperature (°C)."""
    return _int(a) - 40


def percent(a: str) -> float:
    return _int(a) * 100 / 255


def fuel_trim(a: str) -> float:
    """Short/long term fuel trim (%), 128 = 0 %."""
    return (_int(a) - 128) * 100 / 128


def fuel_pressure(a: str) -> int:
    """Gauge fuel pressure (kPa)."""
    return _int(a) * 3


def timing_advance(a: str) -> float:
    """Degrees before TDC."""
    return _int(a) / 2 - 64


# ------------------------------------------------------------------
#  Two bytes
# ------------------------------------------------------------------
def engine_rpm(a: str, b: str) -> float:
    return _word(a, b) / 4


def maf_rate(a: str, b: str) -> float:
    """Mass air flow (g/s)."""
    return _word(a, b) / 100


def word(a: str, b: str) -> int:
    return _word(a, b)


def control_module_voltage(a: str, b: str) -> float:
    return _word(a, b) / 1000


def fuel_rail_pressure(a: str, b: str) -> float:
    """Fuel rail pressure relative to manifold vacuum (kPa)."""
    return _word(a, b) * 0.079


def fuel_rail_gauge_pressure(a: str, b: str) -> int:
    return _word(a, b) * 10


def evap_vapor_pressure(a: str, b: str) -> float:
    """EVAP system vapour pressure (Pa), signed."""
    raw = _word(a, b)
    if raw >= 0x8000:
        raw -= 0x10000
    return raw / 4


def catalyst_temperature(a: str, b: str) -> float:
    return _word(a, b) / 10 - 40


def absolute_load(a: str, b: str) -> float:
    return _word(a, b) * 100 / 255


def equivalence_ratio(a: str, b: str) -> float:
    """Commanded equivalence ratio (lambda)."""
    return _word(a, b) * 2 / 65536


def fuel_rate(a: str, b: str) -> float:
    """Engine fuel rate (L/h)."""
    return _word(a, b) / 20


def oxygen_sensor_voltage(a: str, b: str) -> Dict[str, float]:
    """Narrow band O2 sensor: voltage (V) and short term fuel trim (%)."""
    return {
        "voltage": _int(a) / 200,
        "shrtft": fuel_trim(b),
    }


FUEL_SYSTEM_STATUS = {
    0x00: "Not available",
    0x01: "Open loop due to insufficient engine temperature",
    0x02: "Closed loop, using oxygen sensor feedback to determine fuel mix",
    0x04: "Open loop due to engine load OR fuel cut due to deceleration",
    0x08: "Open loop due to system failure",
    0x10: "Closed loop, using at least one oxygen sensor but there is a fault in the feedback system",
}


def fuel_system_status(a: str, b: str) -> Dict[str, str]:
    """Status of fuel system 1 and 2."""
    return {
        "system1": FUEL_SYSTEM_STATUS.get(_int(a), "Unknown"),
        "system2": FUEL_SYSTEM_STATUS.get(_int(b), "Unknown"),
    }


# ------------------------------------------------------------------
#  Enumerations (single byte)
# ------------------------------------------------------------------
SECONDARY_AIR_STATUS = {
    0x01: "Upstream",
    0x02: "Downstream of catalytic converter",
    0x04: "From the outside atmosphere or off",
    0x08: "Pump commanded on for diagnostics",
}

OBD_STANDARDS = {
    0x01: "OBD-II as defined by the CARB",
    0x02: "OBD as defined by the EPA",
    0x03: "OBD and OBD-II",
    0x04: "OBD-I",
    0x05: "Not OBD compliant",
    0x06: "EOBD (Europe)",
    0x07: "EOBD and OBD-II",
    0x08: "EOBD and OBD",
    0x09: "EOBD, OBD and OBD II",
    0x0A: "JOBD (Japan)",
    0x0B: "JOBD and OBD II",
    0x0C: "JOBD and EOBD",
    0x0D: "JOBD, EOBD, and OBD II",
    0x11: "Engine Manufacturer Diagnostics (EMD)",
    0x12: "Engine Manufacturer Diagnostics Enhanced (EMD+)",
    0x13: "Heavy Duty On-Board Diagnostics (Child/Partial) (HD OBD-C)",
    0x14: "Heavy Duty On-Board Diagnostics (HD OBD)",
    0x15: "World Wide Harmonized OBD (WWH OBD)",
    0x17: "Heavy Duty Euro OBD Stage I without NOx control (HD EOBD-I)",
    0x18: "Heavy Duty Euro OBD Stage I with NOx control (HD EOBD-I N)",
    0x19: "Heavy Duty Euro OBD Stage II without NOx control (HD EOBD-II)",
    0x1A: "Heavy Duty Euro OBD Stage II with NOx control (HD EOBD-II N)",
    0x1C: "Brazil OBD Phase 1 (OBDBr-1)",
    0x1D: "Brazil OBD Phase 2 (OBDBr-2)",
    0x1E: "Korean OBD (KOBD)",
    0x1F: "India OBD I (IOBD I)",
    0x20: "India OBD II (IOBD II)",
    0x21: "Heavy Duty Euro OBD Stage VI (HD EOBD-IV)",
}

FUEL_TYPES = {
    0x00: "Not available",
    0x01: "Gasoline",
    0x02: "Methanol",
    0x03: "Ethanol",
    0x04: "Diesel",
    0x05: "LPG",
    0x06: "CNG",
    0x07: "Propane",
    0x08: "Electric",
    0x09: "Bifuel running Gasoline",
    0x0A: "Bifuel running Methanol",
    0x0B: "Bifuel running Ethanol",
    0x0C: "Bifuel running LPG",
    0x0D: "Bifuel running CNG",
    0x0E: "Bifuel running Propane",
    0x0F: "Bifuel running Electricity",
    0x10: "Bifuel running electric and combustion engine",
    0x11: "Hybrid gasoline",
    0x12: "Hybrid Ethanol",
    0x13: "Hybrid Diesel",
    0x14: "Hybrid Electric",
    0x15: "Hybrid running electric and combustion engine",
    0x16: "Hybrid Regenerative",
    0x17: "Bifuel running diesel",
}


def secondary_air_status(a: str) -> str:
    return SECONDARY_AIR_STATUS.get(_int(a), "Unknown")


def obd_standard(a: str) -> str:
    return OBD_STANDARDS.get(_int(a), "Unknown")


def fuel_type(a: str) -> str:
    return FUEL_TYPES.get(_int(a), "Unknown")


# ------------------------------------------------------------------
#  Four bytes
# ------------------------------------------------------------------
def supported_pids(a: str, b: str, c: str, d: str) -> Dict[int, bool]:
    """
    Big-endian bit mask of the next 32 PIDs.
    Key is the PID offset (1..32) relative to the request PID.
    """
    mask = int(a + b + c + d, 16)
    return {i + 1: bool(mask >> (31 - i) & 1) for i in range(32)}


def monitor_status(a: str, b: str, c: str, d: str) -> Dict[str, Union[bool, int]]:
    """Monitor status since DTCs cleared: MIL lamp state and stored DTC count."""
    first = _int(a)
    return {
        "mil": bool(first & 0x80),
        "dtc_count": first & 0x7F,
        "compression_ignition": bool(_int(b) & 0x08),
    }


def wide_band_lambda(a: str, b: str, c: str, d: str) -> Dict[str, float]:
    """Wide range O2 sensor: equivalence ratio and voltage (V)."""
    return {
        "ratio": _word(a, b) * 2 / 65536,
        "voltage": _word(c, d) * 8 / 65536,
    }


def odometer(a: str, b: str, c: str, d: str) -> float:
    """Odometer (km)."""
    return int(a + b + c + d, 16) / 10


# ------------------------------------------------------------------
#  Eight bytes
# ------------------------------------------------------------------
def calibration_verification_numbers(*data: str) -> List[str]:
    """Mode 09 CVN reply: one 4-byte hex word per calibration."""
    return ["".join(data[i:i + 4]).upper() for i in range(0, len(data), 4)]


_DTC_SYSTEMS = "PCBU"


def decode_dtc(a: str, b: str) -> str:
    """Two raw bytes -> SAE DTC string, e.g. 01 33 -> P0133."""
    first = _int(a)
    return f"{_DTC_SYSTEMS[first >> 6]}{(first >> 4) & 0x03}{first & 0x0F:X}{b.upper()}"


def dtc_list(*data: str) -> List[str]:
    """Pairs of bytes -> DTC strings; 0000 pairs are padding and skipped."""
    codes = []
    for i in range(0, len(data) - 1, 2):
        a, b = data[i], data[i + 1]
        if _int(a) == 0 and _int(b) == 0:
            continue
        codes.append(decode_dtc(a, b))
    return codes
