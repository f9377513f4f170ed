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

# File: serial_obd/pid_pack.py
"""
Extra PID definitions loaded from JSON.

    {"pids": [
        {"name": "boost", "mode": "01", "pid": "70", "bytes": 2,
         "formula": "(A*256+B)/32", "units": "kPa"}
    ]}
"""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import jsonschema

from .pids import BYTE_COUNTS, PID_TABLE, PidDefinition, PidTable

PACK_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["pids"],
    "properties": {
        "pids": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "mode", "bytes", "formula"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "mode": {"type": "string", "pattern": "^[0-9A-Fa-f]{2}$"},
                    "pid": {"type": "string", "pattern": "^[0-9A-Fa-f]{2}$"},
                    "bytes": {"enum": list(BYTE_COUNTS)},
                    "formula": {"type": "string", "minLength": 1},
                    "description": {"type": "string"},
                    "units": {"type": "string"},
                },
                "additionalProperties": False,
            },
        },
    },
}

# ---- Safe formula support -------------------------------------------------
# Allowed tokens: A..H (data bytes 0..7), numbers, + - * / ( )
_TOKEN_RE = re.compile(r"\s*([A-H]|\d+(?:\.\d+)?|[+\-*/()])\s*")
_BYTE_TOKENS = "ABCDEFGH"
_OPEN_AFTER = ("+", "-", "*", "/", "(")


def compile_formula(expr: str, byte_count: int) -> Callable[..., float]:
    """Compile a tiny arithmetic expression into a decode rule over hex bytes."""
    tokens = _TOKEN_RE.findall(expr)
    if not tokens or "".join(tokens) != re.sub(r"\s+", "", expr):
        raise ValueError(f"Empty or invalid formula: {expr!r}")

    # No powers and no calls: '**' and an operand or ')' directly before '('
    for prev, t in zip(tokens, tokens[1:]):
        if prev == "*" and t == "*":
            raise ValueError(f"Power operator not allowed: {expr!r}")
        if t == "(" and prev not in _OPEN_AFTER:
            raise ValueError(f"Call syntax not allowed: {expr!r}")

    # Rebuild sanitized expression replacing A..H with b[0..7]
    mapped = []
    for t in tokens:
        if t in _BYTE_TOKENS:
            idx = _BYTE_TOKENS.index(t)
            if idx >= byte_count:
                raise ValueError(f"Token {t} out of range for {byte_count} byte(s): {expr!r}")
            mapped.append(f"b[{idx}]")
        else:
            mapped.append(t)
    safe_expr = "".join(mapped)
    try:
        code = compile(safe_expr, "<pid formula>", "eval")
    except SyntaxError as e:
        raise ValueError(f"Invalid formula: {expr!r}") from e

    def fn(*data: str) -> float:
        b = [int(x, 16) for x in data]
        # Evaluate with no builtins; only numbers/ops used
        return float(eval(code, {"__builtins__": {}}, {"b": b}))
    return fn


def parse_pid_pack(doc: Dict[str, Any]) -> List[PidDefinition]:
    jsonschema.validate(instance=doc, schema=PACK_SCHEMA)
    out: List[PidDefinition] = []
    for entry in doc["pids"]:
        count = entry["bytes"]
        out.append(PidDefinition(
            name=entry["name"],
            mode=entry["mode"].upper(),
            pid=entry["pid"].upper() if "pid" in entry else None,
            byte_count=count,
            decode=compile_formula(entry["formula"], count),
            description=entry.get("description", ""),
            units=entry.get("units", ""),
        ))
    return out


def load_pid_pack(json_path: Union[str, Path], base: PidTable = PID_TABLE) -> PidTable:
    """
    Load a PID pack and return `base` extended with its definitions.
    @raise jsonschema.ValidationError: document does not match PACK_SCHEMA
    @raise ValueError: bad formula or duplicate name
    """
    doc = json.loads(Path(json_path).read_text(encoding="utf-8"))
    return base.extend(parse_pid_pack(doc))
