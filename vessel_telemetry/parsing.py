"""Query parameter parsing for telemetry ingestion.

Malformed numbers never reject a request: identifiers fall back to -1 and
every other numeric field falls back to zero.
"""

import math
import re
from collections.abc import Mapping
from typing import Optional

from vessel_telemetry.event_log import event_log
from vessel_telemetry.schemas import VesselTelemetry, VesselType

INVALID_VESSEL_ID = -1

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

# Leading-number prefixes; trailing garbage after the number is ignored.
# ASCII only: other Unicode digits are not numbers on the wire.
_LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)
# Leading-zero octal ("017", "0_17"), which int(..., 0) refuses.
_LEGACY_OCTAL = re.compile(r"[+-]?0(?:_?[0-7])+", re.ASCII)


def parse_vessel_id(value: str) -> int:
    """Parse a vessel identifier as a signed 64-bit integer.

    Accepts ASCII decimal, ``0x``/``0o``/``0b`` prefixes, leading-zero octal
    and underscores between digits. The whole string must be a number.

    Returns:
        The identifier, or -1 when it is not a valid 64-bit integer
    """
    parsed: Optional[int] = None
    if value.isascii() and value == value.strip():
        try:
            parsed = int(value, 0)
        except ValueError:
            if _LEGACY_OCTAL.fullmatch(value):
                parsed = int(value, 8)

    if parsed is None or not INT64_MIN <= parsed <= INT64_MAX:
        event_log.log_vessel_id_coerced(value, INVALID_VESSEL_ID)
        return INVALID_VESSEL_ID
    return parsed


def parse_int32(value: Optional[str]) -> int:
    """Parse the leading decimal integer of ``value``; 0 if absent or out of range."""
    match = _LEADING_INT.match(value or "")
    if match is None:
        return 0
    parsed = int(match.group(1))
    if not INT32_MIN <= parsed <= INT32_MAX:
        return 0
    return parsed


def parse_float(value: Optional[str]) -> float:
    """Parse the leading decimal number of ``value``; 0.0 if absent or not finite."""
    match = _LEADING_FLOAT.match(value or "")
    if match is None:
        return 0.0
    parsed = float(match.group(1))
    if not math.isfinite(parsed):
        return 0.0
    return parsed


def has_target(tgt_x: float, tgt_y: float) -> bool:
    """A vessel has a target when both target X and Y are non-zero."""
    return tgt_x != 0 and tgt_y != 0


def telemetry_from_params(params: Mapping[str, Optional[str]]) -> VesselTelemetry:
    """Build a telemetry record from ``setVesselTelemetry`` query parameters.

    ``veh_id`` and ``type`` must already have been checked for presence.
    The timestamp is left at 0 for the store to stamp.
    """
    tgt_x = parse_float(params.get("tgt_x"))
    tgt_y = parse_float(params.get("tgt_y"))

    return VesselTelemetry(
        id=parse_vessel_id(params.get("veh_id") or ""),
        name=params.get("veh_name") or "",
        callsign=params.get("callsign") or "",
        x=parse_float(params.get("veh_x")),
        y=parse_float(params.get("veh_y")),
        z=parse_float(params.get("veh_z")),
        abs_speed=parse_float(params.get("veh_abs_spd")),
        vessel_type=VesselType.from_code(parse_int32(params.get("type"))),
        direction=parse_float(params.get("veh_dir")),
        tgt_x=tgt_x,
        tgt_y=tgt_y,
        tgt_z=parse_float(params.get("tgt_z")),
        has_target=has_target(tgt_x, tgt_y),
    )
