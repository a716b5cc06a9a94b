"""
Sample column definitions for the ``.slog`` format.

Each bit of the header's fields mask selects one 2-byte column. Columns are
stored in ascending bit order, and every column is either a scaled integer
(decoded value = raw / scale) or one of two named transforms.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

from gaggimate.core.binary import get_bit

# Fixed-point scale factors, grouped by physical quantity.
TEMP_SCALE = 10
PRESSURE_SCALE = 10
FLOW_SCALE = 100
WEIGHT_SCALE = 10
RESISTANCE_SCALE = 100

# Used for the tick transform when a header stores a zero interval.
DEFAULT_SAMPLE_INTERVAL_MS = 100

FIELD_WIDTH = 2


class FieldKind(IntEnum):
    """Sample columns, valued by their bit position in the fields mask."""
    TICK = 0
    TARGET_TEMP = 1
    CURRENT_TEMP = 2
    TARGET_PRESSURE = 3
    CURRENT_PRESSURE = 4
    PUMP_FLOW = 5
    TARGET_FLOW = 6
    PUCK_FLOW = 7
    VOLUMETRIC_FLOW = 8
    VOLUMETRIC_WEIGHT = 9
    ESTIMATED_WEIGHT = 10
    PUCK_RESISTANCE = 11
    SYSTEM_INFO = 12


class Transform(str, Enum):
    TICK = "tick"
    SYSTEM_INFO = "system_info"


@dataclass(frozen=True)
class FieldRule:
    """
    How one column is stored and decoded.

    Attributes:
        attr: Name of the ``Sample`` attribute the decoded value is stored in.
        signed: Whether the raw 16-bit value is two's complement.
        scale: Divisor for scaled integers, ``None`` for transformed columns.
        transform: The named transform, ``None`` for scaled integers.
    """
    attr: str
    signed: bool = False
    scale: Optional[int] = None
    transform: Optional[Transform] = None


FIELD_RULES: dict[FieldKind, FieldRule] = {
    FieldKind.TICK: FieldRule("elapsed_ms", transform=Transform.TICK),
    FieldKind.TARGET_TEMP: FieldRule("target_temp", scale=TEMP_SCALE),
    FieldKind.CURRENT_TEMP: FieldRule("current_temp", scale=TEMP_SCALE),
    FieldKind.TARGET_PRESSURE: FieldRule("target_pressure", scale=PRESSURE_SCALE),
    FieldKind.CURRENT_PRESSURE: FieldRule("current_pressure", scale=PRESSURE_SCALE),
    FieldKind.PUMP_FLOW: FieldRule("pump_flow", signed=True, scale=FLOW_SCALE),
    FieldKind.TARGET_FLOW: FieldRule("target_flow", signed=True, scale=FLOW_SCALE),
    FieldKind.PUCK_FLOW: FieldRule("puck_flow", signed=True, scale=FLOW_SCALE),
    FieldKind.VOLUMETRIC_FLOW: FieldRule("volumetric_flow", signed=True, scale=FLOW_SCALE),
    FieldKind.VOLUMETRIC_WEIGHT: FieldRule("volumetric_weight", scale=WEIGHT_SCALE),
    FieldKind.ESTIMATED_WEIGHT: FieldRule("estimated_weight", scale=WEIGHT_SCALE),
    FieldKind.PUCK_RESISTANCE: FieldRule("puck_resistance", scale=RESISTANCE_SCALE),
    FieldKind.SYSTEM_INFO: FieldRule("system_info", transform=Transform.SYSTEM_INFO),
}


@dataclass(frozen=True)
class SystemInfo:
    raw: int
    shot_started_volumetric: bool
    currently_volumetric: bool
    bluetooth_scale_connected: bool
    volumetric_available: bool
    extended_recording: bool

    @classmethod
    def from_raw(cls, raw: int) -> "SystemInfo":
        return cls(
            raw=raw,
            shot_started_volumetric=get_bit(raw, 0),
            currently_volumetric=get_bit(raw, 1),
            bluetooth_scale_connected=get_bit(raw, 2),
            volumetric_available=get_bit(raw, 3),
            extended_recording=get_bit(raw, 4),
        )


FieldValue = Union[float, int, SystemInfo]


def fields_in_mask(fields_mask: int) -> tuple[FieldKind, ...]:
    """Return the columns selected by ``fields_mask`` in on-disk order."""
    return tuple(kind for kind in FieldKind if get_bit(fields_mask, kind))


def decode_field(kind: FieldKind, raw: int, sample_interval: int) -> FieldValue:
    rule = FIELD_RULES[kind]
    if rule.transform is Transform.TICK:
        # Each row stores its own tick count, not a delta.
        return raw * (sample_interval or DEFAULT_SAMPLE_INTERVAL_MS)
    if rule.transform is Transform.SYSTEM_INFO:
        return SystemInfo.from_raw(raw)
    if rule.scale is None:
        raise ValueError(f"Field {kind.name} has neither a scale nor a transform")
    return raw / rule.scale
