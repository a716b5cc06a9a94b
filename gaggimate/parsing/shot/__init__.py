"""
Decoder for GaggiMate shot logs (``.slog``, signature ``SHOT``).

A shot log is a version-dependent header, an optional phase-transition table
and a stream of fixed-width sample rows whose columns are chosen by a bit mask.
"""
from gaggimate.parsing.shot.decode import (
    decode_shot,
    header_size_for_version,
    HEADER_SIZE_V4,
    HEADER_SIZE_V5,
    MAX_PHASE_TRANSITIONS,
    SHOT_MAGIC,
)
from gaggimate.parsing.shot.fields import FIELD_RULES, FieldKind, FieldRule, SystemInfo, fields_in_mask
from gaggimate.parsing.shot.model import PhaseTransition, Sample, ShotRecord

__all__ = [
    "decode_shot",
    "header_size_for_version",
    "HEADER_SIZE_V4",
    "HEADER_SIZE_V5",
    "MAX_PHASE_TRANSITIONS",
    "SHOT_MAGIC",
    "FIELD_RULES",
    "FieldKind",
    "FieldRule",
    "SystemInfo",
    "fields_in_mask",
    "PhaseTransition",
    "Sample",
    "ShotRecord",
]
