"""
Decoder for binary shot logs (``.slog``).

Header layout, little-endian throughout. The header is 128 bytes up to
version 4 and 512 bytes from version 5; every offset below 128 is shared::

    magic u32 @0 ("SHOT"), version u8 @4, reserved u8 @5, header_size u16 @6,
    sample_interval u16 @8, reserved u16 @10, fields_mask u32 @12,
    sample_count u32 @16, duration u32 @20, timestamp u32 @24,
    profile_id[32] @28, profile_name[48] @60, final_weight u16 @108

    v5+: phase transitions @110, 29 bytes each (up to 12):
        sample_index u16 @+0, phase_number u8 @+2, reserved u8 @+3,
        phase_name[25] @+4
    v5+: transition_count u8 @458

Sample rows follow the header: one 2-byte column per bit set in the fields
mask, ascending bit order.
"""
from __future__ import annotations

import logging
from typing import Optional

from gaggimate.core.binary import count_set_bits, decode_cstring, read_i16, read_u8, read_u16, read_u32, scaled_or_none
from gaggimate.core.errors import FormatError, MagicMismatchError, UnsupportedVersionError
from gaggimate.parsing.shot.fields import (
    FIELD_RULES,
    FIELD_WIDTH,
    WEIGHT_SCALE,
    FieldKind,
    decode_field,
    fields_in_mask,
)
from gaggimate.parsing.shot.model import PhaseTransition, Sample, ShotRecord

logger = logging.getLogger(__name__)

SHOT_MAGIC = 0x544F4853  # "SHOT"

HEADER_SIZE_V4 = 128
HEADER_SIZE_V5 = 512
PHASE_TABLE_MIN_VERSION = 5

PHASE_TABLE_OFFSET = 110
PHASE_ENTRY_STRIDE = 29
PHASE_NAME_OFFSET = 4
PHASE_NAME_SIZE = 25
MAX_PHASE_TRANSITIONS = 12
TRANSITION_COUNT_OFFSET = 458


def header_size_for_version(version: int) -> int:
    return HEADER_SIZE_V5 if version >= PHASE_TABLE_MIN_VERSION else HEADER_SIZE_V4


def _decode_phase_transitions(data: bytes, count: int) -> tuple[PhaseTransition, ...]:
    transitions: list[PhaseTransition] = []
    for i in range(min(count, MAX_PHASE_TRANSITIONS)):
        offset = PHASE_TABLE_OFFSET + i * PHASE_ENTRY_STRIDE
        name_start = offset + PHASE_NAME_OFFSET
        transitions.append(
            PhaseTransition(
                sample_index=read_u16(data, offset),
                phase_number=read_u8(data, offset + 2),
                phase_name=decode_cstring(data[name_start: name_start + PHASE_NAME_SIZE]),
            )
        )
    return tuple(transitions)


def _phase_for_index(transitions: tuple[PhaseTransition, ...], index: int) -> Optional[int]:
    # Most recent transition at or before this sample.
    for transition in reversed(transitions):
        if index >= transition.sample_index:
            return transition.phase_number
    return None


def _decode_row(
    data: bytes,
    offset: int,
    columns: tuple[FieldKind, ...],
    sample_interval: int,
    phase: Optional[int],
) -> Sample:
    values = {}
    for column, kind in enumerate(columns):
        rule = FIELD_RULES[kind]
        field_offset = offset + column * FIELD_WIDTH
        raw = read_i16(data, field_offset) if rule.signed else read_u16(data, field_offset)
        values[rule.attr] = decode_field(kind, raw, sample_interval)
    return Sample(phase=phase, **values)


def decode_shot(buffer: bytes, shot_id: str) -> ShotRecord:
    """
    Decode a complete ``.slog`` buffer.

    A sample stream that ends early (power loss mid-shot, interrupted write)
    is not an error: every complete row is returned and the record is marked
    ``incomplete``.

    Args:
        buffer: The raw file contents. It is only read, never modified.
        shot_id: The ID the file was requested under; copied into the record.

    Returns:
        The decoded shot.

    Raises:
        FormatError: The buffer is shorter than the smallest header.
        MagicMismatchError: The file does not start with the ``SHOT`` signature.
        UnsupportedVersionError: The buffer is shorter than the header its
            version requires.
    """
    data = bytes(buffer)
    if len(data) < HEADER_SIZE_V4:
        raise FormatError("Shot file too small")

    magic = read_u32(data, 0)
    if magic != SHOT_MAGIC:
        raise MagicMismatchError("shot", magic, SHOT_MAGIC)

    version = read_u8(data, 4)
    header_size = header_size_for_version(version)
    if len(data) < header_size:
        raise UnsupportedVersionError(f"Shot file too small for version {version}")

    sample_interval = read_u16(data, 8)
    fields_mask = read_u32(data, 12)
    declared_count = read_u32(data, 16)

    phases: tuple[PhaseTransition, ...] = ()
    if version >= PHASE_TABLE_MIN_VERSION:
        phases = _decode_phase_transitions(data, read_u8(data, TRANSITION_COUNT_OFFSET))

    columns = fields_in_mask(fields_mask)
    # Bits above the known kinds still occupy a trailing column each.
    row_width = count_set_bits(fields_mask) * FIELD_WIDTH
    if row_width:
        available = (len(data) - header_size) // row_width
        decoded_count = min(declared_count, available)
    else:
        decoded_count = 0

    if count_set_bits(fields_mask) != len(columns):
        logger.warning(
            "shot_unknown_fields",
            extra={"details": {"shot_id": shot_id, "fields_mask": fields_mask}},
        )

    samples = tuple(
        _decode_row(
            data,
            header_size + i * row_width,
            columns,
            sample_interval,
            _phase_for_index(phases, i),
        )
        for i in range(decoded_count)
    )

    incomplete = decoded_count < declared_count
    if incomplete:
        logger.warning(
            "shot_incomplete",
            extra={"details": {"shot_id": shot_id, "decoded": decoded_count, "declared": declared_count}},
        )

    return ShotRecord(
        id=shot_id,
        version=version,
        fields_mask=fields_mask,
        declared_sample_count=declared_count,
        sample_count=decoded_count,
        sample_interval=sample_interval,
        profile_id=decode_cstring(data[28:60]),
        profile_name=decode_cstring(data[60:108]),
        timestamp=read_u32(data, 24),
        duration=read_u32(data, 20),
        weight=scaled_or_none(read_u16(data, 108), WEIGHT_SCALE),
        samples=samples,
        phases=phases,
        incomplete=incomplete,
    )
