"""Tests for the .slog shot decoder: header versions, sample columns, phases, truncation."""
import struct

import pytest

from gaggimate.core.errors import FormatError, MagicMismatchError, UnsupportedVersionError
from gaggimate.logging import create_logger, get_ring_handler
from gaggimate.parsing.shot import (
    FIELD_RULES,
    HEADER_SIZE_V4,
    HEADER_SIZE_V5,
    SHOT_MAGIC,
    FieldKind,
    decode_shot,
    fields_in_mask,
)
from gaggimate.parsing.shot.fields import decode_field


def _mask(*kinds: FieldKind) -> int:
    mask = 0
    for kind in kinds:
        mask |= 1 << kind
    return mask


def _build_shot(
    rows: list[tuple[int, ...]],
    fields_mask: int,
    version: int = 5,
    sample_interval: int = 100,
    sample_count: int | None = None,
    duration: int = 30000,
    timestamp: int = 1700000000,
    weight: int = 0,
    profile_id: bytes = b"pid",
    profile_name: bytes = b"Classic",
    transitions: list[tuple[int, int, bytes]] | None = None,
    transition_count: int | None = None,
    magic: int = SHOT_MAGIC,
) -> bytes:
    """Helper: pack a shot header plus sample rows (negative values packed as int16)."""
    header_size = HEADER_SIZE_V5 if version >= 5 else HEADER_SIZE_V4
    declared = len(rows) if sample_count is None else sample_count
    header = bytearray(header_size)
    struct.pack_into(
        "<IBBHHHIIII", header, 0,
        magic, version, 0, header_size, sample_interval, 0, fields_mask, declared, duration, timestamp,
    )
    header[28:28 + len(profile_id)] = profile_id
    header[60:60 + len(profile_name)] = profile_name
    struct.pack_into("<H", header, 108, weight)
    if version >= 5 and transitions:
        for i, (sample_index, phase_number, name) in enumerate(transitions):
            offset = 110 + i * 29
            struct.pack_into("<HB", header, offset, sample_index, phase_number)
            header[offset + 4:offset + 4 + len(name)] = name
        header[458] = len(transitions) if transition_count is None else transition_count
    body = b"".join(
        b"".join(struct.pack("<h" if value < 0 else "<H", value) for value in row)
        for row in rows
    )
    return bytes(header) + body


BASIC_MASK = _mask(
    FieldKind.TICK,
    FieldKind.CURRENT_TEMP,
    FieldKind.CURRENT_PRESSURE,
    FieldKind.PUCK_FLOW,
    FieldKind.VOLUMETRIC_WEIGHT,
)


def test_magic_spells_shot():
    assert struct.pack("<I", SHOT_MAGIC) == b"SHOT"


def test_all_field_kinds_have_rules():
    for kind in FieldKind:
        assert kind in FIELD_RULES, f"FieldKind {kind.name} missing from FIELD_RULES"


def test_field_kinds_cover_bits_0_to_12():
    assert sorted(int(kind) for kind in FieldKind) == list(range(13))


def test_scale_table():
    expected = {
        FieldKind.TARGET_TEMP: 10,
        FieldKind.CURRENT_TEMP: 10,
        FieldKind.TARGET_PRESSURE: 10,
        FieldKind.CURRENT_PRESSURE: 10,
        FieldKind.PUMP_FLOW: 100,
        FieldKind.TARGET_FLOW: 100,
        FieldKind.PUCK_FLOW: 100,
        FieldKind.VOLUMETRIC_FLOW: 100,
        FieldKind.VOLUMETRIC_WEIGHT: 10,
        FieldKind.ESTIMATED_WEIGHT: 10,
        FieldKind.PUCK_RESISTANCE: 100,
    }
    for kind, scale in expected.items():
        assert FIELD_RULES[kind].scale == scale


def test_flow_columns_are_signed():
    signed = {kind for kind, rule in FIELD_RULES.items() if rule.signed}
    assert signed == {FieldKind.PUMP_FLOW, FieldKind.TARGET_FLOW, FieldKind.PUCK_FLOW, FieldKind.VOLUMETRIC_FLOW}


def test_fields_in_mask_ascending_order():
    assert fields_in_mask(0b1010010101) == (
        FieldKind.TICK,
        FieldKind.CURRENT_TEMP,
        FieldKind.CURRENT_PRESSURE,
        FieldKind.PUCK_FLOW,
        FieldKind.VOLUMETRIC_WEIGHT,
    )


def test_decode_field_scaled_value():
    assert decode_field(FieldKind.VOLUMETRIC_WEIGHT, 125, 100) == 12.5


def test_decode_too_small():
    with pytest.raises(FormatError):
        decode_shot(b"\x00" * 10, "1")


def test_decode_50_bytes_claiming_v4():
    data = _build_shot([], BASIC_MASK, version=4)[:50]
    with pytest.raises(FormatError):
        decode_shot(data, "1")


def test_decode_wrong_magic():
    data = _build_shot([], BASIC_MASK, magic=0x58444953)
    with pytest.raises(MagicMismatchError):
        decode_shot(data, "1")


def test_decode_v5_header_too_small():
    data = _build_shot([], BASIC_MASK, version=5)[:300]
    with pytest.raises(UnsupportedVersionError):
        decode_shot(data, "1")


def test_unsupported_version_is_format_error():
    assert issubclass(UnsupportedVersionError, FormatError)


def test_decode_v5_basic_samples():
    rows = [
        (0, 930, 20, 0, 0),
        (1, 932, 45, 150, 12),
        (2, 935, 90, 210, 36),
    ]
    shot = decode_shot(_build_shot(rows, BASIC_MASK, sample_interval=100), "12")
    assert shot.id == "12"
    assert shot.version == 5
    assert shot.sample_count == 3
    assert shot.declared_sample_count == 3
    assert shot.incomplete is False
    assert [s.elapsed_ms for s in shot.samples] == [0, 100, 200]
    assert [s.current_temp for s in shot.samples] == [93.0, 93.2, 93.5]
    assert [s.current_pressure for s in shot.samples] == [2.0, 4.5, 9.0]
    assert [s.puck_flow for s in shot.samples] == [0.0, 1.5, 2.1]
    assert [s.volumetric_weight for s in shot.samples] == [0.0, 1.2, 3.6]


def test_decode_tick_is_not_cumulative():
    rows = [(5,), (3,), (10,)]
    shot = decode_shot(_build_shot(rows, _mask(FieldKind.TICK), sample_interval=250), "1")
    assert [s.elapsed_ms for s in shot.samples] == [1250, 750, 2500]


def test_decode_tick_with_zero_interval_defaults_to_100ms():
    shot = decode_shot(_build_shot([(4,)], _mask(FieldKind.TICK), sample_interval=0), "1")
    assert shot.samples[0].elapsed_ms == 400
    assert shot.sample_interval == 0


def test_decode_unselected_fields_are_none():
    shot = decode_shot(_build_shot([(1, 930, 20, 0, 0)], BASIC_MASK), "1")
    sample = shot.samples[0]
    assert sample.target_temp is None
    assert sample.pump_flow is None
    assert sample.system_info is None
    assert sample.puck_resistance is None


def test_decode_negative_flow():
    mask = _mask(FieldKind.TICK, FieldKind.PUMP_FLOW, FieldKind.PUCK_FLOW)
    shot = decode_shot(_build_shot([(0, -25, -5)], mask), "1")
    assert shot.samples[0].pump_flow == -0.25
    assert shot.samples[0].puck_flow == -0.05


def test_decode_all_scaled_fields():
    mask = _mask(*[kind for kind in FieldKind if kind not in (FieldKind.TICK, FieldKind.SYSTEM_INFO)])
    row = (935, 930, 90, 88, 420, 400, 210, 220, 365, 360, 1234)
    sample = decode_shot(_build_shot([row], mask), "1").samples[0]
    assert sample.target_temp == 93.5
    assert sample.current_temp == 93.0
    assert sample.target_pressure == 9.0
    assert sample.current_pressure == 8.8
    assert sample.pump_flow == 4.2
    assert sample.target_flow == 4.0
    assert sample.puck_flow == 2.1
    assert sample.volumetric_flow == 2.2
    assert sample.volumetric_weight == 36.5
    assert sample.estimated_weight == 36.0
    assert sample.puck_resistance == 12.34


def test_decode_system_info():
    mask = _mask(FieldKind.TICK, FieldKind.SYSTEM_INFO)
    info = decode_shot(_build_shot([(0, 0b10101)], mask), "1").samples[0].system_info
    assert info.raw == 0b10101
    assert info.shot_started_volumetric is True
    assert info.currently_volumetric is False
    assert info.bluetooth_scale_connected is True
    assert info.volumetric_available is False
    assert info.extended_recording is True


def test_decode_header_fields():
    data = _build_shot(
        [],
        BASIC_MASK,
        sample_interval=200,
        duration=27500,
        timestamp=1712345678,
        weight=365,
        profile_id=b"prof-9",
        profile_name=b"Blooming Espresso",
    )
    shot = decode_shot(data, "9")
    assert shot.sample_interval == 200
    assert shot.fields_mask == BASIC_MASK
    assert shot.duration == 27500
    assert shot.timestamp == 1712345678
    assert shot.weight == 36.5
    assert shot.profile_id == "prof-9"
    assert shot.profile_name == "Blooming Espresso"


def test_decode_zero_weight_is_none():
    shot = decode_shot(_build_shot([], BASIC_MASK, weight=0), "1")
    assert shot.weight is None


def test_decode_truncated_samples_sets_incomplete():
    rows = [(i, 930, 90, 200, 10 * i) for i in range(4)]
    data = _build_shot(rows, BASIC_MASK, sample_count=10) + b"\x01\x02\x03"
    shot = decode_shot(data, "5")
    assert shot.sample_count == 4
    assert shot.declared_sample_count == 10
    assert len(shot.samples) == 4
    assert shot.incomplete is True


def test_decode_truncated_samples_logs_warning():
    handler = get_ring_handler(create_logger())
    handler.clear()
    rows = [(i, 930, 90, 200, 0) for i in range(2)]
    decode_shot(_build_shot(rows, BASIC_MASK, sample_count=5), "77")
    events = [e for e in handler.get_events() if e["event"] == "shot_incomplete"]
    assert len(events) == 1
    assert events[0]["level"] == "WARNING"
    assert events[0]["details"] == {"shot_id": "77", "decoded": 2, "declared": 5}


def test_decode_extra_rows_beyond_declared_are_ignored():
    rows = [(i, 930, 90, 200, 0) for i in range(5)]
    shot = decode_shot(_build_shot(rows, BASIC_MASK, sample_count=3), "1")
    assert shot.sample_count == 3
    assert shot.incomplete is False


def test_decode_unknown_mask_bits_widen_rows():
    mask = _mask(FieldKind.TICK) | (1 << 13)
    rows = [(1, 0xFFFF), (2, 0xFFFF)]
    shot = decode_shot(_build_shot(rows, mask), "1")
    assert [s.elapsed_ms for s in shot.samples] == [100, 200]


def test_decode_empty_mask_yields_no_samples():
    shot = decode_shot(_build_shot([], 0, sample_count=3), "1")
    assert shot.samples == ()
    assert shot.incomplete is True


def test_decode_phase_transitions_and_sample_phases():
    rows = [(i, 930, 20, 0, 0) for i in range(6)]
    transitions = [(0, 1, b"Preinfusion"), (2, 2, b"Soak"), (4, 3, b"Brew")]
    shot = decode_shot(_build_shot(rows, BASIC_MASK, transitions=transitions), "1")
    assert [(p.sample_index, p.phase_number, p.phase_name) for p in shot.phases] == [
        (0, 1, "Preinfusion"),
        (2, 2, "Soak"),
        (4, 3, "Brew"),
    ]
    assert [s.phase for s in shot.samples] == [1, 1, 2, 2, 3, 3]


def test_decode_samples_before_first_transition_have_no_phase():
    rows = [(i, 930, 20, 0, 0) for i in range(3)]
    shot = decode_shot(_build_shot(rows, BASIC_MASK, transitions=[(1, 4, b"Brew")]), "1")
    assert [s.phase for s in shot.samples] == [None, 4, 4]


def test_decode_phase_name_max_length():
    name = b"A" * 25
    shot = decode_shot(_build_shot([], BASIC_MASK, transitions=[(0, 1, name)]), "1")
    assert shot.phases[0].phase_name == "A" * 25


def test_decode_transition_count_capped_at_12():
    transitions = [(i, i, f"Phase {i}".encode()) for i in range(12)]
    data = _build_shot([], BASIC_MASK, transitions=transitions, transition_count=40)
    shot = decode_shot(data, "1")
    assert len(shot.phases) == 12
    assert shot.phases[-1].phase_name == "Phase 11"


def test_decode_v4_has_no_phase_table():
    rows = [(i, 930, 20, 0, 0) for i in range(2)]
    shot = decode_shot(_build_shot(rows, BASIC_MASK, version=4), "1")
    assert shot.version == 4
    assert shot.phases == ()
    assert [s.phase for s in shot.samples] == [None, None]
    assert [s.elapsed_ms for s in shot.samples] == [0, 100]


def test_decode_does_not_modify_buffer():
    data = bytearray(_build_shot([(0, 930, 20, 0, 0)], BASIC_MASK))
    snapshot = bytes(data)
    decode_shot(data, "1")
    assert bytes(data) == snapshot


def test_shot_record_is_frozen():
    shot = decode_shot(_build_shot([], BASIC_MASK), "1")
    with pytest.raises(AttributeError):
        shot.incomplete = True
