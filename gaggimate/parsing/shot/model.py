from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gaggimate.parsing.shot.fields import SystemInfo


@dataclass(frozen=True)
class Sample:
    """
    One decoded row of the sample stream.

    Only the columns selected by the shot's fields mask are set; the others
    stay ``None``. Values are in engineering units: milliseconds, °C, bar,
    ml/s and grams.
    """
    elapsed_ms: Optional[int] = None
    target_temp: Optional[float] = None
    current_temp: Optional[float] = None
    target_pressure: Optional[float] = None
    current_pressure: Optional[float] = None
    pump_flow: Optional[float] = None
    target_flow: Optional[float] = None
    puck_flow: Optional[float] = None
    volumetric_flow: Optional[float] = None
    volumetric_weight: Optional[float] = None
    estimated_weight: Optional[float] = None
    puck_resistance: Optional[float] = None
    system_info: Optional[SystemInfo] = None
    phase: Optional[int] = None


@dataclass(frozen=True)
class PhaseTransition:
    sample_index: int
    phase_number: int
    phase_name: str


@dataclass(frozen=True)
class ShotRecord:
    """
    A decoded ``.slog`` file.

    Attributes:
        id: The shot ID the caller asked for.
        version: Header format version.
        fields_mask: Bit mask of the columns present in every sample row.
        declared_sample_count: Sample count stored in the header.
        sample_count: Number of rows actually decoded.
        sample_interval: Milliseconds between samples.
        profile_id: ID of the brewing profile used.
        profile_name: Display name of the brewing profile used.
        timestamp: Unix timestamp (seconds) of the shot start.
        duration: Shot duration in milliseconds.
        weight: Final beverage weight in grams, ``None`` when not recorded.
        samples: Rows in on-disk (time-ascending) order.
        phases: Phase transitions ordered by starting sample index.
        incomplete: ``True`` when fewer rows were present than declared.
    """
    id: str
    version: int
    fields_mask: int
    declared_sample_count: int
    sample_count: int
    sample_interval: int
    profile_id: str
    profile_name: str
    timestamp: int
    duration: int
    weight: Optional[float]
    samples: tuple[Sample, ...]
    phases: tuple[PhaseTransition, ...]
    incomplete: bool
