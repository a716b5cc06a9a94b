"""
Derive summary statistics and phase reports from a decoded shot.

Everything here is a pure function of the ``ShotRecord`` passed in. A sample
that lacks a column reads as zero for that column, the same as a zero reading.
"""
from __future__ import annotations

import datetime as dt
import math
from typing import Iterable, Optional, Sequence

from gaggimate.analysis.models import (
    CurvePoint,
    ExtractionSummary,
    FlowSummary,
    PhaseReport,
    PressureSummary,
    ShotMetadata,
    ShotSummary,
    TemperatureSummary,
    TransformedShot,
)
from gaggimate.parsing.shot import PhaseTransition, Sample, ShotRecord

FALLBACK_PHASE_NAME = "extraction"
PREINFUSION_MARKERS = ("preinfusion", "soak")

# First-drip thresholds.
DRIP_WEIGHT_G = 0.5
DRIP_FLOW_ML_S = 0.1


def _or_zero(value: Optional[float]) -> float:
    return value or 0


def _seconds(sample: Sample) -> float:
    return _or_zero(sample.elapsed_ms) / 1000


def round_tenth(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def integrate_flow(samples: Iterable[Sample], interval_ms: int) -> float:
    """Volume in ml as the rectangular sum of puck flow over the sample interval."""
    interval_seconds = interval_ms / 1000
    total = sum(_or_zero(sample.puck_flow) * interval_seconds for sample in samples)
    return round_tenth(total)


def curve_point(sample: Sample) -> CurvePoint:
    return CurvePoint(
        time_seconds=_seconds(sample),
        temperature_c=_or_zero(sample.current_temp),
        pressure_bar=_or_zero(sample.current_pressure),
        flow_ml_s=_or_zero(sample.puck_flow),
        weight_g=_or_zero(sample.volumetric_weight),
    )


def _representative_points(samples: Sequence[Sample]) -> list[CurvePoint]:
    # First, middle and last; short phases collapse duplicate indices.
    count = len(samples)
    indices = sorted({0, count // 2, count - 1})
    return [curve_point(samples[i]) for i in indices]


def _phase_report(
    name: str,
    phase_number: int,
    samples: Sequence[Sample],
    interval_ms: int,
    start_time: float,
    duration: float,
) -> PhaseReport:
    temperatures = [t for t in (_or_zero(s.current_temp) for s in samples) if t > 0]
    pressures = [_or_zero(s.current_pressure) for s in samples]
    avg_temperature = _mean(temperatures)
    avg_pressure = _mean(pressures)
    return PhaseReport(
        name=name,
        phase_number=phase_number,
        start_time_seconds=start_time,
        duration_seconds=duration,
        sample_count=len(samples),
        avg_temperature_c=round_tenth(avg_temperature) if avg_temperature is not None else 0,
        avg_pressure_bar=round_tenth(avg_pressure) if avg_pressure is not None else 0,
        total_flow_ml=integrate_flow(samples, interval_ms),
        samples=_representative_points(samples),
    )


def _phase_end_index(phases: Sequence[PhaseTransition], position: int, sample_count: int) -> int:
    if position < len(phases) - 1:
        return phases[position + 1].sample_index
    return sample_count


def build_phase_reports(shot: ShotRecord) -> list[PhaseReport]:
    """
    Split the sample stream at each phase transition.

    Transitions whose sample range is empty are skipped. When no report can
    be built but samples exist, one ``"extraction"`` phase covers the shot.
    """
    samples = shot.samples
    reports: list[PhaseReport] = []
    for position, transition in enumerate(shot.phases):
        end = _phase_end_index(shot.phases, position, len(samples))
        phase_samples = samples[transition.sample_index:end]
        if not phase_samples:
            continue
        start_time = _seconds(phase_samples[0])
        end_time = _seconds(phase_samples[-1])
        reports.append(
            _phase_report(
                transition.phase_name,
                transition.phase_number,
                phase_samples,
                shot.sample_interval,
                start_time,
                end_time - start_time,
            )
        )

    if not reports and samples:
        reports.append(
            _phase_report(
                FALLBACK_PHASE_NAME,
                0,
                samples,
                shot.sample_interval,
                0,
                shot.duration / 1000,
            )
        )
    return reports


def preinfusion_time(shot: ShotRecord) -> float:
    """End time (s) of the last preinfusion or soak phase, ``0`` when there is none."""
    result = 0.0
    for position, transition in enumerate(shot.phases):
        name = transition.phase_name.lower()
        if not any(marker in name for marker in PREINFUSION_MARKERS):
            continue
        last_index = _phase_end_index(shot.phases, position, len(shot.samples)) - 1
        end_time = _seconds(shot.samples[last_index]) if 0 <= last_index < len(shot.samples) else 0.0
        result = max(result, end_time)
    return result


def _time_to_first_drip(samples: Sequence[Sample]) -> Optional[float]:
    for sample in samples:
        if _or_zero(sample.volumetric_weight) > DRIP_WEIGHT_G or _or_zero(sample.puck_flow) > DRIP_FLOW_ML_S:
            return _seconds(sample)
    return None


def summarize(shot: ShotRecord) -> ShotSummary:
    """
    Compute the shot-wide statistics.

    Statistics over an empty set of values are ``None``: no positive
    temperature readings, or no samples at all for pressure and peak flow.
    """
    samples = shot.samples

    temperatures = [t for t in (_or_zero(s.current_temp) for s in samples) if t > 0]
    target_temperatures = [t for t in (_or_zero(s.target_temp) for s in samples) if t > 0]

    pressures = [_or_zero(s.current_pressure) for s in samples]
    max_pressure = max(pressures) if pressures else None
    peak_time = _seconds(samples[pressures.index(max_pressure)]) if pressures else None

    flows = [_or_zero(s.puck_flow) for s in samples]
    positive_flows = [f for f in flows if f > 0]

    extraction_time = shot.duration / 1000
    preinfusion = preinfusion_time(shot)

    return ShotSummary(
        temperature=TemperatureSummary(
            min_celsius=min(temperatures) if temperatures else None,
            max_celsius=max(temperatures) if temperatures else None,
            average_celsius=_mean(temperatures),
            target_average=_mean(target_temperatures),
        ),
        pressure=PressureSummary(
            min_bar=min(pressures) if pressures else None,
            max_bar=max_pressure,
            average_bar=_mean(pressures),
            peak_time_seconds=peak_time,
        ),
        flow=FlowSummary(
            total_volume_ml=integrate_flow(samples, shot.sample_interval),
            average_flow_rate_ml_s=_mean(positive_flows) or 0.0,
            peak_flow_ml_s=max(flows) if flows else None,
            time_to_first_drip_seconds=_time_to_first_drip(samples),
        ),
        extraction=ExtractionSummary(
            extraction_time_seconds=extraction_time,
            preinfusion_time_seconds=preinfusion,
            main_extraction_seconds=extraction_time - preinfusion,
        ),
    )


def _iso_timestamp(timestamp: int) -> str:
    moment = dt.datetime.fromtimestamp(timestamp, dt.UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def analyze_shot(shot: ShotRecord, include_full_curve: bool = False) -> TransformedShot:
    """
    Turn a decoded shot into metadata, summary statistics and phase reports.

    Args:
        shot: The decoded shot log.
        include_full_curve: Also project every sample into ``full_curve``.
            Off by default since a shot carries hundreds of samples.

    Returns:
        The analyzed shot.
    """
    first_info = shot.samples[0].system_info if shot.samples else None
    metadata = ShotMetadata(
        shot_id=shot.id,
        profile_name=shot.profile_name,
        profile_id=shot.profile_id,
        timestamp=_iso_timestamp(shot.timestamp),
        duration_seconds=shot.duration / 1000,
        final_weight_grams=shot.weight,
        sample_count=shot.sample_count,
        sample_interval_ms=shot.sample_interval,
        bluetooth_scale_connected=first_info.bluetooth_scale_connected if first_info else False,
        volumetric_mode=first_info.shot_started_volumetric if first_info else False,
    )
    full_curve = [curve_point(sample) for sample in shot.samples] if include_full_curve else None
    return TransformedShot(
        metadata=metadata,
        summary=summarize(shot),
        phases=build_phase_reports(shot),
        full_curve=full_curve,
    )
