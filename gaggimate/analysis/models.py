"""
Serialized shape of an analyzed shot.

Field names carry their units and are consumed verbatim by callers, so they
must not be renamed.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class CurvePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    time_seconds: float
    temperature_c: float
    pressure_bar: float
    flow_ml_s: float
    weight_g: float


class PhaseReport(BaseModel):
    name: str
    phase_number: int
    start_time_seconds: float
    duration_seconds: float
    sample_count: int
    avg_temperature_c: float
    avg_pressure_bar: float
    total_flow_ml: float
    samples: List[CurvePoint]


class TemperatureSummary(BaseModel):
    min_celsius: Optional[float] = None
    max_celsius: Optional[float] = None
    average_celsius: Optional[float] = None
    target_average: Optional[float] = None


class PressureSummary(BaseModel):
    min_bar: Optional[float] = None
    max_bar: Optional[float] = None
    average_bar: Optional[float] = None
    peak_time_seconds: Optional[float] = None


class FlowSummary(BaseModel):
    total_volume_ml: float = 0.0
    average_flow_rate_ml_s: float = 0.0
    peak_flow_ml_s: Optional[float] = None
    time_to_first_drip_seconds: Optional[float] = None


class ExtractionSummary(BaseModel):
    extraction_time_seconds: float
    preinfusion_time_seconds: float
    main_extraction_seconds: float


class ShotSummary(BaseModel):
    temperature: TemperatureSummary
    pressure: PressureSummary
    flow: FlowSummary
    extraction: ExtractionSummary


class ShotMetadata(BaseModel):
    shot_id: str
    profile_name: str
    profile_id: str
    timestamp: str
    duration_seconds: float
    final_weight_grams: Optional[float] = None
    sample_count: int
    sample_interval_ms: int
    bluetooth_scale_connected: bool = False
    volumetric_mode: bool = False


class TransformedShot(BaseModel):
    metadata: ShotMetadata
    summary: ShotSummary
    phases: List[PhaseReport]
    full_curve: Optional[List[CurvePoint]] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize, leaving ``full_curve`` out unless it was requested."""
        data = self.model_dump()
        if self.full_curve is None:
            data.pop("full_curve")
        return data
