"""
Shot analysis: turns a decoded shot log into summary statistics and
per-phase reports with units spelled out in every field name.
"""
from gaggimate.analysis.models import CurvePoint, PhaseReport, ShotMetadata, ShotSummary, TransformedShot
from gaggimate.analysis.transform import analyze_shot, build_phase_reports, integrate_flow, summarize

__all__ = [
    "CurvePoint",
    "PhaseReport",
    "ShotMetadata",
    "ShotSummary",
    "TransformedShot",
    "analyze_shot",
    "build_phase_reports",
    "integrate_flow",
    "summarize",
]
