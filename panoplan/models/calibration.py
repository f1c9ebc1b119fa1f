"""Calibration state — abstract 3D units to physical length."""

from __future__ import annotations
from enum import Enum

from .annotations import CamelModel


class CalibrationState(str, Enum):
    UNCALIBRATED = "uncalibrated"
    COLLECTING = "collecting"            # 1 marker placed
    READY_TO_FINISH = "ready_to_finish"  # 2 markers placed
    CALIBRATED = "calibrated"


class Calibration(CamelModel):
    """Process-wide scale between 3D units and centimeters."""
    reference_unit_distance: float = 0.0
    reference_physical_length: float = 0.0
    scale: float = 1.0      # Centimeters per 3D unit
    is_calibrated: bool = False
