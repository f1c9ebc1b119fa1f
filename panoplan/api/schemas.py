"""API request/response schemas."""

from __future__ import annotations
from pydantic import BaseModel

from panoplan.models import (
    Calibration, CalibrationState, ImageStatistics, OpeningStatistics,
    OpeningType, Point3D, PolygonCandidate, Opening, Surface,
)
from panoplan.models.annotations import CamelModel
from panoplan.core.store import ClearResult
from panoplan.services.project_service import InteractionMode


class ImageCreate(BaseModel):
    name: str


class ModeRequest(BaseModel):
    mode: InteractionMode


class ClickRequest(BaseModel):
    """A click already resolved to a point on the panorama sphere."""
    position: Point3D


class MoveRequest(BaseModel):
    position: Point3D


class MarkerRequest(BaseModel):
    image_index: int
    position: Point3D


class FinishCalibrationRequest(BaseModel):
    image_index: int
    physical_length: float | None = None


class CancelCalibrationRequest(BaseModel):
    image_index: int


class CalibrationResponse(CamelModel):
    """Serialised with camelCase keys, like the nested calibration."""
    calibration: Calibration
    state: CalibrationState
    unit: str
    reference_label: str | None = None     # Text shown on the calibration line


class OpeningCreate(BaseModel):
    type: OpeningType
    points: list[Point3D]


class OpeningUpdate(BaseModel):
    name: str | None = None
    material: str | None = None
    notes: str | None = None


class ClearResponse(BaseModel):
    result: ClearResult


class CopySurfaceRequest(BaseModel):
    surface_id: int | None = None


class DetectionRequest(BaseModel):
    """Polygon candidates from an external image-analysis service."""
    candidates: list[PolygonCandidate]
    image_width: float | None = None
    image_height: float | None = None


class DetectionResponse(BaseModel):
    surface: Surface | None
    openings: list[Opening]


class StatisticsResponse(BaseModel):
    annotations: ImageStatistics
    openings: OpeningStatistics


class ImportResponse(BaseModel):
    image_count: int
    is_calibrated: bool
