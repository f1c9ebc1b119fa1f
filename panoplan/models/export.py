"""Layout of the persisted JSON export document."""

from __future__ import annotations

from .annotations import (
    CamelModel, AnnotationPoint, Line, Surface, Opening, ImageStatistics,
)


class ImageInfo(CamelModel):
    id: int
    name: str


class ExportSettings(CamelModel):
    show_helpers: bool = True
    point_size: float = 3.0
    line_width: float = 2.0
    scale: float = 1.0
    is_calibrated: bool = False
    calibration_value: float = 80
    reference_unit_distance: float = 0.0


class ImageExport(CamelModel):
    image_name: str
    image_id: int
    points: list[AnnotationPoint] = []
    lines: list[Line] = []
    surfaces: list[Surface] = []
    openings: list[Opening] = []
    statistics: ImageStatistics = ImageStatistics()
    # Id counters, so ids deleted before export are not handed out again
    next_point_id: int = 0
    next_line_id: int = 0
    next_surface_id: int = 0
    next_opening_id: int = 0


class ExportSummary(CamelModel):
    total_points: int = 0
    total_lines: int = 0
    total_surfaces: int = 0
    total_openings: int = 0
    images_with_data: int = 0


class ExportDocument(CamelModel):
    """Whole-session export: every image's annotations plus settings."""
    version: str = "2.0"
    timestamp: str
    total_images: int = 0
    images: list[ImageInfo] = []
    settings: ExportSettings = ExportSettings()
    image_data: dict[int, ImageExport] = {}
    summary: ExportSummary = ExportSummary()
